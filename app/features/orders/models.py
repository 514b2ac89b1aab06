"""
Order record owned by one user inside one organization.
"""
from pydantic import AwareDatetime, Field
import enum

from app.core.entities import Record


class OrderStatus(str, enum.Enum):
    """Lifecycle of an order."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Record):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    status: OrderStatus = OrderStatus.PENDING
    user_id: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)
    created_at: AwareDatetime
    updated_at: AwareDatetime

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, title={self.title!r}, status={self.status.value})>"
