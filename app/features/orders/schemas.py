"""
Pydantic schemas for order requests.

``user_id`` and ``organization_id`` are optional on input because the
access policy may fill them in from the caller's identity.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.features.orders.models import OrderStatus


class OrderBase(BaseModel):
    """Base order schema."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    status: OrderStatus = OrderStatus.PENDING

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderCreate(OrderBase):
    """Schema for creating an order."""
    user_id: str | None = None
    organization_id: str | None = None


class OrderUpdate(BaseModel):
    """Schema for updating an order."""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    status: OrderStatus | None = None
    user_id: str | None = None
    organization_id: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderStatusCounts(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
