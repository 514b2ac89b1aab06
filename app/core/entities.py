"""
Entity kinds and the common base for stored records.

Records are immutable pydantic models. The stored form (blob store files,
local mirror entries, API payloads) uses camelCase keys and leaves out
optional fields that are not set.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from ulid import ULID


class EntityKind(str, enum.Enum):
    """The three collections owned by the entity store."""
    USERS = "users"
    ORGANIZATIONS = "organizations"
    ORDERS = "orders"


def generate_id() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """
    Current time, nudged forward when needed so it is strictly after ``previous``.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class Record(BaseModel):
    """
    Base class for User, Organization and Order records.

    Subclasses declare ``id``, their own fields and ``created_at``/``updated_at``
    in that order so the stored JSON keeps a stable key order.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_storage(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON-ready form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def fields(self) -> Dict[str, Any]:
        """Python-side field values, keyed by attribute name."""
        return self.model_dump()
