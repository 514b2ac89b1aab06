"""
Organization record.

Organizations are the tenants: users and orders point at them, nothing else
hangs off them.
"""
from pydantic import AwareDatetime, Field

from app.core.entities import Record


class Organization(Record):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=1000)
    created_at: AwareDatetime
    updated_at: AwareDatetime

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name!r})>"
