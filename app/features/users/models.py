"""
User record.

Users log in by e-mail and carry one of three fixed roles. Organization
scoped roles must point at an organization; the super admin never does.
"""
from pydantic import AwareDatetime, Field, model_validator
import enum

from app.core.entities import Record


class UserRole(str, enum.Enum):
    """Permission levels, widest first."""
    SUPER_ADMIN = "super_admin"
    ORG_ADMIN = "org_admin"
    ORG_USER = "org_user"


class User(Record):
    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole
    organization_id: str | None = None
    created_at: AwareDatetime
    updated_at: AwareDatetime

    @model_validator(mode="after")
    def check_organization(self) -> "User":
        if self.role == UserRole.SUPER_ADMIN and self.organization_id is not None:
            raise ValueError("super_admin users cannot belong to an organization")
        if self.role != UserRole.SUPER_ADMIN and not self.organization_id:
            raise ValueError(f"{self.role.value} users require an organization")
        return self

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role.value})>"
