"""
Pydantic schemas for user-related requests.

Field names are accepted in snake_case or camelCase.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.features.users.models import UserRole


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreate(UserBase):
    """Schema for creating a new user."""
    role: UserRole
    organization_id: str | None = Field(None, description="Required unless role is super_admin")


class UserUpdate(BaseModel):
    """Schema for updating user information."""
    email: EmailStr | None = None
    name: str | None = Field(None, min_length=1, max_length=255)
    role: UserRole | None = None
    organization_id: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
