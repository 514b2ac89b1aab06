"""
Pydantic schemas for login, logout and the persisted auth session.
"""
from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.features.users.models import User


INVALID_CREDENTIALS = "InvalidCredentials"


class AuthSession(BaseModel):
    """Session record kept in memory and under the ``auth_session`` storage key."""
    user: User
    is_authenticated: bool
    login_time: AwareDatetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    # Accepted and ignored: passwords are not verified
    password: str = ""


class LoginResult(BaseModel):
    """Outcome of a login attempt; failures are values, not exceptions."""
    success: bool
    user: User | None = None
    error: str | None = None
    reason: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RouteAccess(BaseModel):
    route: str
    allowed: bool
