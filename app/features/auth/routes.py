"""
Login, logout and session inspection routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.features.auth.schemas import AuthSession, LoginRequest, LoginResult, RouteAccess
from app.features.auth.session import SessionHolder
from app.features.permissions.policy import can_access_route
from app.features.users.dependencies import get_current_user, get_session_holder
from app.features.users.models import User


router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResult)
async def login(
    credentials: LoginRequest,
    session: Annotated[SessionHolder, Depends(get_session_holder)],
):
    """Log in by e-mail. The password is accepted as given."""
    result = await session.login(credentials.email, credentials.password)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=result.model_dump(mode="json", by_alias=True),
        )
    return result


@router.post("/logout")
async def logout(
    session: Annotated[SessionHolder, Depends(get_session_holder)],
):
    """End the current session."""
    await session.logout()
    return {"message": "Logged out"}


@router.get("/me", response_model=AuthSession)
async def get_session(
    user: Annotated[User, Depends(get_current_user)],
    session: Annotated[SessionHolder, Depends(get_session_holder)],
):
    """Current session with the up-to-date user record."""
    current = session.current_session
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return current.model_copy(update={"user": user})


@router.get("/routes", response_model=RouteAccess)
async def check_route(
    path: str,
    user: Annotated[User, Depends(get_current_user)],
):
    """Whether the current user may open a console section such as ``/users``."""
    return RouteAccess(route=path, allowed=can_access_route(user, path))
