"""
FastAPI dependencies for the application context and the logged-in user.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, Request, status

from app.core.context import AppContext
from app.core.store import EntityStore
from app.features.auth.session import SessionHolder
from app.features.users.models import User


def get_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_store(
    context: Annotated[AppContext, Depends(get_context)]
) -> EntityStore:
    """Entity store, once its collections are loaded."""
    await context.store.wait_until_ready()
    return context.store


def get_session_holder(
    context: Annotated[AppContext, Depends(get_context)]
) -> SessionHolder:
    return context.session


async def get_current_user(
    session: Annotated[SessionHolder, Depends(get_session_holder)],
    store: Annotated[EntityStore, Depends(get_store)],
) -> User:
    """
    Get the logged-in user, re-read from the store.

    The session keeps a copy of the user taken at login; the stored record
    is authoritative so role or organization changes apply immediately.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    if not session.is_authenticated() or session.current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = store.users.get(session.current_user.id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session user no longer exists",
        )
    return user
