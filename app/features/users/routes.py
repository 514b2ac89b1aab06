"""
User feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.entities import EntityKind
from app.core.store import EntityStore
from app.features.permissions.dependencies import ensure_authorized
from app.features.permissions.policy import Action, apply_visibility, can_view
from app.features.users.dependencies import get_current_user, get_store
from app.features.users.models import User, UserRole
from app.features.users.schemas import UserCreate, UserUpdate


router = APIRouter(tags=["users"])


def _get_visible_user(store: EntityStore, current_user: User, user_id: str) -> User:
    user = store.users.get(user_id)
    if user is None or not can_view(current_user, EntityKind.USERS, user):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.get("", response_model=list[User])
async def list_users(
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
    organization_id: str | None = None,
    role: UserRole | None = None,
):
    """List the users visible to the current user."""
    users = apply_visibility(current_user, EntityKind.USERS, store.users.all())
    if organization_id:
        users = [user for user in users if user.organization_id == organization_id]
    if role:
        users = [user for user in users if user.role == role]
    return users


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get a user by ID."""
    return _get_visible_user(store, current_user, user_id)


@router.post("", response_model=User, status_code=201)
async def create_user(
    user_data: UserCreate,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Create a user.

    org_admin may only create users inside their own organization and never
    a super_admin.
    """
    ensure_authorized(current_user, Action.CREATE, EntityKind.USERS, user_data)
    return await store.create(EntityKind.USERS, user_data)


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Update a user. org_user may only edit their own name and e-mail."""
    existing = _get_visible_user(store, current_user, user_id)
    changes = update_data.model_dump(exclude_unset=True)
    ensure_authorized(
        current_user, Action.UPDATE, EntityKind.USERS,
        existing.model_copy(update=changes), existing,
    )

    user = await store.update(EntityKind.USERS, user_id, changes)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Delete a user together with the orders they own."""
    user = _get_visible_user(store, current_user, user_id)

    # Prevent self-deletion
    if user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )
    ensure_authorized(current_user, Action.DELETE, EntityKind.USERS, user)

    if not await store.delete(EntityKind.USERS, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return {"message": "User deleted successfully"}
