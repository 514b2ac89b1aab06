"""
Data management routes (super admin only): counts, reset, clear.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from app.core.store import EntityStore
from app.features.permissions.dependencies import require_role
from app.features.users.dependencies import get_store
from app.features.users.models import User, UserRole
from app.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["data-management"])

require_super_admin = require_role(UserRole.SUPER_ADMIN)


@router.get("/counts")
async def get_counts(
    store: Annotated[EntityStore, Depends(get_store)],
    admin: Annotated[User, Depends(require_super_admin)],
):
    """Number of records in each collection."""
    return store.counts()


@router.post("/reset")
async def reset_to_defaults(
    store: Annotated[EntityStore, Depends(get_store)],
    admin: Annotated[User, Depends(require_super_admin)],
):
    """Replace every collection with the default dataset."""
    log.warning(f"User {admin.id} reset all data to defaults")
    await store.reset_to_defaults()
    return store.counts()


@router.post("/clear")
async def clear_all(
    store: Annotated[EntityStore, Depends(get_store)],
    admin: Annotated[User, Depends(require_super_admin)],
):
    """Empty every collection."""
    log.warning(f"User {admin.id} cleared all data")
    await store.clear_all()
    return store.counts()
