"""
Organization management routes.

Organizations are listed and managed by super admins only; other roles get
an empty list and 404s.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status

from app.core.entities import EntityKind
from app.core.store import EntityStore
from app.features.organizations.models import Organization
from app.features.organizations.schemas import OrganizationCreate, OrganizationUpdate
from app.features.permissions.dependencies import ensure_authorized
from app.features.permissions.policy import Action, apply_visibility, can_view
from app.features.users.dependencies import get_current_user, get_store
from app.features.users.models import User


router = APIRouter(tags=["organizations"])


def _get_visible_organization(store: EntityStore, current_user: User, organization_id: str) -> Organization:
    organization = store.organizations.get(organization_id)
    if organization is None or not can_view(current_user, EntityKind.ORGANIZATIONS, organization):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return organization


@router.get("", response_model=list[Organization])
async def list_organizations(
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """List organizations visible to the current user."""
    return apply_visibility(current_user, EntityKind.ORGANIZATIONS, store.organizations.all())


@router.get("/{organization_id}", response_model=Organization)
async def get_organization(
    organization_id: str,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get an organization by ID."""
    return _get_visible_organization(store, current_user, organization_id)


@router.post("", response_model=Organization, status_code=201)
async def create_organization(
    org_data: OrganizationCreate,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Create a new organization (super admin only)."""
    ensure_authorized(current_user, Action.CREATE, EntityKind.ORGANIZATIONS, org_data)
    return await store.create(EntityKind.ORGANIZATIONS, org_data)


@router.patch("/{organization_id}", response_model=Organization)
async def update_organization(
    organization_id: str,
    update_data: OrganizationUpdate,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Update organization information (super admin only)."""
    existing = _get_visible_organization(store, current_user, organization_id)
    changes = update_data.model_dump(exclude_unset=True)
    ensure_authorized(
        current_user, Action.UPDATE, EntityKind.ORGANIZATIONS,
        existing.model_copy(update=changes), existing,
    )

    organization = await store.update(EntityKind.ORGANIZATIONS, organization_id, changes)
    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return organization


@router.delete("/{organization_id}")
async def delete_organization(
    organization_id: str,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Delete an organization (super admin only).

    Its users and orders are deleted with it.
    """
    organization = _get_visible_organization(store, current_user, organization_id)
    ensure_authorized(current_user, Action.DELETE, EntityKind.ORGANIZATIONS, organization)

    if not await store.delete(EntityKind.ORGANIZATIONS, organization_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return {"message": "Organization deleted successfully"}
