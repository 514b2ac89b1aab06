"""
Order management routes.

Ownership fields of orders written by an org_user are always the caller's
own; org_admin orders default to the admin's organization.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.entities import EntityKind
from app.core.store import EntityStore
from app.features.orders.models import Order, OrderStatus
from app.features.orders.schemas import OrderCreate, OrderUpdate
from app.features.permissions.dependencies import ensure_authorized
from app.features.permissions.policy import Action, apply_visibility, can_view, scope_order_fields
from app.features.users.dependencies import get_current_user, get_store
from app.features.users.models import User, UserRole


router = APIRouter(tags=["orders"])


def _get_visible_order(store: EntityStore, current_user: User, order_id: str) -> Order:
    order = store.orders.get(order_id)
    if order is None or not can_view(current_user, EntityKind.ORDERS, order):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    return order


@router.get("", response_model=list[Order])
async def list_orders(
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
    status_filter: Annotated[OrderStatus | None, Query(alias="status")] = None,
    user_id: str | None = None,
):
    """List the orders visible to the current user, optionally by status or owner."""
    orders = apply_visibility(current_user, EntityKind.ORDERS, store.orders.all())
    if status_filter:
        orders = [order for order in orders if order.status == status_filter]
    if user_id:
        orders = [order for order in orders if order.user_id == user_id]
    return orders


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get an order by ID."""
    return _get_visible_order(store, current_user, order_id)


@router.post("", response_model=Order, status_code=201)
async def create_order(
    order_data: OrderCreate,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Create an order."""
    fields = scope_order_fields(current_user, order_data.model_dump())
    ensure_authorized(current_user, Action.CREATE, EntityKind.ORDERS, OrderCreate(**fields))
    return await store.create(EntityKind.ORDERS, fields)


@router.patch("/{order_id}", response_model=Order)
async def update_order(
    order_id: str,
    update_data: OrderUpdate,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Update an order."""
    existing = _get_visible_order(store, current_user, order_id)
    changes = update_data.model_dump(exclude_unset=True)
    if current_user.role == UserRole.ORG_USER:
        changes = scope_order_fields(current_user, changes)
    ensure_authorized(
        current_user, Action.UPDATE, EntityKind.ORDERS,
        existing.model_copy(update=changes), existing,
    )

    order = await store.update(EntityKind.ORDERS, order_id, changes)
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    return order


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Delete an order."""
    order = _get_visible_order(store, current_user, order_id)
    ensure_authorized(current_user, Action.DELETE, EntityKind.ORDERS, order)

    if not await store.delete(EntityKind.ORDERS, order_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found"
        )
    return {"message": "Order deleted successfully"}
