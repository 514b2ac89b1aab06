"""
Dashboard statistics scoped to the current user's visibility.
"""
from typing import Annotated
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.core.entities import EntityKind
from app.core.store import EntityStore
from app.features.orders.models import OrderStatus
from app.features.orders.schemas import OrderStatusCounts
from app.features.permissions.policy import apply_visibility
from app.features.users.dependencies import get_current_user, get_store
from app.features.users.models import User, UserRole


router = APIRouter(tags=["dashboard"])


class DashboardStats(BaseModel):
    total_organizations: int
    total_users: int
    orders: OrderStatusCounts

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    store: Annotated[EntityStore, Depends(get_store)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Totals over the records the current user can see."""
    users = apply_visibility(current_user, EntityKind.USERS, store.users.all())
    orders = apply_visibility(current_user, EntityKind.ORDERS, store.orders.all())

    counts = {order_status.value: 0 for order_status in OrderStatus}
    for order in orders:
        counts[order.status.value] += 1

    return DashboardStats(
        # Non super admins always belong to exactly one organization
        total_organizations=len(store.organizations) if current_user.role == UserRole.SUPER_ADMIN else 1,
        total_users=len(users),
        orders=OrderStatusCounts(total=len(orders), **counts),
    )
