"""
Route protection built on the access policy.
"""
from typing import Any, Optional
from fastapi import Depends, HTTPException, status

from app.core.entities import EntityKind
from app.core.errors import AccessDenied
from app.features.permissions.policy import Action, authorize
from app.features.users.dependencies import get_current_user
from app.features.users.models import User, UserRole
from app.utils import get_logger


log = get_logger(__name__)


def require_role(*roles: UserRole):
    """
    FastAPI dependency to require one of ``roles``.

    Usage:
        @router.get("/users")
        async def list_users(
            user: User = Depends(require_role(UserRole.SUPER_ADMIN, UserRole.ORG_ADMIN))
        ):
            pass

    Raises:
        HTTPException: 403 if the current user has none of the roles
    """
    async def role_dependency(
        current_user: User = Depends(get_current_user)
    ) -> User:
        if current_user.role not in roles:
            log.debug(f"User {current_user.id} ({current_user.role.value}) lacks roles {[r.value for r in roles]}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(role.value for role in roles)}",
            )
        return current_user

    return role_dependency


def ensure_authorized(
    identity: User,
    action: Action,
    kind: EntityKind,
    record: Any,
    existing: Optional[Any] = None,
) -> None:
    """
    Raise AccessDenied unless the policy allows the action.
    """
    if not authorize(identity, action, kind, record, existing):
        raise AccessDenied(action.value, kind.value)
