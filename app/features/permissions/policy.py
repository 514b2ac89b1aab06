"""
Role-based access control for the console.

Pure functions: given the acting user and a record (or the ownership fields
of a record about to be created), decide whether the action is allowed, and
build the predicates that narrow list queries.

Visibility:
- super_admin: everything
- org_admin: users and orders of their own organization
- org_user: their own user record and the orders they own

Organizations are listed and managed by super_admin only. Mutations follow
visibility: a record may be changed only when it is, and stays, in scope.
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
import enum

from app.core.entities import EntityKind
from app.features.users.models import User, UserRole
from app.utils import get_logger


log = get_logger(__name__)


class Action(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


Predicate = Callable[[Any], bool]


# Console sections and the roles allowed to open them. Unlisted routes are open.
ROUTE_PERMISSIONS: Dict[str, List[UserRole]] = {
    "/dashboard": [UserRole.SUPER_ADMIN, UserRole.ORG_ADMIN, UserRole.ORG_USER],
    "/organizations": [UserRole.SUPER_ADMIN],
    "/users": [UserRole.SUPER_ADMIN, UserRole.ORG_ADMIN],
    "/orders": [UserRole.SUPER_ADMIN, UserRole.ORG_ADMIN, UserRole.ORG_USER],
    "/logs": [UserRole.SUPER_ADMIN, UserRole.ORG_ADMIN],
}


def _deny(_record: Any) -> bool:
    return False


def _allow(_record: Any) -> bool:
    return True


def visibility_filter(
    kind: EntityKind,
    role: UserRole | str,
    organization_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Predicate:
    """
    Predicate selecting the records of ``kind`` visible to an identity.

    Args:
        kind: Entity kind the predicate will be applied to
        role: Role of the acting identity
        organization_id: Organization of the acting identity, if any
        user_id: Identifier of the acting identity

    Returns:
        Callable taking a record (or any object with the ownership attributes)
    """
    role = UserRole(role)
    if role == UserRole.SUPER_ADMIN:
        return _allow

    if kind == EntityKind.ORGANIZATIONS:
        return _deny

    if role == UserRole.ORG_ADMIN:
        if not organization_id:
            return _deny
        return lambda record: getattr(record, "organization_id", None) == organization_id

    if not user_id:
        return _deny
    if kind == EntityKind.USERS:
        return lambda record: getattr(record, "id", None) == user_id
    return lambda record: getattr(record, "user_id", None) == user_id


def filter_for(identity: User, kind: EntityKind) -> Predicate:
    return visibility_filter(kind, identity.role, identity.organization_id, identity.id)


def apply_visibility(identity: Optional[User], kind: EntityKind, records: Iterable[Any]) -> List[Any]:
    """The subset of ``records`` the identity may see; nothing without an identity."""
    if identity is None:
        return []
    predicate = filter_for(identity, kind)
    return [record for record in records if predicate(record)]


def can_view(identity: Optional[User], kind: EntityKind, record: Any) -> bool:
    return identity is not None and filter_for(identity, kind)(record)


def _check_user_mutation(identity: User, action: Action, record: Any, existing: Any) -> bool:
    in_scope = filter_for(identity, EntityKind.USERS)

    if identity.role == UserRole.ORG_USER:
        # Profile edits only: no new users, no deletes, no role or organization changes
        if action != Action.UPDATE or existing is None:
            return False
        return (
            in_scope(existing)
            and getattr(record, "id", None) == identity.id
            and getattr(record, "role", None) == existing.role
            and getattr(record, "organization_id", None) == existing.organization_id
        )

    if getattr(record, "role", None) == UserRole.SUPER_ADMIN:
        return False
    return in_scope(record) and (existing is None or in_scope(existing))


def authorize(
    identity: Optional[User],
    action: Action,
    kind: EntityKind,
    record: Any,
    existing: Any = None,
) -> bool:
    """
    Decide whether ``identity`` may perform ``action`` on ``record``.

    Args:
        identity: Acting user, None when nobody is logged in
        action: create / read / update / delete
        kind: Entity kind of the record
        record: Candidate record. For create, the fields about to be stored;
            for update, the record as it would look after the change
        existing: For update, the record as currently stored

    Returns:
        True if the action is allowed
    """
    if identity is None:
        return False

    if identity.role == UserRole.SUPER_ADMIN:
        log.debug(f"User {identity.id} is super_admin - granted {action.value} on {kind.value}")
        return True

    if action == Action.READ:
        allowed = can_view(identity, kind, record)
    elif kind == EntityKind.ORGANIZATIONS:
        allowed = False
    elif kind == EntityKind.USERS:
        allowed = _check_user_mutation(identity, action, record, existing)
    else:
        in_scope = filter_for(identity, kind)
        allowed = in_scope(record) and (existing is None or in_scope(existing))

    if allowed:
        log.debug(f"User {identity.id} granted {action.value} on {kind.value}")
    else:
        log.debug(f"User {identity.id} denied {action.value} on {kind.value}")
    return allowed


def scope_order_fields(identity: User, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pin the ownership fields of an order written by ``identity``.

    org_user orders always belong to the caller and the caller's
    organization, whatever was supplied. org_admin orders default to the
    admin's organization when none is given.
    """
    scoped = dict(fields)
    if identity.role == UserRole.ORG_USER:
        scoped["user_id"] = identity.id
        scoped["organization_id"] = identity.organization_id
    elif identity.role == UserRole.ORG_ADMIN and not scoped.get("organization_id"):
        scoped["organization_id"] = identity.organization_id
    return scoped


def can_access_route(identity: Optional[User], route: str) -> bool:
    """Whether the identity may open a console section."""
    if identity is None:
        return False
    allowed_roles: Optional[Sequence[UserRole]] = ROUTE_PERMISSIONS.get(route)
    if allowed_roles is None:
        return True
    return identity.role in allowed_roles
