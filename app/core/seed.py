"""
Fixed default dataset.

Used when neither the remote blob store nor the local mirror holds a
collection. Identifiers and timestamps are literal so the seed serializes
identically on every run.
"""
from typing import Any, Dict, List

from app.core.entities import EntityKind


DEFAULT_USERS: List[Dict[str, Any]] = [
    {
        "id": "user-1",
        "email": "superadmin@example.com",
        "name": "Super Admin",
        "role": "super_admin",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    },
    {
        "id": "user-2",
        "email": "admin@techcorp.com",
        "name": "Tech Corp Admin",
        "role": "org_admin",
        "organizationId": "org-1",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    },
    {
        "id": "user-3",
        "email": "user@techcorp.com",
        "name": "Tech Corp User",
        "role": "org_user",
        "organizationId": "org-1",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    },
]

DEFAULT_ORGANIZATIONS: List[Dict[str, Any]] = [
    {
        "id": "org-1",
        "name": "Tech Corp",
        "description": "Technology company",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    },
    {
        "id": "org-2",
        "name": "Marketing Inc",
        "description": "Marketing agency",
        "createdAt": "2024-01-02T00:00:00Z",
        "updatedAt": "2024-01-02T00:00:00Z",
    },
]

DEFAULT_ORDERS: List[Dict[str, Any]] = [
    {
        "id": "order-1",
        "title": "Website Development",
        "description": "Create a new company website",
        "status": "in_progress",
        "userId": "user-3",
        "organizationId": "org-1",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    },
    {
        "id": "order-2",
        "title": "Marketing Campaign",
        "description": "Launch social media campaign",
        "status": "pending",
        "userId": "user-3",
        "organizationId": "org-1",
        "createdAt": "2024-01-02T00:00:00Z",
        "updatedAt": "2024-01-02T00:00:00Z",
    },
]


def default_dataset() -> Dict[EntityKind, List[Dict[str, Any]]]:
    """Fresh copy of the seed, keyed by kind, in stored (camelCase) form."""
    return {
        EntityKind.USERS: [dict(record) for record in DEFAULT_USERS],
        EntityKind.ORGANIZATIONS: [dict(record) for record in DEFAULT_ORGANIZATIONS],
        EntityKind.ORDERS: [dict(record) for record in DEFAULT_ORDERS],
    }
