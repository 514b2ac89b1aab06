"""
Entity store: the in-memory User, Organization and Order collections.

Every mutation is applied in memory first, so later reads in the process see
it at once, and is then followed by a full persist through the fallback
chain. Persistence faults are logged by the chain and never reach callers.

Outcomes:
- create: the new record, or ``ValidationFailure`` before anything changes
- update: the merged record, ``None`` for an unknown id, or ``ValidationFailure``
- delete: ``True``/``False`` for found/not found
"""
import asyncio
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.core.entities import EntityKind, Record, generate_id, next_timestamp, utcnow
from app.core.errors import ValidationFailure
from app.core.persistence import Dataset, FallbackChain
from app.features.orders.models import Order
from app.features.organizations.models import Organization
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


RECORD_TYPES: Dict[EntityKind, Type[Record]] = {
    EntityKind.USERS: User,
    EntityKind.ORGANIZATIONS: Organization,
    EntityKind.ORDERS: Order,
}

# Assigned by the store, never taken from callers
MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})

RecordT = TypeVar("RecordT", bound=Record)
Fields = Dict[str, Any] | BaseModel


class Collection(Generic[RecordT]):
    """Ordered records of one kind plus construction and merge helpers."""

    def __init__(self, kind: EntityKind, record_type: Type[RecordT]):
        self.kind = kind
        self.record_type = record_type
        self._records: List[RecordT] = []

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> List[RecordT]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[RecordT]:
        return next((record for record in self._records if record.id == record_id), None)

    def filter(self, predicate: Callable[[RecordT], bool]) -> List[RecordT]:
        return [record for record in self._records if predicate(record)]

    def load(self, records: Iterable[RecordT]) -> None:
        self._records = list(records)

    def _check_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        unknown = [key for key in fields if key not in self.record_type.model_fields]
        if unknown:
            raise ValidationFailure({key: "Unknown field" for key in unknown})
        return {key: value for key, value in fields.items() if key not in MANAGED_FIELDS}

    def _validate(self, data: Dict[str, Any]) -> RecordT:
        try:
            return self.record_type.model_validate(data)
        except ValidationError as e:
            raise ValidationFailure.from_pydantic(e) from e

    def build(self, fields: Dict[str, Any]) -> RecordT:
        """Validate a brand new record with a fresh id and equal timestamps."""
        now = utcnow()
        data = self._check_fields(fields)
        data.update(id=generate_id(), created_at=now, updated_at=now)
        return self._validate(data)

    def merge(self, existing: RecordT, changes: Dict[str, Any]) -> RecordT:
        """Validate ``changes`` laid over ``existing`` with a refreshed update time."""
        data = existing.fields()
        data.update(self._check_fields(changes))
        data["updated_at"] = next_timestamp(existing.updated_at)
        return self._validate(data)

    def append(self, record: RecordT) -> None:
        self._records.append(record)

    def replace(self, record: RecordT) -> None:
        self._records = [record if item.id == record.id else item for item in self._records]

    def remove(self, predicate: Callable[[RecordT], bool]) -> List[RecordT]:
        removed = [record for record in self._records if predicate(record)]
        if removed:
            self._records = [record for record in self._records if not predicate(record)]
        return removed


def _as_fields(fields: Fields, partial: bool) -> Dict[str, Any]:
    if isinstance(fields, BaseModel):
        return fields.model_dump(exclude_unset=partial)
    return dict(fields)


class EntityStore:
    """
    Owner of the three collections.

    Construct once per process, then ``await store.initialize()`` before any
    read; other components ``await store.wait_until_ready()``.
    """

    def __init__(self, chain: FallbackChain):
        self._chain = chain
        self.users: Collection[User] = Collection(EntityKind.USERS, User)
        self.organizations: Collection[Organization] = Collection(EntityKind.ORGANIZATIONS, Organization)
        self.orders: Collection[Order] = Collection(EntityKind.ORDERS, Order)
        self._ready = asyncio.Event()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load every collection through the fallback chain and re-persist it."""
        log.info("Initializing entity store...")
        dataset = await self._chain.initialize()
        self._load(dataset)
        self._ready.set()
        log.info("Entity store ready: %s", self.counts())

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    async def wait_until_ready(self) -> None:
        await self._ready.wait()

    def _load(self, dataset: Dataset) -> None:
        for kind, records in dataset.items():
            self.collection(kind).load(records)

    def snapshot(self) -> Dataset:
        return {kind: self.collection(kind).all() for kind in EntityKind}

    async def persist(self) -> bool:
        return await self._chain.persist(self.snapshot())

    # ------------------------------------------------------------------
    # Generic CRUD
    # ------------------------------------------------------------------

    def collection(self, kind: EntityKind) -> Collection:
        return {
            EntityKind.USERS: self.users,
            EntityKind.ORGANIZATIONS: self.organizations,
            EntityKind.ORDERS: self.orders,
        }[kind]

    def list(self, kind: EntityKind) -> List[Record]:
        return self.collection(kind).all()

    def get_by_id(self, kind: EntityKind, record_id: str) -> Optional[Record]:
        return self.collection(kind).get(record_id)

    async def create(self, kind: EntityKind, fields: Fields) -> Record:
        collection = self.collection(kind)
        record = collection.build(_as_fields(fields, partial=False))
        self._check_references(record)
        collection.append(record)
        log.info(f"Created {kind.value} {record.id}")
        await self.persist()
        return record

    async def update(self, kind: EntityKind, record_id: str, changes: Fields) -> Optional[Record]:
        collection = self.collection(kind)
        existing = collection.get(record_id)
        if existing is None:
            log.debug(f"Update of unknown {kind.value} {record_id}")
            return None
        record = collection.merge(existing, _as_fields(changes, partial=True))
        self._check_references(record)
        collection.replace(record)
        log.info(f"Updated {kind.value} {record_id}")
        await self.persist()
        return record

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        collection = self.collection(kind)
        if collection.get(record_id) is None:
            log.debug(f"Delete of unknown {kind.value} {record_id}")
            return False
        collection.remove(lambda record: record.id == record_id)
        self._cascade(kind, record_id)
        log.info(f"Deleted {kind.value} {record_id}")
        await self.persist()
        return True

    # ------------------------------------------------------------------
    # Reference rules
    # ------------------------------------------------------------------

    def _check_references(self, record: Record) -> None:
        if isinstance(record, User):
            email = record.email.lower()
            if any(user.email.lower() == email and user.id != record.id for user in self.users.all()):
                raise ValidationFailure({"email": "A user with this email already exists"})
            if record.organization_id and self.organizations.get(record.organization_id) is None:
                raise ValidationFailure({"organization_id": "Organization not found"})
            # Orders stay in the organization of the user who owns them
            if any(order.organization_id != record.organization_id for order in self.orders_by_user(record.id)):
                raise ValidationFailure(
                    {"organization_id": "User still owns orders in another organization"}
                )
        elif isinstance(record, Order):
            if self.organizations.get(record.organization_id) is None:
                raise ValidationFailure({"organization_id": "Organization not found"})
            owner = self.users.get(record.user_id)
            if owner is None:
                raise ValidationFailure({"user_id": "User not found"})
            if owner.organization_id != record.organization_id:
                raise ValidationFailure({"user_id": "User does not belong to the order's organization"})

    def _cascade(self, kind: EntityKind, record_id: str) -> None:
        """Drop records left pointing at a deleted organization or user."""
        if kind == EntityKind.ORGANIZATIONS:
            users = self.users.remove(lambda user: user.organization_id == record_id)
            orders = self.orders.remove(lambda order: order.organization_id == record_id)
            if users or orders:
                log.info(f"Organization {record_id} removed with {len(users)} users and {len(orders)} orders")
        elif kind == EntityKind.USERS:
            orders = self.orders.remove(lambda order: order.user_id == record_id)
            if orders:
                log.info(f"User {record_id} removed with {len(orders)} orders")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        return next((user for user in self.users.all() if user.email.lower() == email), None)

    def users_by_organization(self, organization_id: str) -> List[User]:
        return self.users.filter(lambda user: user.organization_id == organization_id)

    def orders_by_organization(self, organization_id: str) -> List[Order]:
        return self.orders.filter(lambda order: order.organization_id == organization_id)

    def orders_by_user(self, user_id: str) -> List[Order]:
        return self.orders.filter(lambda order: order.user_id == user_id)

    def counts(self) -> Dict[str, int]:
        return {kind.value: len(self.collection(kind)) for kind in EntityKind}

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    async def reset_to_defaults(self) -> None:
        """Replace every collection with the default dataset and persist it."""
        self._load(self._chain.defaults())
        log.warning("Data reset to defaults")
        await self.persist()

    async def clear_all(self) -> None:
        """Empty every collection and persist the empty state."""
        for kind in EntityKind:
            self.collection(kind).load([])
        log.warning("All data cleared")
        await self.persist()
