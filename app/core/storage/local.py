"""
Client-local key-value storage area.

Two implementations share the ``get_item``/``set_item``/``remove_item``
interface: ``LocalStorage`` keeps entries in a SQLAlchemy table so they
survive restarts, ``MemoryStorage`` keeps them for the life of the process.
Failures surface as ``PersistenceUnavailable``.
"""
from typing import Dict, Optional, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database.models import StorageEntry
from app.core.errors import PersistenceUnavailable


class KeyValueStorage(Protocol):
    async def get_item(self, key: str) -> Optional[str]:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...


class LocalStorage:
    """Key-value storage persisted in the ``local_storage`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_item(self, key: str) -> Optional[str]:
        try:
            async with self._session_factory() as session:
                return await session.scalar(
                    select(StorageEntry.value).where(StorageEntry.key == key)
                )
        except SQLAlchemyError as e:
            raise PersistenceUnavailable(f"Failed to read {key!r}: {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                entry = await session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceUnavailable(f"Failed to write {key!r}: {e}") from e

    async def remove_item(self, key: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(StorageEntry).where(StorageEntry.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceUnavailable(f"Failed to remove {key!r}: {e}") from e


class MemoryStorage:
    """Process-lifetime key-value storage."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.items.pop(key, None)
