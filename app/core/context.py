"""
Per-process application context.

Built once at startup and handed to every consumer (routes reach it through
``request.app.state.context``), instead of module-level singletons.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from app.core import config
from app.core.database.engine import create_engine, create_session_factory, init_db
from app.core.persistence import FallbackChain
from app.core.storage.blob import BlobStore, HttpBlobStore, JsonFileBlobStore, MemoryBlobStore
from app.core.storage.local import KeyValueStorage, LocalStorage, MemoryStorage
from app.core.storage.mirror import LocalMirror
from app.core.store import RECORD_TYPES, EntityStore
from app.features.auth.session import SessionHolder
from app.utils import get_logger


log = get_logger(__name__)


@dataclass
class AppContext:
    store: EntityStore
    session: SessionHolder
    chain: FallbackChain
    storage: KeyValueStorage
    engine: Optional[AsyncEngine] = None

    async def start(self) -> None:
        """Prepare local storage, resolve the dataset, restore the session."""
        if self.engine is not None:
            await init_db(self.engine)
        await self.store.initialize()
        await self.session.rehydrate()

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def build_blob_store(
    kind: str = config.BLOB_STORE,
    data_dir: str = config.DATA_DIR,
    url: Optional[str] = config.BLOB_STORE_URL,
    timeout: float = config.BLOB_STORE_TIMEOUT,
) -> BlobStore:
    """Blob store selected by ``BLOB_STORE``."""
    if kind == "http":
        if not url:
            raise ValueError("BLOB_STORE=http requires BLOB_STORE_URL")
        log.info("Using HTTP blob store at %s", url)
        return HttpBlobStore(url, timeout=timeout)
    if kind == "memory":
        log.warning("Using in-memory blob store; data is lost on exit")
        return MemoryBlobStore()
    if kind != "file":
        raise ValueError(f"Unknown BLOB_STORE {kind!r}")
    log.info("Using JSON file blob store in %s", data_dir)
    return JsonFileBlobStore(data_dir)


def build_context(
    blob_store: Optional[BlobStore] = None,
    database_url: Optional[str] = config.DATABASE_URL,
    storage: Optional[KeyValueStorage] = None,
) -> AppContext:
    """
    Wire the store, fallback chain and session holder together.

    Args:
        blob_store: Remote tier; defaults to ``build_blob_store()``
        database_url: Local storage database; empty means in-memory storage
        storage: Explicit local storage area, overrides ``database_url``
    """
    engine = None
    if storage is None:
        if database_url:
            engine = create_engine(database_url)
            storage = LocalStorage(create_session_factory(engine))
        else:
            log.warning("No DATABASE_URL; local storage kept in memory")
            storage = MemoryStorage()

    chain = FallbackChain(
        remote=blob_store if blob_store is not None else build_blob_store(),
        mirror=LocalMirror(storage),
        record_types=RECORD_TYPES,
    )
    store = EntityStore(chain)
    return AppContext(
        store=store,
        session=SessionHolder(store, storage),
        chain=chain,
        storage=storage,
        engine=engine,
    )
