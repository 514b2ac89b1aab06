"""
External blob store: one JSON collection per entity kind.

``get`` never raises and answers an empty list on any failure; ``put``
replaces the whole collection and reports success as a boolean.

Implementations:
- JsonFileBlobStore: ``<data_dir>/<kind>.json`` files shaped ``{"<kind>": [...]}``
- HttpBlobStore: another console's ``/api/save-data`` endpoint
- MemoryBlobStore: in-process dictionary
"""
import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import httpx

from app.core.entities import EntityKind
from app.core.errors import PersistenceUnavailable
from app.utils import get_logger


log = get_logger(__name__)


class BlobStore(Protocol):
    async def get(self, kind: EntityKind) -> List[Dict[str, Any]]:
        ...

    async def put(self, kind: EntityKind, records: List[Dict[str, Any]]) -> bool:
        ...


class JsonFileBlobStore:
    """
    Collections stored as pretty-printed JSON files in a directory.

    ``read``/``write`` raise ``PersistenceUnavailable`` and back the
    ``/api/save-data`` endpoint; ``get``/``put`` are the fault-tolerant
    blob store interface.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self._locks = {kind: asyncio.Lock() for kind in EntityKind}

    def path_for(self, kind: EntityKind) -> Path:
        return self.data_dir / f"{kind.value}.json"

    def _read_sync(self, kind: EntityKind) -> List[Dict[str, Any]]:
        path = self.path_for(kind)
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceUnavailable(f"Failed to read {path}: {e}") from e
        if not isinstance(content, dict):
            raise PersistenceUnavailable(f"Unexpected content in {path}")
        records = content.get(kind.value) or []
        if not isinstance(records, list):
            raise PersistenceUnavailable(f"Unexpected {kind.value} payload in {path}")
        return records

    def _write_sync(self, kind: EntityKind, records: List[Dict[str, Any]]) -> None:
        """Write to a temporary file beside the target, then swap it in."""
        path = self.path_for(kind)
        tmp_name = None
        try:
            content = json.dumps({kind.value: records}, indent=2)
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.data_dir,
                prefix=f".{kind.value}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceUnavailable(f"Failed to write {path}: {e}") from e

    async def read(self, kind: EntityKind) -> List[Dict[str, Any]]:
        records = await asyncio.to_thread(self._read_sync, kind)
        log.debug(f"Data loaded from {self.path_for(kind)}: count={len(records)}")
        return records

    async def write(self, kind: EntityKind, records: List[Dict[str, Any]]) -> None:
        # Writes to one file are applied in call order
        async with self._locks[kind]:
            await asyncio.to_thread(self._write_sync, kind, records)
        log.debug(f"Data saved to {self.path_for(kind)}: count={len(records)}")

    async def get(self, kind: EntityKind) -> List[Dict[str, Any]]:
        try:
            return await self.read(kind)
        except PersistenceUnavailable as e:
            log.warning(f"Failed to load {kind.value} from JSON file: {e}")
            return []

    async def put(self, kind: EntityKind, records: List[Dict[str, Any]]) -> bool:
        try:
            await self.write(kind, records)
        except PersistenceUnavailable as e:
            log.error(f"Failed to save {kind.value} to JSON file: {e}")
            return False
        return True


class HttpBlobStore:
    """Blob store served by the ``/api/save-data`` route of another console."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def get(self, kind: EntityKind) -> List[Dict[str, Any]]:
        try:
            async with self._client() as client:
                response = await client.get("/api/save-data", params={"type": kind.value})
                response.raise_for_status()
                data = response.json().get("data") or []
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            log.error(f"Failed to load {kind.value} from blob store: {e}")
            return []
        if not isinstance(data, list):
            log.error(f"Blob store returned malformed {kind.value} payload")
            return []
        log.info(f"{kind.value} loaded from blob store: count={len(data)}")
        return data

    async def put(self, kind: EntityKind, records: List[Dict[str, Any]]) -> bool:
        try:
            async with self._client() as client:
                response = await client.post(
                    "/api/save-data",
                    json={"type": kind.value, "data": records},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"Failed to save {kind.value} to blob store: {e}")
            return False
        log.debug(f"{kind.value} saved to blob store: count={len(records)}")
        return True


class MemoryBlobStore:
    """In-process blob store; ``fail`` simulates an unreachable store."""

    def __init__(self, collections: Optional[Dict[EntityKind, List[Dict[str, Any]]]] = None):
        self.collections: Dict[EntityKind, List[Dict[str, Any]]] = {
            kind: list(records) for kind, records in (collections or {}).items()
        }
        self.fail = False

    async def get(self, kind: EntityKind) -> List[Dict[str, Any]]:
        if self.fail:
            log.error(f"Failed to load {kind.value} from memory blob store: unavailable")
            return []
        return [dict(record) for record in self.collections.get(kind, [])]

    async def put(self, kind: EntityKind, records: List[Dict[str, Any]]) -> bool:
        if self.fail:
            log.error(f"Failed to save {kind.value} to memory blob store: unavailable")
            return False
        self.collections[kind] = [dict(record) for record in records]
        return True
