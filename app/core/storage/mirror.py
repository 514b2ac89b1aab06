"""
Local mirror of the entity collections.

Each kind lives under ``app_<kind>`` in a key-value storage area as a JSON
array. A missing, unreadable or corrupt entry reads as an empty list.
"""
import json
from typing import Any, Dict, List

from app.core.entities import EntityKind
from app.core.errors import PersistenceUnavailable
from app.core.storage.local import KeyValueStorage
from app.utils import get_logger


log = get_logger(__name__)


def mirror_key(kind: EntityKind) -> str:
    return f"app_{kind.value}"


class LocalMirror:
    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    async def get(self, kind: EntityKind) -> List[Dict[str, Any]]:
        """Stored records of ``kind``; empty on any failure."""
        try:
            raw = await self._storage.get_item(mirror_key(kind))
        except PersistenceUnavailable as e:
            log.error(f"Failed to read {kind.value} from local mirror: {e}")
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            log.warning(f"Corrupt local mirror entry for {kind.value}: {e}")
            return []
        if not isinstance(data, list):
            log.warning(f"Local mirror entry for {kind.value} is not a list")
            return []
        return data

    async def put(self, kind: EntityKind, records: List[Dict[str, Any]]) -> bool:
        """Replace the stored records of ``kind``."""
        try:
            await self._storage.set_item(mirror_key(kind), json.dumps(records))
        except PersistenceUnavailable as e:
            log.error(f"Failed to write {kind.value} to local mirror: {e}")
            return False
        log.debug(f"Mirrored {len(records)} {kind.value}")
        return True
