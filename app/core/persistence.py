"""
Persistence fallback chain.

Each collection is resolved independently, preferring in order:

1. the external blob store
2. the local mirror
3. the default dataset

A tier that is unreachable, empty or holds malformed records counts as
absent for that kind. After resolution the whole dataset is written back to
both tiers so later readers see one consistent snapshot.
"""
import asyncio
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import TypeAdapter, ValidationError

from app.core.entities import EntityKind, Record
from app.core.seed import default_dataset
from app.core.storage.blob import BlobStore
from app.core.storage.mirror import LocalMirror
from app.utils import get_logger


log = get_logger(__name__)


Dataset = Dict[EntityKind, List[Record]]


class FallbackChain:
    def __init__(
        self,
        remote: BlobStore,
        mirror: LocalMirror,
        record_types: Dict[EntityKind, Type[Record]],
        defaults: Optional[Callable[[], Dict[EntityKind, List[Dict[str, Any]]]]] = None,
    ):
        self.remote = remote
        self.mirror = mirror
        self._adapters = {
            kind: TypeAdapter(List[record_type]) for kind, record_type in record_types.items()
        }
        self._defaults = defaults or default_dataset

    def _parse(self, kind: EntityKind, raw: List[Dict[str, Any]], source: str) -> List[Record]:
        """Validated records, or an empty list when ``raw`` is malformed."""
        if not raw:
            return []
        try:
            return self._adapters[kind].validate_python(raw)
        except ValidationError as e:
            log.warning(f"Malformed {kind.value} in {source}, ignoring: {e.error_count()} errors")
            return []

    async def _resolve_kind(self, kind: EntityKind) -> List[Record]:
        try:
            records = self._parse(kind, await self.remote.get(kind), "blob store")
        except Exception as e:
            log.error(f"Blob store lookup for {kind.value} failed: {e}")
            records = []
        if records:
            log.info(f"{kind.value}: using blob store ({len(records)} records)")
            return records

        records = self._parse(kind, await self.mirror.get(kind), "local mirror")
        if records:
            log.info(f"{kind.value}: using local mirror ({len(records)} records)")
            return records

        log.info(f"No {kind.value} found, using defaults")
        return self._parse(kind, self._defaults()[kind], "defaults")

    def defaults(self) -> Dataset:
        """The default dataset as validated records."""
        seed = self._defaults()
        return {kind: self._parse(kind, seed[kind], "defaults") for kind in self._adapters}

    async def resolve(self) -> Dataset:
        """Pick a source for every kind without writing anything."""
        kinds = list(self._adapters)
        resolved = await asyncio.gather(*(self._resolve_kind(kind) for kind in kinds))
        return dict(zip(kinds, resolved))

    async def persist(self, dataset: Dataset) -> bool:
        """
        Write every collection to the blob store and the local mirror.

        Failures are logged, never raised. Returns True when every write succeeded.
        """
        writes = []
        for kind, records in dataset.items():
            payload = [record.to_storage() for record in records]
            writes.append(self.remote.put(kind, payload))
            writes.append(self.mirror.put(kind, payload))
        results = await asyncio.gather(*writes, return_exceptions=True)

        ok = True
        for result in results:
            if isinstance(result, BaseException):
                log.error(f"Persist failed: {result!r}")
                ok = False
            elif not result:
                ok = False
        if not ok:
            log.warning("Data kept in memory; durable persistence incomplete")
        return ok

    async def initialize(self) -> Dataset:
        """Resolve every collection, then write the result back to both tiers."""
        dataset = await self.resolve()
        log.info(
            "Final data loaded: "
            + ", ".join(f"{kind.value}={len(records)}" for kind, records in dataset.items())
        )
        await self.persist(dataset)
        return dataset
