"""Short-lived cache in front of the game-data catalog.

Character and equipment records come from a remote catalog outside this
package. They change with game updates, so they are kept for hours rather
than the days talent extractions live for.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from stella_planner.cache.keys import SlotKey
from stella_planner.cache.store import GAME_DATA_TTL, CacheStore, MemoryStore
from stella_planner.extraction.service import ExtractionError, ExtractionRequest, SubjectContext


logger = logging.getLogger(__name__)

CatalogFetcher = Callable[[str, int], Awaitable[Any]]


class CatalogCache:
    """Caches catalog records by (category, id), e.g. ("character", 103)."""

    def __init__(
        self,
        fetch: CatalogFetcher,
        store: CacheStore | None = None,
        ttl_seconds: float = GAME_DATA_TTL,
    ) -> None:
        self._fetch = fetch
        self._store = store if store is not None else MemoryStore()
        self._ttl = ttl_seconds

    async def get(self, category: str, record_id: int) -> Any:
        key = ("catalog", category, record_id)
        record = self._store.get(key)
        if record is not None:
            return record
        logger.debug("Catalog miss: %s %d", category, record_id)
        record = await self._fetch(category, record_id)
        if record is not None:
            self._store.set(key, record, self._ttl)
        return record

    def invalidate(self, category: str, record_id: int) -> None:
        self._store.invalidate(("catalog", category, record_id))


class CatalogTalentSource:
    """TalentSource reading talent texts out of cached subject records.

    Records are dicts shaped like the catalog's subject payload:
    {"name": ..., "element": ..., "talents": [{"name", "description", "params"}, ...]}
    """

    def __init__(self, catalog: CatalogCache, category: str = "character") -> None:
        self._catalog = catalog
        self._category = category

    async def describe(self, key: SlotKey) -> ExtractionRequest:
        record = await self._catalog.get(self._category, key.subject_id)
        if not record:
            raise ExtractionError(f"no {self._category} record for id {key.subject_id}")
        talents = record.get("talents") or []
        if not 0 <= key.slot_index < len(talents):
            raise ExtractionError(
                f"{record.get('name', key.subject_id)!r} has no talent slot {key.slot_index}"
            )
        talent = talents[key.slot_index]
        element = record.get("element")
        return ExtractionRequest(
            description_text=talent.get("description", ""),
            ordered_parameters=tuple(str(p) for p in talent.get("params") or ()),
            subject_context=SubjectContext(record.get("name", ""), element) if element else None,
            label=talent.get("name", ""),
        )
