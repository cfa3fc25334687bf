"""Key-value stores backing the score and catalog caches.

Callers only rely on the CacheStore protocol (get/set/invalidate), so an
in-process MemoryStore can be swapped for a remote store without touching
the cache logic.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Protocol


# Talent texts never change once published.
TALENT_EFFECTS_TTL = 7 * 24 * 60 * 60
# Character and equipment catalogs are refreshed with game updates.
GAME_DATA_TTL = 4 * 60 * 60


class CacheStore(Protocol):
    def get(self, key: Hashable) -> Any | None:
        """Return the live value for key, or None."""
        ...

    def set(self, key: Hashable, value: Any, ttl_seconds: float) -> None:
        ...

    def invalidate(self, key: Hashable) -> None:
        ...


@dataclass(slots=True)
class _Entry:
    value: Any
    expires_at: float


class MemoryStore:
    """Dict-backed store with per-entry expiry.

    The clock is injectable so tests can move time forward.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[Hashable, _Entry] = {}

    def get(self, key: Hashable) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
