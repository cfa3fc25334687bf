"""Score cache and build aggregator.

For each (subject, talent slot) the extraction service is called at most
once per cache lifetime. Its descriptors are simulated level by level and
the per-level increase rates are stored under (subject, slot, level), where
the aggregator picks them up to sum a build's score.

Population is the only asynchronous step. Concurrent requests for the same
slot share one in-flight extraction; a fan-out over many slots isolates
failures so one bad slot doesn't sink the rest.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from stella_planner.cache.keys import ScoreKey, Selection, SlotKey
from stella_planner.cache.store import TALENT_EFFECTS_TTL, CacheStore, MemoryStore
from stella_planner.engine.damage_composer import ConditionPredicate, always_met
from stella_planner.engine.level_scoring import score_levels
from stella_planner.engine.sim_config import SimulationConfig
from stella_planner.extraction.service import ExtractionRequest, ExtractionService
from stella_planner.models.effect import EffectDescriptor


logger = logging.getLogger(__name__)


class TalentSource(Protocol):
    """Looks up the talent text behind a slot (backed by the game-data catalog)."""

    async def describe(self, key: SlotKey) -> ExtractionRequest:
        ...


@dataclass(frozen=True, slots=True)
class CacheConfig:
    effects_ttl_seconds: float = TALENT_EFFECTS_TTL
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


@dataclass(frozen=True, slots=True)
class SlotEntry:
    """What is cached per slot: the extracted effects and their level scores."""
    descriptors: tuple[EffectDescriptor, ...]
    scores: dict[int, float]


@dataclass(frozen=True, slots=True)
class SlotScores:
    """Outcome of populating one slot during a fan-out."""
    key: SlotKey
    scores: dict[int, float]
    error: str | None = None

    @property
    def is_scored(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class BuildScore:
    """Summed increase rate for a build.

    Selections whose slot could not be scored contribute 0 but are listed in
    `unscored` so callers can tell them apart from genuine zero scores.
    """
    total_percent: float
    scored: tuple[Selection, ...] = ()
    unscored: tuple[Selection, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.unscored


class ScoreCache:
    """Memoises extraction per slot and aggregates build scores."""

    def __init__(
        self,
        extractor: ExtractionService,
        source: TalentSource,
        store: CacheStore | None = None,
        config: CacheConfig | None = None,
        condition: ConditionPredicate = always_met,
    ) -> None:
        self._extractor = extractor
        self._source = source
        self._store = store if store is not None else MemoryStore()
        self._config = config or CacheConfig()
        self._condition = condition
        self._pending: dict[SlotKey, asyncio.Future[SlotEntry]] = {}
        self._failures: dict[SlotKey, str] = {}

    # --- Population --------------------------------------------------------

    async def _populate(self, key: SlotKey) -> SlotEntry:
        request = await self._source.describe(key)
        descriptors = await self._extractor.extract(request)
        entry = SlotEntry(
            descriptors=tuple(descriptors),
            scores=score_levels(descriptors, self._config.simulation, self._condition),
        )
        ttl = self._config.effects_ttl_seconds
        self._store.set(key, entry, ttl)
        for level, score in entry.scores.items():
            self._store.set(key.level(level), score, ttl)
        self._failures.pop(key, None)
        logger.debug("Cached %d effect(s), levels %s for %s", len(descriptors), sorted(entry.scores), key)
        return entry

    def _entry(self, key: SlotKey) -> SlotEntry | None:
        return self._store.get(key)

    async def get_scores_for_slot(self, subject_id: int, slot_index: int) -> dict[int, float]:
        """Per-level scores for a slot, extracting on first use.

        Raises whatever the extraction raised (normally ExtractionError).
        """
        key = SlotKey(subject_id, slot_index)
        entry = self._entry(key)
        if entry is not None:
            return dict(entry.scores)

        future = self._pending.get(key)
        if future is None:
            future = asyncio.ensure_future(self._populate(key))
            self._pending[key] = future
            future.add_done_callback(lambda _f: self._pending.pop(key, None))
        # Shielded so one cancelled caller doesn't cancel the shared extraction.
        entry = await asyncio.shield(future)
        return dict(entry.scores)

    async def get_scores_for_slots(self, keys: Iterable[SlotKey]) -> dict[SlotKey, SlotScores]:
        """Populate many slots concurrently; failures are reported per slot."""
        unique = list(dict.fromkeys(keys))
        results = await asyncio.gather(
            *(self.get_scores_for_slot(k.subject_id, k.slot_index) for k in unique),
            return_exceptions=True,
        )
        outcome: dict[SlotKey, SlotScores] = {}
        for key, result in zip(unique, results):
            if isinstance(result, Exception):
                logger.warning("Could not score %s: %s", key, result)
                self._failures[key] = str(result)
                outcome[key] = SlotScores(key=key, scores={}, error=str(result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcome[key] = SlotScores(key=key, scores=result)
        return outcome

    # --- Aggregation -------------------------------------------------------

    def build_score(self, selections: Iterable[Selection]) -> BuildScore:
        """Sum cached scores for the selections without triggering extraction.

        A selection whose slot is cached but has no score at that level scores 0.
        A selection whose slot was never scored (or failed) also adds 0 and is
        reported as unscored.
        """
        total = 0.0
        scored: list[Selection] = []
        unscored: list[Selection] = []
        for selection in selections:
            score = self._store.get(selection)
            if score is not None:
                total += score
                scored.append(selection)
            elif self._entry(selection.slot) is not None:
                scored.append(selection)
            else:
                unscored.append(selection)
        return BuildScore(total_percent=total, scored=tuple(scored), unscored=tuple(unscored))

    async def get_build_score(self, selections: Iterable[Selection]) -> BuildScore:
        """Populate every selected slot, then aggregate."""
        picked = list(selections)
        await self.get_scores_for_slots(s.slot for s in picked)
        return self.build_score(picked)

    # --- Maintenance -------------------------------------------------------

    def failure(self, subject_id: int, slot_index: int) -> str | None:
        """Error text from the last failed population of a slot, if any."""
        return self._failures.get(SlotKey(subject_id, slot_index))

    def invalidate(self, subject_id: int, slot_index: int) -> None:
        """Drop a slot's effects and level scores so the next call re-extracts."""
        key = SlotKey(subject_id, slot_index)
        entry = self._entry(key)
        if entry is not None:
            for level in entry.scores:
                self._store.invalidate(key.level(level))
        self._store.invalidate(key)
        self._failures.pop(key, None)
