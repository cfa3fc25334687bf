"""Effect descriptor and simulation value models.

An EffectDescriptor is what the extraction service hands back for one
buff/debuff in a skill or talent text. The simulator pairs each descriptor
with an EffectRuntimeState for the length of a single run and reports a
SimulationResult.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from stella_planner.models.constants import (
    MAX_TALENT_LEVEL,
    MIN_TALENT_LEVEL,
    PERMANENT_DURATION,
    EffectKind,
    EffectUnit,
)


class InvalidEffectError(ValueError):
    """Raised when a descriptor would leave the state tracker in a bad state."""


@dataclass(frozen=True, slots=True)
class EffectDescriptor:
    """One buff/debuff: '+15% ATK for 10s, stacks up to 3'.

    duration_seconds of -1 means permanent. cooldown_seconds is the wait
    after expiry before a re-triggering effect comes back.
    """
    name: str
    kind: EffectKind
    magnitude: float
    unit: EffectUnit = EffectUnit.PERCENTAGE
    duration_seconds: float = PERMANENT_DURATION
    stackable: bool = False
    max_stacks: int = 1
    activation_condition: str | None = None
    level: int | None = None   # only set for leveled talents
    cooldown_seconds: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EffectKind):
            object.__setattr__(self, "kind", EffectKind.parse(self.kind))
        if not isinstance(self.unit, EffectUnit):
            object.__setattr__(self, "unit", EffectUnit.parse(self.unit))
        if not math.isfinite(self.magnitude):
            raise InvalidEffectError(f"{self.name}: magnitude must be finite, got {self.magnitude!r}")
        if self.duration_seconds != PERMANENT_DURATION and not (
            math.isfinite(self.duration_seconds) and self.duration_seconds >= 0
        ):
            raise InvalidEffectError(
                f"{self.name}: duration must be -1 (permanent) or >= 0, got {self.duration_seconds!r}"
            )
        if not (math.isfinite(self.cooldown_seconds) and self.cooldown_seconds >= 0):
            raise InvalidEffectError(
                f"{self.name}: cooldown must be >= 0, got {self.cooldown_seconds!r}"
            )
        if self.max_stacks < 1:
            raise InvalidEffectError(f"{self.name}: max_stacks must be >= 1, got {self.max_stacks!r}")
        if self.level is not None and not MIN_TALENT_LEVEL <= self.level <= MAX_TALENT_LEVEL:
            raise InvalidEffectError(
                f"{self.name}: level must be {MIN_TALENT_LEVEL}..{MAX_TALENT_LEVEL}, got {self.level!r}"
            )

    @property
    def is_permanent(self) -> bool:
        return self.duration_seconds == PERMANENT_DURATION


@dataclass(frozen=True, slots=True)
class EffectRuntimeState:
    """Per-run state of one descriptor. Rebuilt every tick, never mutated.

    current_stacks of 0 marks an expired, inert state. remaining_duration is
    ignored for permanent descriptors. A positive cooldown_remaining means
    the effect has expired and is waiting to re-trigger; it keeps its stacks
    but counts for nothing meanwhile.
    """
    descriptor: EffectDescriptor
    remaining_duration: float
    current_stacks: int = 1
    auto_restart: bool = False
    cooldown_remaining: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.descriptor.is_permanent or self.remaining_duration > 0


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Damage over the horizon with and without the simulated effects."""
    base_damage: float
    actual_damage: float
    increase_rate_percent: float
