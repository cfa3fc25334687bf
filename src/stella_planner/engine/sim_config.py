"""Configuration knobs for the time-stepped simulator.

Defaults are the standard scoring run: 120 seconds at 0.1s ticks against a
100 DPS baseline. Changing any of them changes every score, so cached
scores are only comparable under one configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    """Fixed parameters of one simulation run."""

    tick_seconds: float = 0.1
    horizon_seconds: float = 120.0
    base_dps: float = 100.0
    stack_on_restart: bool = False   # re-triggered effects gain a stack instead of resetting

    def __post_init__(self) -> None:
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        if self.horizon_seconds <= 0:
            raise ValueError("horizon_seconds must be positive")
        if self.base_dps <= 0:
            raise ValueError("base_dps must be positive")

    @property
    def base_damage(self) -> float:
        """Damage with no effects active: DPS x horizon (12000 by default)."""
        return self.base_dps * self.horizon_seconds


DEFAULT_CONFIG = SimulationConfig()
