"""Simulation and scoring interfaces."""

from stella_planner.engine.level_scoring import score_levels
from stella_planner.engine.sim_config import SimulationConfig
from stella_planner.engine.simulator import (
    simulate,
    simulate_multiple_effects,
    simulate_single_effect,
)

__all__ = [
    "SimulationConfig",
    "score_levels",
    "simulate",
    "simulate_multiple_effects",
    "simulate_single_effect",
]
