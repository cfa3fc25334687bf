"""Time-stepped damage simulator.

Integrates the composed damage multiplier over a fixed horizon and reports
how much more damage the effects produced than the no-effect baseline.

Both entry points share one loop; they differ only in the expiry policy the
states are initialised with:

  - simulate_single_effect: the effect re-triggers whenever it expires
  - simulate_multiple_effects: each effect runs once and then goes inert

All functions are pure: the same descriptors and config always give a
bit-identical SimulationResult.
"""

from __future__ import annotations

from collections.abc import Iterable

from stella_planner.engine.damage_composer import ConditionPredicate, always_met, compose
from stella_planner.engine.effect_tracker import initialize, tick
from stella_planner.engine.sim_config import DEFAULT_CONFIG, SimulationConfig
from stella_planner.models.effect import EffectDescriptor, SimulationResult


def simulate(
    descriptors: Iterable[EffectDescriptor],
    *,
    auto_restart: bool = False,
    config: SimulationConfig | None = None,
    condition: ConditionPredicate = always_met,
) -> SimulationResult:
    """Run the fixed-step loop over the horizon."""
    cfg = config or DEFAULT_CONFIG
    step = cfg.tick_seconds
    per_tick = cfg.base_dps * step

    states = initialize(descriptors, auto_restart=auto_restart)
    actual_damage = 0.0
    t = 0.0
    # Float time accumulation: at 0.1s ticks over 120s this runs 1201 steps.
    while t < cfg.horizon_seconds:
        actual_damage += per_tick * compose(states, condition)
        states = tick(states, step, stack_on_restart=cfg.stack_on_restart)
        t += step

    base_damage = cfg.base_damage
    return SimulationResult(
        base_damage=base_damage,
        actual_damage=actual_damage,
        increase_rate_percent=(actual_damage - base_damage) / base_damage * 100,
    )


def simulate_single_effect(
    descriptor: EffectDescriptor,
    config: SimulationConfig | None = None,
    condition: ConditionPredicate = always_met,
) -> SimulationResult:
    """Simulate one effect in isolation, re-triggering it on every expiry."""
    return simulate([descriptor], auto_restart=True, config=config, condition=condition)


def simulate_multiple_effects(
    descriptors: Iterable[EffectDescriptor],
    config: SimulationConfig | None = None,
    condition: ConditionPredicate = always_met,
) -> SimulationResult:
    """Simulate effects together; timed effects expire once and stay expired."""
    return simulate(descriptors, auto_restart=False, config=config, condition=condition)
