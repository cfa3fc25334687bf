"""Turn a talent's extracted descriptors into a per-level score map."""

from __future__ import annotations

from collections.abc import Iterable

from stella_planner.engine.damage_composer import ConditionPredicate, always_met
from stella_planner.engine.sim_config import SimulationConfig
from stella_planner.engine.simulator import simulate_multiple_effects, simulate_single_effect
from stella_planner.models.constants import TALENT_LEVELS
from stella_planner.models.effect import EffectDescriptor


def group_by_level(descriptors: Iterable[EffectDescriptor]) -> dict[int, list[EffectDescriptor]]:
    """Bucket descriptors by talent level, in ascending level order.

    Descriptors without a level (core talents, equipment skills) apply at
    every talent level, alongside that level's own descriptors.
    """
    grouped: dict[int, list[EffectDescriptor]] = {}
    untagged: list[EffectDescriptor] = []
    for descriptor in descriptors:
        if descriptor.level is None:
            untagged.append(descriptor)
        else:
            grouped.setdefault(descriptor.level, []).append(descriptor)
    if untagged:
        for level in TALENT_LEVELS:
            grouped.setdefault(level, []).extend(untagged)
    return dict(sorted(grouped.items()))


def score_level(
    descriptors: list[EffectDescriptor],
    config: SimulationConfig | None = None,
    condition: ConditionPredicate = always_met,
) -> float:
    """Increase-rate percent for one level's descriptors."""
    if len(descriptors) == 1:
        return simulate_single_effect(descriptors[0], config, condition).increase_rate_percent
    return simulate_multiple_effects(descriptors, config, condition).increase_rate_percent


def score_levels(
    descriptors: Iterable[EffectDescriptor],
    config: SimulationConfig | None = None,
    condition: ConditionPredicate = always_met,
) -> dict[int, float]:
    """Map each level present in descriptors to its increase-rate percent."""
    return {
        level: score_level(group, config, condition)
        for level, group in group_by_level(descriptors).items()
    }
