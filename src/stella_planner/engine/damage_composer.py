"""Damage multiplier composer.

The multiplier starts at 1.0 each tick and every active state adds its
kind's contribution. KIND_CONTRIBUTIONS is the only place scoring
semantics live; kinds missing from it contribute nothing.

Activation conditions are not interpreted. They go through a pluggable
predicate that defaults to "always met".
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from stella_planner.models.constants import EffectKind
from stella_planner.models.effect import EffectRuntimeState


# Assumed crit-damage multiplier when scoring crit rate.
ASSUMED_CRIT_DAMAGE = 0.5
# Assumed base crit rate when scoring crit damage.
ASSUMED_CRIT_RATE = 0.1
# Defense shred is worth half a direct damage bonus.
DEF_DECREASE_FACTOR = 0.5


KIND_CONTRIBUTIONS: dict[EffectKind, Callable[[float], float]] = {
    EffectKind.DAMAGE_INCREASE: lambda m: m / 100,
    EffectKind.ATK_INCREASE: lambda m: m / 100,
    EffectKind.ELEMENTAL_DAMAGE: lambda m: m / 100,
    EffectKind.CRIT_RATE: lambda m: (m / 100) * ASSUMED_CRIT_DAMAGE,
    EffectKind.CRIT_DAMAGE: lambda m: ASSUMED_CRIT_RATE * (m / 100),
    EffectKind.DEF_DECREASE: lambda m: (m / 100) * DEF_DECREASE_FACTOR,
}

SCORING_KINDS = frozenset(KIND_CONTRIBUTIONS)


ConditionPredicate = Callable[[str], bool]


def always_met(condition: str) -> bool:
    return True


def never_met(condition: str) -> bool:
    """Strict policy: conditional effects are excluded."""
    return False


def is_counted(state: EffectRuntimeState, condition: ConditionPredicate = always_met) -> bool:
    """Active and, if the descriptor is conditional, its condition holds."""
    if not state.is_active:
        return False
    tag = state.descriptor.activation_condition
    if tag is None:
        return True
    return condition(tag)


def contribution(state: EffectRuntimeState, condition: ConditionPredicate = always_met) -> float:
    """One state's share of the multiplier above the 1.0 baseline."""
    if not is_counted(state, condition):
        return 0.0
    formula = KIND_CONTRIBUTIONS.get(state.descriptor.kind)
    if formula is None:
        return 0.0
    return formula(state.descriptor.magnitude * state.current_stacks)


def compose(
    states: Iterable[EffectRuntimeState],
    condition: ConditionPredicate = always_met,
) -> float:
    """Instantaneous damage multiplier for the given states."""
    multiplier = 1.0
    for state in states:
        multiplier += contribution(state, condition)
    return multiplier
