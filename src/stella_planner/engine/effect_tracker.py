"""Effect state tracker: advances runtime states through a simulation run.

Every function returns new states; nothing is mutated in place. Two expiry
policies coexist, selected per state by ``auto_restart``:

  - one-shot (default): at expiry the state goes inert (0 stacks) and stays so
  - auto-restart: at expiry the state is re-initialised, so the effect is
    modelled as perpetually re-triggering. A descriptor with a cooldown
    first sits out cooldown_seconds, contributing nothing.

Which one applies is decided once, in initialize().
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from stella_planner.models.effect import EffectDescriptor, EffectRuntimeState


def initial_state(descriptor: EffectDescriptor, auto_restart: bool = False) -> EffectRuntimeState:
    """Fresh state: full duration, one stack."""
    return EffectRuntimeState(
        descriptor=descriptor,
        remaining_duration=max(0.0, float(descriptor.duration_seconds)),
        current_stacks=1,
        auto_restart=auto_restart,
    )


def initialize(
    descriptors: Iterable[EffectDescriptor],
    auto_restart: bool = False,
) -> tuple[EffectRuntimeState, ...]:
    """Create the states for a run, resolving the expiry policy per state."""
    return tuple(initial_state(d, auto_restart) for d in descriptors)


def apply_stack(state: EffectRuntimeState) -> EffectRuntimeState:
    """Re-apply an effect: refresh its duration and add a stack up to max_stacks.

    Non-stackable descriptors only refresh.
    """
    descriptor = state.descriptor
    stacks = state.current_stacks
    if descriptor.stackable:
        stacks = min(descriptor.max_stacks, stacks + 1)
    return EffectRuntimeState(
        descriptor=descriptor,
        remaining_duration=max(0.0, float(descriptor.duration_seconds)),
        current_stacks=max(1, stacks),
        auto_restart=state.auto_restart,
    )


def _restart(state: EffectRuntimeState, stack_on_restart: bool) -> EffectRuntimeState:
    if stack_on_restart:
        return apply_stack(state)
    return initial_state(state.descriptor, auto_restart=True)


def tick_state(
    state: EffectRuntimeState,
    dt: float,
    stack_on_restart: bool = False,
) -> EffectRuntimeState:
    """Advance a single state by dt seconds."""
    if state.descriptor.is_permanent:
        return state

    if state.cooldown_remaining > 0:
        cooldown = max(0.0, state.cooldown_remaining - dt)
        if cooldown > 0:
            return EffectRuntimeState(
                descriptor=state.descriptor,
                remaining_duration=0.0,
                current_stacks=state.current_stacks,
                auto_restart=state.auto_restart,
                cooldown_remaining=cooldown,
            )
        return _restart(state, stack_on_restart)

    remaining = max(0.0, state.remaining_duration - dt)
    if remaining > 0:
        return EffectRuntimeState(
            descriptor=state.descriptor,
            remaining_duration=remaining,
            current_stacks=state.current_stacks,
            auto_restart=state.auto_restart,
        )

    if state.auto_restart:
        if state.descriptor.cooldown_seconds > 0:
            return EffectRuntimeState(
                descriptor=state.descriptor,
                remaining_duration=0.0,
                current_stacks=state.current_stacks,
                auto_restart=True,
                cooldown_remaining=float(state.descriptor.cooldown_seconds),
            )
        return _restart(state, stack_on_restart)

    return EffectRuntimeState(
        descriptor=state.descriptor,
        remaining_duration=0.0,
        current_stacks=0,
        auto_restart=False,
    )


def tick(
    states: Sequence[EffectRuntimeState],
    dt: float,
    stack_on_restart: bool = False,
) -> tuple[EffectRuntimeState, ...]:
    """Advance every state by dt seconds."""
    return tuple(tick_state(s, dt, stack_on_restart) for s in states)
