"""Unit tests for the effect state tracker's expiry and stacking rules."""

import pytest

from stella_planner.engine.effect_tracker import apply_stack, initialize, tick, tick_state
from stella_planner.models.constants import EffectKind
from stella_planner.models.effect import EffectDescriptor


def _timed(duration=1.0, stackable=False, max_stacks=1):
    return EffectDescriptor(
        name="Burst",
        kind=EffectKind.ATK_INCREASE,
        magnitude=10.0,
        duration_seconds=duration,
        stackable=stackable,
        max_stacks=max_stacks,
    )


def test_initialize_sets_full_duration_and_one_stack():
    permanent = EffectDescriptor("Aura", EffectKind.ATK_INCREASE, 5.0)
    states = initialize([_timed(3.0), permanent], auto_restart=True)
    assert len(states) == 2
    assert states[0].remaining_duration == 3.0
    assert states[0].current_stacks == 1
    assert states[0].auto_restart is True
    assert states[1].remaining_duration == 0.0
    assert states[1].is_active


def test_tick_counts_down_without_mutating():
    (state,) = initialize([_timed(1.0)])
    after = tick_state(state, 0.25)
    assert after.remaining_duration == pytest.approx(0.75)
    assert state.remaining_duration == 1.0


def test_permanent_state_is_returned_unchanged():
    (state,) = initialize([EffectDescriptor("Aura", EffectKind.ATK_INCREASE, 5.0)])
    assert tick_state(state, 10.0) is state


def test_one_shot_state_goes_inert_and_stays_inert():
    (state,) = initialize([_timed(0.5)])
    state = tick_state(state, 1.0)
    assert state.current_stacks == 0
    assert state.remaining_duration == 0.0
    assert not state.is_active
    state = tick_state(state, 1.0)
    assert state.current_stacks == 0


def test_auto_restart_state_reinitialises_on_expiry():
    (state,) = initialize([_timed(0.5, stackable=True, max_stacks=3)], auto_restart=True)
    state = tick_state(state, 0.5)
    assert state.remaining_duration == 0.5
    assert state.current_stacks == 1
    assert state.is_active


def test_auto_restart_waits_out_the_cooldown():
    burst = EffectDescriptor(
        name="Surge",
        kind=EffectKind.ATK_INCREASE,
        magnitude=10.0,
        duration_seconds=0.5,
        cooldown_seconds=1.0,
    )
    (state,) = initialize([burst], auto_restart=True)
    state = tick_state(state, 0.5)
    assert not state.is_active
    assert state.cooldown_remaining == 1.0
    assert state.current_stacks == 1

    state = tick_state(state, 0.5)
    assert not state.is_active
    assert state.cooldown_remaining == 0.5

    state = tick_state(state, 0.5)
    assert state.is_active
    assert state.remaining_duration == 0.5
    assert state.cooldown_remaining == 0.0


def test_cooldown_is_ignored_by_one_shot_states():
    burst = EffectDescriptor("Surge", EffectKind.ATK_INCREASE, 10.0, duration_seconds=0.5, cooldown_seconds=1.0)
    (state,) = initialize([burst])
    state = tick_state(state, 0.5)
    assert state.current_stacks == 0
    assert state.cooldown_remaining == 0.0


def test_stack_on_restart_gains_stacks_up_to_max():
    (state,) = initialize([_timed(0.5, stackable=True, max_stacks=2)], auto_restart=True)
    state = tick_state(state, 0.5, stack_on_restart=True)
    assert state.current_stacks == 2
    state = tick_state(state, 0.5, stack_on_restart=True)
    assert state.current_stacks == 2


def test_apply_stack_refreshes_non_stackable_without_adding():
    (state,) = initialize([_timed(2.0)])
    state = apply_stack(tick_state(state, 1.5))
    assert state.remaining_duration == 2.0
    assert state.current_stacks == 1


def test_tick_advances_every_state():
    states = initialize([_timed(1.0), _timed(0.1)])
    states = tick(states, 0.1)
    assert states[0].is_active
    assert not states[1].is_active
