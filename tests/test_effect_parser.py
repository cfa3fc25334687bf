"""Tests for effect_parser: reading extraction responses into descriptors."""

import json
import logging

import pytest

from stella_planner.models.constants import PERMANENT_DURATION, EffectKind, EffectUnit
from stella_planner.parser.effect_parser import (
    EffectParseError,
    normalize_effect,
    parse_effects,
    parse_effects_payload,
)


SKILL_RESPONSE = """Here you go:
```json
{
  "effects": [
    {"name": "Tidal Edge", "type": "atk_increase", "value": 15, "unit": "%",
     "duration": 10, "condition": null, "stackable": true, "maxStacks": 3},
    {"type": "damage_elemental", "value": "20%", "duration": -1, "condition": "vs. Fire enemies"}
  ]
}
```"""

TALENT_RESPONSE = json.dumps([
    {"type": "crit_rate", "value": 5, "unit": "%", "uptime": 999999, "cooldown": 0, "maxStacks": 1, "level": 1},
    {"type": "crit_rate", "value": 8, "unit": "%", "uptime": 12, "cooldown": 20, "maxStacks": 1, "level": 2},
])


def test_parses_fenced_skill_response():
    effects = parse_effects_payload(SKILL_RESPONSE, default_name="Tide Skill")
    assert len(effects) == 2

    edge = effects[0]
    assert edge.name == "Tidal Edge"
    assert edge.kind is EffectKind.ATK_INCREASE
    assert edge.magnitude == 15.0
    assert edge.unit is EffectUnit.PERCENTAGE
    assert edge.duration_seconds == 10
    assert edge.stackable is True
    assert edge.max_stacks == 3
    assert edge.activation_condition is None

    elemental = effects[1]
    assert elemental.name == "Tide Skill"
    assert elemental.kind is EffectKind.ELEMENTAL_DAMAGE
    assert elemental.magnitude == 20.0
    assert elemental.is_permanent
    assert elemental.activation_condition == "vs. Fire enemies"


def test_parses_talent_levels_and_uptime():
    effects = parse_effects_payload(TALENT_RESPONSE, default_name="Keen Eye")
    assert [e.level for e in effects] == [1, 2]
    assert effects[0].duration_seconds == PERMANENT_DURATION
    assert effects[1].duration_seconds == 12
    assert effects[0].cooldown_seconds == 0.0
    assert effects[1].cooldown_seconds == 20.0
    assert all(e.name == "Keen Eye" for e in effects)


def test_empty_array_is_a_valid_empty_result():
    assert parse_effects_payload("[]") == []
    assert parse_effects_payload('{"effects": []}') == []


@pytest.mark.parametrize("text", ["not json at all", '{"result": "nothing"}', '"effects"'])
def test_unreadable_payload_raises(text):
    with pytest.raises(EffectParseError):
        parse_effects_payload(text)


def test_missing_and_nan_numbers_use_defaults():
    effect = normalize_effect({"type": "damage_increase", "value": float("nan"), "maxStacks": "abc"}, "x")
    assert effect.magnitude == 0.0
    assert effect.max_stacks == 1
    assert effect.stackable is False
    assert effect.is_permanent


def test_stackable_inferred_from_max_stacks():
    effect = normalize_effect({"type": "atk_increase", "value": 5, "max_stacks": 4}, "x")
    assert effect.stackable is True
    assert effect.max_stacks == 4


def test_string_null_condition_is_none():
    effect = normalize_effect({"type": "atk_increase", "value": 5, "condition": "null"}, "x")
    assert effect.activation_condition is None


def test_unknown_kind_is_kept_as_unknown():
    (effect,) = parse_effects([{"type": "summon_familiar", "value": 1}], "Odd Talent")
    assert effect.kind is EffectKind.UNKNOWN


def test_malformed_entries_are_dropped_with_a_warning(caplog):
    entries = [
        "just a string",
        {"type": "atk_increase", "value": 10, "duration": -5},
        {"type": "atk_increase", "value": 10, "level": 9},
        {"type": "atk_increase", "value": 10, "maxStacks": 0},
        {"type": "atk_increase", "value": 10, "cooldown": -3},
        {"type": "atk_increase", "value": 10},
    ]
    with caplog.at_level(logging.WARNING, logger="stella_planner.parser.effect_parser"):
        effects = parse_effects(entries, "Mixed")
    assert len(effects) == 1
    assert effects[0].magnitude == 10.0
    assert len(caplog.records) == 5
