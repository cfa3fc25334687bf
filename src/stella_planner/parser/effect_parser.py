"""Parse extraction-service responses into EffectDescriptor lists.

The inference backend answers with JSON, sometimes wrapped in a ```json
fence, in one of two shapes:

  - {"effects": [...]} or a bare array of skill-style entries:
      type, value, unit, duration (-1 permanent), cooldown, condition, stackable, maxStacks
  - a bare array of talent-style entries with one object per level:
      type, value, unit, uptime (999999 = always on), cooldown, maxStacks, level

Missing or NaN numbers fall back to defaults. Entries that still fail
descriptor validation are dropped with a warning; a response that is not
a JSON array of objects is an EffectParseError.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from stella_planner.models.constants import (
    PERMANENT_DURATION,
    PERMANENT_UPTIME_THRESHOLD,
    EffectKind,
    EffectUnit,
)
from stella_planner.models.effect import EffectDescriptor, InvalidEffectError


logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


class EffectParseError(ValueError):
    """The response could not be read as a list of effects."""


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return default if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            parsed = float(value.strip().rstrip("%"))
        except ValueError:
            return default
        return default if math.isnan(parsed) else parsed
    return default


def _duration(raw: dict[str, Any]) -> float:
    if "duration" in raw:
        duration = _number(raw["duration"], PERMANENT_DURATION)
    else:
        duration = _number(raw.get("uptime"), PERMANENT_UPTIME_THRESHOLD)
    if duration == PERMANENT_DURATION or duration >= PERMANENT_UPTIME_THRESHOLD:
        return PERMANENT_DURATION
    return duration


def _condition(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in ("null", "none"):
        return None
    return text


def normalize_effect(raw: dict[str, Any], default_name: str) -> EffectDescriptor:
    """Build a descriptor from one response entry, filling defaults.

    Raises InvalidEffectError if the filled-in values are still out of range.
    """
    max_stacks = int(_number(raw.get("maxStacks", raw.get("max_stacks")), 1))
    stackable = raw.get("stackable")
    if not isinstance(stackable, bool):
        stackable = max_stacks > 1

    level = raw.get("level")
    level = int(_number(level, 1)) if level is not None else None

    return EffectDescriptor(
        name=str(raw.get("name") or default_name),
        kind=EffectKind.parse(raw.get("type", raw.get("kind"))),
        magnitude=_number(raw.get("value", raw.get("magnitude")), 0.0),
        unit=EffectUnit.parse(raw.get("unit")),
        duration_seconds=_duration(raw),
        stackable=stackable,
        max_stacks=max_stacks,
        activation_condition=_condition(raw.get("condition")),
        level=level,
        cooldown_seconds=_number(raw.get("cooldown", raw.get("cooldown_seconds")), 0.0),
    )


def _load_entries(text: str) -> list[Any]:
    match = _JSON_FENCE.search(text)
    body = match.group(1) if match else text
    try:
        payload = json.loads(body.strip())
    except json.JSONDecodeError as exc:
        raise EffectParseError(f"response is not JSON: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("effects")
    if not isinstance(payload, list):
        raise EffectParseError("response has no effects array")
    return payload


def parse_effects(entries: list[Any], default_name: str = "") -> list[EffectDescriptor]:
    """Normalise already-decoded entries, dropping the malformed ones."""
    effects: list[EffectDescriptor] = []
    for index, raw in enumerate(entries):
        if not isinstance(raw, dict):
            logger.warning("Skipping effect #%d of %r: not an object", index, default_name)
            continue
        try:
            effects.append(normalize_effect(raw, default_name))
        except (InvalidEffectError, OverflowError, TypeError) as exc:
            logger.warning("Skipping effect #%d of %r: %s", index, default_name, exc)
    return effects


def parse_effects_payload(text: str, default_name: str = "") -> list[EffectDescriptor]:
    """Parse a raw service response. An empty array is a valid empty result."""
    effects = parse_effects(_load_entries(text), default_name)
    for effect in effects:
        if effect.kind is EffectKind.UNKNOWN:
            logger.debug("Unrecognised effect kind in %r: %s", default_name, effect.name)
    return effects
