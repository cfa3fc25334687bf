"""Contract with the text-to-effect extraction service.

The service itself (an inference backend) lives outside this package. The
planner sends a description with positional placeholders plus the values
for them, and gets back an ordered list of EffectDescriptor. An empty list
means "nothing to extract"; failure is always an ExtractionError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol

from stella_planner.models.effect import EffectDescriptor


class ExtractionError(RuntimeError):
    """The extraction service could not produce effects for a request."""


@dataclass(frozen=True, slots=True)
class SubjectContext:
    """Who the text belongs to; helps the backend pick elemental kinds."""
    name: str
    element_tag: str


@dataclass(frozen=True, slots=True)
class ExtractionRequest:
    description_text: str
    ordered_parameters: tuple[str, ...] = field(default_factory=tuple)
    subject_context: SubjectContext | None = None
    label: str = ""   # talent or skill name; default effect name


# {Param1} or &Param1& (1-based, either bracket style on either side)
_PLACEHOLDER = re.compile(r"[&{]Param(\d+)[}&]")
_HTML_TAG = re.compile(r"<[^>]*>")
# ##Wind Mark#1017# -> Wind Mark
_GLOSSARY_LINK = re.compile(r"##([^#]+)#\d+#")
_EMOJI = re.compile("[\U0001F000-\U0001F9FF\u2600-\u26FF\u2700-\u27BF\uFE00-\uFE0F]")


def render_description(text: str, parameters: tuple[str, ...] | list[str]) -> str:
    """Substitute placeholder tokens and strip markup.

    Tokens with no matching parameter are left as they are.
    """
    def _substitute(match: re.Match[str]) -> str:
        index = int(match.group(1)) - 1
        if 0 <= index < len(parameters):
            return parameters[index] or ""
        return match.group(0)

    rendered = _PLACEHOLDER.sub(_substitute, text)
    rendered = _HTML_TAG.sub("", rendered)
    rendered = _GLOSSARY_LINK.sub(r"\1", rendered)
    return _EMOJI.sub("", rendered)


EXTRACTION_INSTRUCTIONS = """\
Extract every buff or debuff in the skill/talent description below as JSON.
Respond with a JSON object only: {"effects": [...]}. Each effect has:
  name (string), type (damage_increase, atk_increase, elemental_damage,
  crit_rate, crit_damage, def_decrease, damage_normal_attack, damage_skill,
  damage_ultimate, damage_mark, damage_additional, damage_taken_increase,
  speed_increase, cooldown_reduction, def_increase, healing, shield),
  value (number, 10% -> 10), unit (%, 秒 or 回), duration (seconds, -1 if
  permanent), cooldown (seconds before the effect can trigger again, 0 if
  none), condition (string or null), stackable (bool), maxStacks (int),
  level (1-6, only when the description lists several levels).
Ignore effects without an explicit number."""


def build_prompt(request: ExtractionRequest) -> str:
    """Render the full prompt text sent to the backend."""
    parts: list[str] = []
    ctx = request.subject_context
    if ctx is not None:
        parts.append(f"Character: {ctx.name}\nElement: {ctx.element_tag}\n")
    parts.append(EXTRACTION_INSTRUCTIONS)
    parts.append("\nDescription:\n" + render_description(request.description_text, request.ordered_parameters))
    return "\n".join(parts)


class ExtractionService(Protocol):
    async def extract(self, request: ExtractionRequest) -> list[EffectDescriptor]:
        """Return the effects in request, or raise ExtractionError."""
        ...
