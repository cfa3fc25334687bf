"""Effect kinds, units, and the fixed values shared across the planner.

Kind strings come from the extraction service's vocabulary. Only a handful
of kinds feed the damage multiplier; the rest are recognised so they can be
shown, but score nothing.
"""

from enum import Enum


class EffectKind(str, Enum):
    """Closed set of effect kinds a descriptor may carry."""
    # Scoring kinds (see engine.damage_composer.KIND_CONTRIBUTIONS)
    DAMAGE_INCREASE = "damage_increase"
    ATK_INCREASE = "atk_increase"
    ELEMENTAL_DAMAGE = "elemental_damage"
    CRIT_RATE = "crit_rate"
    CRIT_DAMAGE = "crit_damage"
    DEF_DECREASE = "def_decrease"

    # Recognised, no contribution
    DAMAGE_NORMAL_ATTACK = "damage_normal_attack"
    DAMAGE_SKILL = "damage_skill"
    DAMAGE_ULTIMATE = "damage_ultimate"
    DAMAGE_MARK = "damage_mark"
    DAMAGE_ADDITIONAL = "damage_additional"
    DAMAGE_TAKEN_INCREASE = "damage_taken_increase"
    SPEED_INCREASE = "speed_increase"
    COOLDOWN_REDUCTION = "cooldown_reduction"
    DEF_INCREASE = "def_increase"
    HEALING = "healing"
    SHIELD = "shield"

    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: object) -> "EffectKind":
        """Map a raw kind string to a member. Never raises."""
        if isinstance(text, EffectKind):
            return text
        if not isinstance(text, str):
            return cls.UNKNOWN
        key = text.strip().lower().replace("-", "_").replace(" ", "_")
        key = _KIND_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


# The talent-extraction prompt spells elemental damage the other way round.
_KIND_ALIASES: dict[str, str] = {
    "damage_elemental": "elemental_damage",
    "attack_increase": "atk_increase",
    "defense_decrease": "def_decrease",
}


class EffectUnit(str, Enum):
    """Unit of an effect's magnitude."""
    PERCENTAGE = "percentage"
    COUNT = "count"
    SECONDS = "seconds"

    @classmethod
    def parse(cls, text: object) -> "EffectUnit":
        """Map '%', '回', '秒' and English spellings; anything else is a percentage."""
        if isinstance(text, EffectUnit):
            return text
        if not isinstance(text, str):
            return cls.PERCENTAGE
        return _UNIT_ALIASES.get(text.strip().lower(), cls.PERCENTAGE)


_UNIT_ALIASES: dict[str, EffectUnit] = {
    "%": EffectUnit.PERCENTAGE,
    "percent": EffectUnit.PERCENTAGE,
    "percentage": EffectUnit.PERCENTAGE,
    "回": EffectUnit.COUNT,
    "count": EffectUnit.COUNT,
    "times": EffectUnit.COUNT,
    "秒": EffectUnit.SECONDS,
    "s": EffectUnit.SECONDS,
    "sec": EffectUnit.SECONDS,
    "seconds": EffectUnit.SECONDS,
}


# Duration sentinel for effects that never expire.
PERMANENT_DURATION = -1

# Talent levels a leveled talent spans.
MIN_TALENT_LEVEL = 1
MAX_TALENT_LEVEL = 6
TALENT_LEVELS: tuple[int, ...] = tuple(range(MIN_TALENT_LEVEL, MAX_TALENT_LEVEL + 1))

# Extraction responses use a very large uptime to mean "always on".
PERMANENT_UPTIME_THRESHOLD = 999999
