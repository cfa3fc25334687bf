"""Simplified build evaluation shown before simulator-backed scores are ready.

This path never touches the simulator. It derives five weighted sub-scores
from raw counts (summed talent levels, number of equipped main/sub items)
and is not expected to agree with the simulator's build score.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ScoreWeights:
    attack: float = 0.2
    crit_efficiency: float = 0.25
    elemental_damage: float = 0.15
    dps: float = 0.25
    buff_uptime: float = 0.15


DEFAULT_WEIGHTS = ScoreWeights()

BASE_SCORE = 30.0
MAX_TALENT_SCORE = 40.0
MAX_EQUIPMENT_SCORE = 30.0
# Summed talent level that earns the full talent score.
TALENT_LEVEL_CAP = 100
# Main + sub slots that earn the full equipment score.
EQUIPMENT_SLOTS = 6


@dataclass(slots=True)
class BuildSelectionSummary:
    """What the user has picked so far."""

    main_character: str | None = None
    support_characters: tuple[str | None, str | None] = (None, None)
    talent_levels: list[int] = field(default_factory=list)
    main_equipment_ids: list[int] = field(default_factory=list)
    sub_equipment_ids: list[int] = field(default_factory=list)

    @property
    def is_complete_party(self) -> bool:
        return bool(self.main_character) and all(self.support_characters)


@dataclass(frozen=True, slots=True)
class BuffSample:
    """A representative buff for the breakdown display."""
    label: str
    amount: float
    duration: float
    cooldown: float

    @property
    def uptime(self) -> float:
        cycle = self.duration + self.cooldown
        if cycle <= 0:
            return 0.0
        return self.duration / cycle


@dataclass(frozen=True, slots=True)
class EvaluationDetails:
    """Illustrative stat figures derived from the same counts."""
    atk: float
    baseline_atk: float
    crit_rate: float
    crit_damage: float
    dps: float
    baseline_dps: float
    damage_bonus_total: float
    def_pen_value: float
    buffs: tuple[BuffSample, ...]


@dataclass(frozen=True, slots=True)
class BuildEvaluation:
    attack_score: float
    crit_efficiency_score: float
    elemental_damage_score: float
    dps_score: float
    buff_uptime_score: float
    total_score: float
    breakdown: dict[str, float]
    details: EvaluationDetails


def _sub_scores(talent_score: float, equipment_score: float) -> dict[str, float]:
    return {
        "attack": BASE_SCORE + talent_score * 0.8 + equipment_score * 0.7,
        "crit_efficiency": BASE_SCORE + talent_score * 0.7 + equipment_score * 0.8,
        "elemental_damage": BASE_SCORE + talent_score * 0.9 + equipment_score * 0.9,
        "dps": BASE_SCORE + talent_score * 0.85 + equipment_score * 0.85,
        "buff_uptime": BASE_SCORE + talent_score * 0.6 + equipment_score * 0.7,
    }


def evaluate_build(
    summary: BuildSelectionSummary,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> BuildEvaluation | None:
    """Score a build from counts alone. None until the party is complete."""
    if not summary.is_complete_party:
        return None

    total_talent_level = sum(summary.talent_levels)
    main_count = len(summary.main_equipment_ids)
    sub_count = len(summary.sub_equipment_ids)

    talent_score = min(total_talent_level / TALENT_LEVEL_CAP * MAX_TALENT_SCORE, MAX_TALENT_SCORE)
    equipment_score = (main_count + sub_count) / EQUIPMENT_SLOTS * MAX_EQUIPMENT_SCORE

    scores = _sub_scores(talent_score, equipment_score)
    breakdown = {
        "attack": scores["attack"] * weights.attack,
        "crit_efficiency": scores["crit_efficiency"] * weights.crit_efficiency,
        "elemental_damage": scores["elemental_damage"] * weights.elemental_damage,
        "dps": scores["dps"] * weights.dps,
        "buff_uptime": scores["buff_uptime"] * weights.buff_uptime,
    }

    details = EvaluationDetails(
        atk=2500 + total_talent_level * 15 + main_count * 200,
        baseline_atk=3000,
        crit_rate=0.45 + equipment_score * 0.005,
        crit_damage=0.8 + talent_score * 0.01,
        dps=4000 + total_talent_level * 30 + equipment_score * 100,
        baseline_dps=5000,
        damage_bonus_total=40 + talent_score * 0.8,
        def_pen_value=15 + equipment_score * 0.3,
        buffs=(
            BuffSample("attack buff", amount=30, duration=8, cooldown=10),
            BuffSample("skill damage buff", amount=25, duration=12, cooldown=15),
        ),
    )

    return BuildEvaluation(
        attack_score=scores["attack"],
        crit_efficiency_score=scores["crit_efficiency"],
        elemental_damage_score=scores["elemental_damage"],
        dps_score=scores["dps"],
        buff_uptime_score=scores["buff_uptime"],
        total_score=sum(breakdown.values()),
        breakdown=breakdown,
        details=details,
    )


@dataclass(frozen=True, slots=True)
class BuildComparison:
    build_a: BuildEvaluation
    build_b: BuildEvaluation
    difference: dict[str, float]
    winner: str   # "A" | "B" | "Draw"


_COMPARED_FIELDS = (
    "attack_score",
    "crit_efficiency_score",
    "elemental_damage_score",
    "dps_score",
    "buff_uptime_score",
    "total_score",
)


def compare_builds(a: BuildEvaluation, b: BuildEvaluation, tolerance: float = 1.0) -> BuildComparison:
    """Per-score differences (A - B); totals within tolerance are a draw."""
    difference = {name: getattr(a, name) - getattr(b, name) for name in _COMPARED_FIELDS}
    winner = "Draw"
    if abs(difference["total_score"]) > tolerance:
        winner = "A" if difference["total_score"] > 0 else "B"
    return BuildComparison(build_a=a, build_b=b, difference=difference, winner=winner)
