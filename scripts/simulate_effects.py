"""Simulate a list of effect descriptors and print the damage increase.

Usage examples:
    python -m scripts.simulate_effects --effects-file effects.json
    python -m scripts.simulate_effects --effects-json '[{"type":"atk_increase","value":15}]'
    python -m scripts.simulate_effects --effects-file effects.json --single --json
    python -m scripts.simulate_effects --effects-file effects.json --horizon 60 --tick 0.05
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from stella_planner.engine.damage_composer import SCORING_KINDS, always_met, never_met
from stella_planner.engine.sim_config import SimulationConfig
from stella_planner.engine.simulator import simulate_multiple_effects, simulate_single_effect
from stella_planner.models.effect import EffectDescriptor, SimulationResult
from stella_planner.parser.effect_parser import parse_effects_payload


def _load_effects(raw_json: str | None, file_path: Path | None) -> list[EffectDescriptor]:
    if raw_json is not None:
        text = raw_json
    elif file_path is not None:
        text = file_path.read_text(encoding="utf-8")
    else:
        raise ValueError("no effects given")
    return parse_effects_payload(text, default_name="effect")


def _render_text_result(effects: list[EffectDescriptor], result: SimulationResult) -> str:
    lines = [f"Effects ({len(effects)}):"]
    for effect in effects:
        duration = "permanent" if effect.is_permanent else f"{effect.duration_seconds:g}s"
        if effect.cooldown_seconds > 0 and not effect.is_permanent:
            duration += f", cd {effect.cooldown_seconds:g}s"
        note = "" if effect.kind in SCORING_KINDS else "  (no contribution)"
        lines.append(
            f"  - {effect.name}: {effect.kind.value} {effect.magnitude:+g} "
            f"[{duration}, max {effect.max_stacks} stack(s)]{note}"
        )
    lines.append(f"Base damage:   {result.base_damage:.1f}")
    lines.append(f"Actual damage: {result.actual_damage:.1f}")
    lines.append(f"Increase rate: {result.increase_rate_percent:.2f}%")
    return "\n".join(lines)


def _result_payload(effects: list[EffectDescriptor], result: SimulationResult) -> dict[str, Any]:
    return {
        "effects": [
            {**asdict(e), "kind": e.kind.value, "unit": e.unit.value}
            for e in effects
        ],
        "result": asdict(result),
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate effect descriptors over the scoring horizon")
    effects_group = parser.add_mutually_exclusive_group(required=True)
    effects_group.add_argument("--effects-file", type=Path, help="Path to an effects JSON file.")
    effects_group.add_argument("--effects-json", type=str, help="Inline effects JSON.")
    parser.add_argument(
        "--single",
        action="store_true",
        help="Use the single-effect entry point (re-trigger on expiry). Needs exactly one effect.",
    )
    parser.add_argument("--strict-conditions", action="store_true", help="Exclude conditional effects.")
    parser.add_argument("--horizon", type=float, default=120.0, help="Simulated seconds.")
    parser.add_argument("--tick", type=float, default=0.1, help="Tick size in seconds.")
    parser.add_argument("--dps", type=float, default=100.0, help="Baseline damage per second.")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parser warnings.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    effects = _load_effects(args.effects_json, args.effects_file)
    config = SimulationConfig(tick_seconds=args.tick, horizon_seconds=args.horizon, base_dps=args.dps)
    condition = never_met if args.strict_conditions else always_met

    if args.single:
        if len(effects) != 1:
            parser.error(f"--single needs exactly one effect, got {len(effects)}")
        result = simulate_single_effect(effects[0], config, condition)
    else:
        result = simulate_multiple_effects(effects, config, condition)

    if args.json:
        print(json.dumps(_result_payload(effects, result), indent=2, ensure_ascii=False))
        return
    print(_render_text_result(effects, result))


if __name__ == "__main__":
    main()
