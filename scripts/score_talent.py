"""Score a talent level by level.

Reads effects either from a saved extraction response or by asking the
extraction backend live (configured through STELLA_EXTRACTION_* variables).

Usage examples:
    python -m scripts.score_talent --payload-file talent_response.json
    python -m scripts.score_talent --description "ATK +{Param1}%" --param 12 --name "Fury"
    python -m scripts.score_talent --description "..." --param 5 --param 10 --character Chitose --element Aqua --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from stella_planner.engine.level_scoring import group_by_level, score_levels
from stella_planner.extraction.http_client import ExtractionSettings, HttpExtractionService
from stella_planner.extraction.service import ExtractionError, ExtractionRequest, SubjectContext
from stella_planner.models.effect import EffectDescriptor
from stella_planner.parser.effect_parser import EffectParseError, parse_effects_payload


async def _extract_live(request: ExtractionRequest) -> list[EffectDescriptor]:
    async with HttpExtractionService(ExtractionSettings.from_env()) as service:
        return await service.extract(request)


def _request_from_args(args: argparse.Namespace) -> ExtractionRequest:
    context = None
    if args.character:
        context = SubjectContext(name=args.character, element_tag=args.element or "Unknown")
    return ExtractionRequest(
        description_text=args.description,
        ordered_parameters=tuple(args.param or ()),
        subject_context=context,
        label=args.name or "",
    )


def _render_levels(effects: list[EffectDescriptor], scores: dict[int, float]) -> str:
    grouped = group_by_level(effects)
    lines = ["Level  Effects  Increase"]
    for level, score in scores.items():
        lines.append(f"Lv{level:<4} {len(grouped[level]):>7}  {score:7.2f}%")
    if not scores:
        lines.append("(no effects extracted)")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description="Score a talent's levels via the simulator")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--payload-file", type=Path, help="Saved extraction response.")
    source.add_argument("--description", type=str, help="Talent text with {ParamN} placeholders.")
    parser.add_argument("--param", action="append", help="Placeholder value; repeat in order.")
    parser.add_argument("--name", type=str, help="Talent name.")
    parser.add_argument("--character", type=str, help="Owning character's name.")
    parser.add_argument("--element", type=str, help="Owning character's element.")
    parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON output.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests and parser warnings.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        if args.payload_file is not None:
            effects = parse_effects_payload(
                args.payload_file.read_text(encoding="utf-8"),
                default_name=args.name or args.payload_file.stem,
            )
        else:
            effects = asyncio.run(_extract_live(_request_from_args(args)))
    except (EffectParseError, ExtractionError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    scores = score_levels(effects)
    if args.json:
        print(json.dumps({str(level): score for level, score in scores.items()}, indent=2))
        return
    print(_render_levels(effects, scores))


if __name__ == "__main__":
    main()
