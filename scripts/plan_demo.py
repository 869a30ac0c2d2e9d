"""Command-line demo: classify an answers file and print the generated plan.

Usage::

    python scripts/plan_demo.py answers.json --seed 7 --weeks 2 --goals "better sleep"
    python scripts/plan_demo.py --sample --pdf outputs/sample_plan.pdf

``answers.json`` holds a list of ``{"question_id": ..., "option_id": ...}``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from agents.knowledge_base import get_knowledge_base
from agents.orchestrator import build_sample_plan, generate_plan, run_assessment
from modules.assessment.errors import PrakritiError
from modules.config import configure_logging, load_config
from services.pdf_plan import save_plan_pdf

log = logging.getLogger("plan_demo")


def _read_answers(path: str | Path) -> List[Dict[str, Any]]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("answers") or []
    return list(data)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a constitution-based diet plan.")
    parser.add_argument("answers", nargs="?", help="JSON file with the questionnaire answers")
    parser.add_argument("--sample", action="store_true", help="skip the assessment and print the sample plan")
    parser.add_argument("--seed", default=None, help="plan seed (defaults to the configured sample seed)")
    parser.add_argument("--goals", default="", help="comma-separated goals")
    parser.add_argument("--restrictions", default="", help="free-text dietary restrictions")
    parser.add_argument("--weeks", type=int, default=None, help="plan duration in weeks (1-52)")
    parser.add_argument("--pdf", default=None, help="also write the plan as PDF to this path")
    args = parser.parse_args(argv)
    if not args.sample and not args.answers:
        parser.error("an answers file is required unless --sample is given")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    cfg = load_config()
    configure_logging(cfg.logging)

    kb = get_knowledge_base()
    seed = args.seed if args.seed is not None else cfg.engine.sample_plan_seed
    if isinstance(seed, str) and seed.lstrip("-").isdigit():
        seed = int(seed)
    weeks = args.weeks if args.weeks is not None else cfg.engine.default_duration_weeks

    try:
        if args.sample:
            plan = build_sample_plan(kb, seed=seed, duration_weeks=weeks)
            output: Dict[str, Any] = {"sample": True, "plan": plan.to_dict()}
        else:
            outcome = run_assessment(
                _read_answers(args.answers),
                kb=kb,
                secondary_threshold=cfg.engine.secondary_threshold,
            )
            plan = generate_plan(
                outcome.classification,
                seed=seed,
                goals=args.goals,
                restrictions=args.restrictions,
                duration_weeks=weeks,
                kb=kb,
            )
            output = {**outcome.to_dict(), "plan": plan.to_dict()}
    except PrakritiError as exc:
        log.error("plan_demo.fail error=%s context=%s", exc, exc.context)
        payload = {"error": str(exc), "context": exc.context, "errors": getattr(exc, "errors", [])}
        print(json.dumps(payload, default=str, indent=2))
        return 2

    if args.pdf:
        path = save_plan_pdf(plan, args.pdf, kb)
        log.info("plan_demo.pdf path=%s", path)

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
