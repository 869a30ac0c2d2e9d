"""Service layer: runs the pipeline and hands complete artifacts to storage."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from agents.knowledge_base import KnowledgeBase, get_knowledge_base
from agents.orchestrator import build_sample_plan, generate_plan, run_assessment
from agents.plan_builder import DEFAULT_DURATION_WEEKS, Plan, Seed
from agents.questionnaire_loader import get_questionnaire
from modules import progress
from modules.config import EngineConfig

from .dto import Classification, Questionnaire
from .errors import ValidationError
from .normalization import RawAnswer

log = logging.getLogger(__name__)


def _default_repo():
    from modules import repo

    return repo


class AssessmentService:
    """Coordinates assessment, plan generation and persistence."""

    def __init__(
        self,
        repository=None,
        *,
        questionnaire: Optional[Questionnaire] = None,
        knowledge_base: Optional[KnowledgeBase] = None,
        engine: Optional[EngineConfig] = None,
    ):
        self._repo = repository if repository is not None else _default_repo()
        self._questionnaire = questionnaire or get_questionnaire()
        self._kb = knowledge_base or get_knowledge_base()
        self._engine = engine or EngineConfig()

    def submit_assessment(self, user_id: str, responses: Iterable[RawAnswer]) -> Dict[str, Any]:
        """Classify a response set and store the snapshot.

        ``ValidationError`` propagates to the caller so the user can resubmit.
        """

        log.info("assessment.submit.start user_id=%s", user_id)
        outcome = run_assessment(
            responses,
            self._questionnaire,
            self._kb,
            secondary_threshold=self._engine.secondary_threshold,
        )
        assessment_id = self._repo.save_classification(user_id, outcome.classification)
        log.info(
            "assessment.submit.ok user_id=%s id=%s dominant=%s",
            user_id,
            assessment_id,
            outcome.classification.dominant.value,
        )
        return {"id": assessment_id, **outcome.to_dict()}

    def create_plan(
        self,
        user_id: str,
        *,
        seed: Seed,
        goals: Iterable[str] | str | None = None,
        restrictions: str = "",
        duration_weeks: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Build a plan from the user's latest classification and store it."""

        stored = self._repo.get_latest_classification(user_id)
        if not stored:
            raise LookupError(f"No assessment stored for user {user_id}.")

        classification = Classification.from_dict(stored["classification"])
        if duration_weeks is None:
            duration_weeks = self._engine.default_duration_weeks or DEFAULT_DURATION_WEEKS
        plan = generate_plan(
            classification,
            seed=seed,
            goals=goals,
            restrictions=restrictions,
            duration_weeks=duration_weeks,
            kb=self._kb,
        )
        plan_id = self._repo.save_plan(user_id, plan, assessment_id=stored.get("id"))
        log.info("plan.create.ok user_id=%s id=%s", user_id, plan_id)
        return {"id": plan_id, "plan": plan.to_dict()}

    def get_plan(self, user_id: str) -> Dict[str, Any]:
        """Stored plan, or the fixed-seed sample plan when none exists."""

        stored = self._repo.get_latest_plan(user_id)
        if stored:
            return {"id": stored["id"], "plan": stored["plan"], "sample": False}

        log.info("plan.sample user_id=%s", user_id)
        sample = build_sample_plan(self._kb, seed=self._engine.sample_plan_seed)
        return {"id": None, "plan": sample.to_dict(), "sample": True}

    def complete_meal(self, user_id: str, week: int, day: int, meal: str) -> Dict[str, Any]:
        """Mark one slot of the user's stored plan as eaten."""

        stored = self._repo.get_latest_plan(user_id)
        if not stored:
            raise LookupError(f"No plan stored for user {user_id}.")

        plan = Plan.from_dict(stored["plan"])
        slot_key = progress.meal_slot_key(week, day, meal)
        if slot_key not in progress.meal_slot_keys(plan):
            raise ValidationError(
                f"Meal slot {slot_key} is not part of the plan.",
                errors=[{"code": "unknown_slot", "slot": slot_key}],
                slot=slot_key,
                total_slots=plan.total_meal_slots,
            )

        created = self._repo.record_meal_completion(user_id, stored["id"], slot_key)
        completed = self._repo.list_completed_meals(stored["id"])
        return {
            "slot": slot_key,
            "created": created,
            "completed": len(completed),
            "total_slots": plan.total_meal_slots,
            "percent_complete": progress.completion_percent(completed, plan),
        }

    def add_progress(self, user_id: str, data: Mapping[str, Any]) -> str:
        entry = progress.parse_progress_entry(data)
        entry_id = self._repo.append_progress_entry(user_id, entry)
        log.info("progress.add.ok user_id=%s id=%s", user_id, entry_id)
        return entry_id

    def progress_summary(self, user_id: str) -> Dict[str, Any]:
        """Latest check-in and trends for weight and the wellness scores."""

        entries: List[progress.ProgressEntry] = self._repo.list_progress_entries(user_id)
        metrics = ("weight",) + progress.SCORE_FIELDS
        trends = {}
        for metric in metrics:
            trend = progress.compute_trend(entries, metric)
            trends[metric] = None if trend is None else {
                "change": trend.change,
                "is_positive": trend.is_positive,
                "percentage": trend.percentage,
            }
        latest = max(entries, key=lambda entry: entry.recorded_at) if entries else None
        return {
            "count": len(entries),
            "latest": latest.to_dict() if latest else None,
            "trends": trends,
        }
