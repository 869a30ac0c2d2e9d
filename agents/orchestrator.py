"""Pipeline orchestration: answers -> classification -> recommendations -> plan.

Every step is a pure function over in-memory values; the questionnaire and
knowledge base are read-only configuration. Nothing here touches storage,
so concurrent callers share no mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence

from modules.assessment.classifier import DEFAULT_SECONDARY_THRESHOLD, classify
from modules.assessment.dto import (
    CATEGORY_ORDER,
    Category,
    Classification,
    Questionnaire,
    RecommendationBundle,
    ScoreVector,
)
from modules.assessment.normalization import RawAnswer, normalize_answers
from modules.assessment.scoring import aggregate_scores

from .knowledge_base import KnowledgeBase, get_knowledge_base
from .plan_builder import DEFAULT_DURATION_WEEKS, Plan, PlanRequest, Seed, build_plan, normalize_goals
from .questionnaire_loader import get_questionnaire
from .recommendations import resolve_recommendations

# Seed of the fallback plan shown when no stored plan exists.
SAMPLE_PLAN_SEED = 42


@dataclass(frozen=True)
class AssessmentOutcome:
    classification: Classification
    recommendations: RecommendationBundle

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classification": self.classification.to_dict(),
            "recommendations": self.recommendations.to_dict(),
        }


def assess(
    responses: Iterable[RawAnswer],
    questionnaire: Optional[Questionnaire] = None,
    *,
    priority: Sequence[Category] = CATEGORY_ORDER,
    secondary_threshold: float = DEFAULT_SECONDARY_THRESHOLD,
) -> Classification:
    """Normalize, aggregate and classify one response set."""

    questionnaire = questionnaire or get_questionnaire()
    pairs = normalize_answers(responses, questionnaire)
    scores = aggregate_scores(pairs, priority)
    return classify(scores, priority, secondary_threshold)


def run_assessment(
    responses: Iterable[RawAnswer],
    questionnaire: Optional[Questionnaire] = None,
    kb: Optional[KnowledgeBase] = None,
    *,
    secondary_threshold: float = DEFAULT_SECONDARY_THRESHOLD,
) -> AssessmentOutcome:
    """Classification plus the recommendation bundle for it."""

    classification = assess(responses, questionnaire, secondary_threshold=secondary_threshold)
    bundle = resolve_recommendations(classification, kb or get_knowledge_base())
    return AssessmentOutcome(classification=classification, recommendations=bundle)


def generate_plan(
    classification: Classification,
    *,
    seed: Seed,
    goals: Iterable[str] | str | None = None,
    restrictions: str = "",
    duration_weeks: int = DEFAULT_DURATION_WEEKS,
    kb: Optional[KnowledgeBase] = None,
) -> Plan:
    request = PlanRequest(
        classification=classification,
        goals=normalize_goals(goals),
        restrictions=restrictions or "",
        duration_weeks=duration_weeks,
    )
    return build_plan(request, kb or get_knowledge_base(), seed)


def sample_classification(category: Category = Category.VATA) -> Classification:
    """Classification fully weighted on ``category``."""

    totals = {c: (1 if c == category else 0) for c in CATEGORY_ORDER}
    percentages = {c: (100 if c == category else 0) for c in CATEGORY_ORDER}
    return Classification(
        dominant=category,
        secondary=None,
        scores=ScoreVector(totals=totals, percentages=percentages),
        tie=False,
    )


def build_sample_plan(
    kb: Optional[KnowledgeBase] = None,
    *,
    category: Category = Category.VATA,
    seed: Seed = SAMPLE_PLAN_SEED,
    duration_weeks: int = DEFAULT_DURATION_WEEKS,
) -> Plan:
    """Fallback plan, produced by the regular builder with a fixed seed."""

    return generate_plan(
        sample_classification(category),
        seed=seed,
        goals=("general_wellness",),
        duration_weeks=duration_weeks,
        kb=kb,
    )


__all__ = [
    "AssessmentOutcome",
    "SAMPLE_PLAN_SEED",
    "assess",
    "build_sample_plan",
    "generate_plan",
    "run_assessment",
    "sample_classification",
]
