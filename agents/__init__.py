"""Static catalogs and the deterministic recommendation/plan pipeline."""

from .knowledge_base import (
    CategoryProfile,
    Dish,
    KnowledgeBase,
    MEAL_CATEGORIES,
    describe_lifestyle,
    get_knowledge_base,
    load_knowledge_base,
)
from .orchestrator import (
    AssessmentOutcome,
    SAMPLE_PLAN_SEED,
    assess,
    build_sample_plan,
    generate_plan,
    run_assessment,
)
from .plan_builder import Plan, PlanDay, PlanRequest, build_plan
from .questionnaire_loader import CatalogError, get_questionnaire, load_questionnaire
from .recommendations import resolve_recommendations

__all__ = [
    # Catalogs
    "CatalogError",
    "CategoryProfile",
    "Dish",
    "KnowledgeBase",
    "MEAL_CATEGORIES",
    "describe_lifestyle",
    "get_knowledge_base",
    "get_questionnaire",
    "load_knowledge_base",
    "load_questionnaire",
    # Pipeline
    "AssessmentOutcome",
    "SAMPLE_PLAN_SEED",
    "assess",
    "build_sample_plan",
    "generate_plan",
    "resolve_recommendations",
    "run_assessment",
    # Plans
    "Plan",
    "PlanDay",
    "PlanRequest",
    "build_plan",
]
