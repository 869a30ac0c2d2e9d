"""Prakriti assessment: answer normalization, scoring and classification."""

from .classifier import DEFAULT_SECONDARY_THRESHOLD, classify
from .dto import (
    CATEGORY_ORDER,
    Answer,
    AnswerPair,
    Category,
    Classification,
    Option,
    Question,
    Questionnaire,
    RecommendationBundle,
    ScoreVector,
)
from .errors import (
    DegenerateInputError,
    InvalidDurationError,
    PrakritiError,
    UnknownCategoryError,
    ValidationError,
)
from .normalization import normalize_answers
from .scoring import aggregate_scores

__all__ = [
    "Answer",
    "AnswerPair",
    "CATEGORY_ORDER",
    "Category",
    "Classification",
    "DEFAULT_SECONDARY_THRESHOLD",
    "DegenerateInputError",
    "InvalidDurationError",
    "Option",
    "PrakritiError",
    "Question",
    "Questionnaire",
    "RecommendationBundle",
    "ScoreVector",
    "UnknownCategoryError",
    "ValidationError",
    "aggregate_scores",
    "classify",
    "normalize_answers",
]
