"""Dominant/secondary category selection over a score vector."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from .dto import CATEGORY_ORDER, Category, Classification, ScoreVector
from .errors import UnknownCategoryError

log = logging.getLogger(__name__)

DEFAULT_SECONDARY_THRESHOLD = 0.8


def classify(
    scores: ScoreVector,
    priority: Sequence[Category] = CATEGORY_ORDER,
    secondary_threshold: float = DEFAULT_SECONDARY_THRESHOLD,
) -> Classification:
    """Rank categories by weight and pick dominant and secondary.

    Equal weights are ordered by ``priority``. The runner-up becomes the
    secondary category only when it has some weight and reaches
    ``secondary_threshold`` of the dominant weight. ``tie`` flags an exact
    draw between the top two categories.
    """

    if not 0 < secondary_threshold <= 1:
        raise ValueError(f"secondary_threshold must be in (0, 1], got {secondary_threshold}")

    priority = tuple(priority)
    if len(set(priority)) != len(priority):
        raise ValueError("priority order must not repeat categories")
    for category in scores.totals:
        if category not in priority:
            raise UnknownCategoryError(
                f"Category {category!r} missing from the priority order.",
                category=category,
                expected=[c.value for c in priority],
            )

    ranked = sorted(
        priority,
        key=lambda category: (-scores.totals.get(category, 0), priority.index(category)),
    )
    dominant = ranked[0]
    dominant_weight = scores.totals.get(dominant, 0)

    secondary = None
    tie = False
    if len(ranked) > 1:
        runner_up = ranked[1]
        runner_weight = scores.totals.get(runner_up, 0)
        tie = runner_weight == dominant_weight
        if runner_weight > 0:
            ratio = runner_weight / dominant_weight
            if ratio >= secondary_threshold or math.isclose(ratio, secondary_threshold):
                secondary = runner_up

    log.info(
        "assessment.classify dominant=%s secondary=%s tie=%s",
        dominant.value,
        secondary.value if secondary else None,
        tie,
    )
    return Classification(dominant=dominant, secondary=secondary, scores=scores, tie=tie)


__all__ = ["DEFAULT_SECONDARY_THRESHOLD", "classify"]
