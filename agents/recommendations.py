"""Recommendation resolution for a classification.

A classification with a secondary category gets a blended bundle: the lists
of both profiles are concatenated dominant-first and de-duplicated. Foods to
include and to avoid stay disjoint, and the dominant profile wins any conflict.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from modules.assessment.dto import Category, Classification, RecommendationBundle

from .knowledge_base import KnowledgeBase

log = logging.getLogger(__name__)


def _merge(*groups: Iterable[str], exclude: Iterable[str] = ()) -> Tuple[str, ...]:
    """Concatenate keeping first occurrence (case-insensitive)."""

    seen = {item.casefold() for item in exclude}
    merged: List[str] = []
    for group in groups:
        for item in group:
            key = item.casefold()
            if key in seen:
                continue
            seen.add(key)
            merged.append(item)
    return tuple(merged)


def resolve_categories(dominant: Category, secondary: Category | None, kb: KnowledgeBase) -> RecommendationBundle:
    """Build the bundle for ``dominant`` optionally blended with ``secondary``."""

    primary = kb.profile(dominant)
    if secondary is None or secondary == dominant:
        return RecommendationBundle(
            categories=(primary.category,),
            characteristics=primary.characteristics,
            principles=primary.principles,
            foods_to_include=primary.foods_to_include,
            foods_to_avoid=primary.foods_to_avoid,
            lifestyle=primary.lifestyle,
            supplements=primary.supplements,
        )

    other = kb.profile(secondary)
    include = _merge(
        primary.foods_to_include,
        other.foods_to_include,
        exclude=primary.foods_to_avoid,
    )
    avoid = _merge(primary.foods_to_avoid, other.foods_to_avoid, exclude=include)

    return RecommendationBundle(
        categories=(primary.category, other.category),
        characteristics=_merge(primary.characteristics, other.characteristics),
        principles=_merge(primary.principles, other.principles),
        foods_to_include=include,
        foods_to_avoid=avoid,
        lifestyle=_merge(primary.lifestyle, other.lifestyle),
        supplements=_merge(primary.supplements, other.supplements),
    )


def resolve_recommendations(classification: Classification, kb: KnowledgeBase) -> RecommendationBundle:
    """Recommendations for a classification produced by the classifier."""

    bundle = resolve_categories(classification.dominant, classification.secondary, kb)
    log.info(
        "recommendations.resolve categories=%s principles=%s",
        ",".join(c.value for c in bundle.categories),
        len(bundle.principles),
    )
    return bundle


__all__ = ["resolve_categories", "resolve_recommendations"]
