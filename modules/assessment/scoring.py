"""Score aggregation for normalized answers.

Totals are always recomputed from the full answer sequence. Percentages use
largest-remainder rounding so they add up to exactly 100; leftover points go
to the largest fractional remainders, ties resolved by category order.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .dto import CATEGORY_ORDER, AnswerPair, Category, ScoreVector
from .errors import DegenerateInputError, UnknownCategoryError

log = logging.getLogger(__name__)


def _percentages(totals: Dict[Category, int], categories: Sequence[Category]) -> Dict[Category, int]:
    grand_total = sum(totals.values())
    floors: Dict[Category, int] = {}
    remainders: List[Tuple[int, int, Category]] = []
    for index, category in enumerate(categories):
        scaled = 100 * totals[category]
        floors[category] = scaled // grand_total
        # Remainder numerators share the denominator, so integers compare exactly.
        remainders.append((-(scaled % grand_total), index, category))

    leftover = 100 - sum(floors.values())
    for _, _, category in sorted(remainders)[:leftover]:
        floors[category] += 1
    return floors


def aggregate_scores(
    pairs: Iterable[AnswerPair],
    categories: Sequence[Category] = CATEGORY_ORDER,
    *,
    strict: bool = False,
) -> ScoreVector:
    """Sum weights per category and derive integer percentages.

    Every category in ``categories`` appears in the result, even with zero
    weight. When the grand total is zero the result is an all-zero vector
    flagged ``degenerate``; with ``strict=True`` a
    :class:`DegenerateInputError` is raised instead.
    """

    categories = tuple(categories)
    totals: Dict[Category, int] = {category: 0 for category in categories}
    for pair in pairs:
        if pair.category not in totals:
            raise UnknownCategoryError(
                f"Answer references category outside the enumeration: {pair.category!r}",
                category=pair.category,
                expected=[c.value for c in categories],
            )
        if pair.weight < 0:
            raise ValueError(f"Option weight must be non-negative, got {pair.weight}")
        totals[pair.category] += pair.weight

    grand_total = sum(totals.values())
    if grand_total == 0:
        if strict:
            raise DegenerateInputError(
                "All submitted options have zero weight.",
                grand_total=0,
                categories=[c.value for c in categories],
            )
        log.warning("assessment.aggregate.degenerate categories=%s", len(categories))
        return ScoreVector(
            totals=totals,
            percentages={category: 0 for category in categories},
            degenerate=True,
        )

    percentages = _percentages(totals, categories)
    log.debug("assessment.aggregate.ok total=%s percentages=%s", grand_total, percentages)
    return ScoreVector(totals=totals, percentages=percentages)


__all__ = ["aggregate_scores"]
