"""Progress tracking collaborator.

Owns what the plan builder does not: wellness check-ins (append-only) and
meal completion. Percent-complete is derived from completed slot keys and
the plan's ``total_meal_slots``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from modules.assessment.errors import ValidationError

log = logging.getLogger(__name__)

SCORE_MIN = 1
SCORE_MAX = 10
DEFAULT_SCORE = 5
SCORE_FIELDS = ("energy_level", "sleep_quality", "stress_level", "digestive_health")
LOWER_IS_BETTER = ("weight", "stress_level")


@dataclass(frozen=True)
class ProgressEntry:
    """One wellness check-in. Scores use a 1-10 scale."""

    weight: float
    energy_level: int
    sleep_quality: int = DEFAULT_SCORE
    stress_level: int = DEFAULT_SCORE
    digestive_health: int = DEFAULT_SCORE
    notes: str = ""
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weight": self.weight,
            "energy_level": self.energy_level,
            "sleep_quality": self.sleep_quality,
            "stress_level": self.stress_level,
            "digestive_health": self.digestive_health,
            "notes": self.notes,
            "recorded_at": self.recorded_at.isoformat(),
        }


@dataclass(frozen=True)
class Trend:
    change: float
    is_positive: bool
    percentage: float


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_progress_entry(data: Mapping[str, Any], *, recorded_at: Optional[datetime] = None) -> ProgressEntry:
    """Validate a raw check-in payload; weight and energy level are required."""

    errors: List[Dict[str, Any]] = []

    weight: Optional[float] = None
    if _is_blank(data.get("weight")):
        errors.append({"code": "required", "field": "weight"})
    else:
        try:
            weight = float(data["weight"])
        except (TypeError, ValueError):
            errors.append({"code": "not_a_number", "field": "weight", "actual": data.get("weight")})
        else:
            if not 0.0 < weight <= 500.0:
                errors.append({"code": "out_of_range", "field": "weight", "actual": weight})

    if _is_blank(data.get("energy_level")):
        errors.append({"code": "required", "field": "energy_level"})

    scores: Dict[str, int] = {}
    for name in SCORE_FIELDS:
        raw = data.get(name)
        if _is_blank(raw):
            scores[name] = DEFAULT_SCORE
            continue
        try:
            value = int(raw)
        except (TypeError, ValueError):
            errors.append({"code": "not_a_number", "field": name, "actual": raw})
            continue
        if not SCORE_MIN <= value <= SCORE_MAX:
            errors.append(
                {"code": "out_of_range", "field": name, "actual": value, "expected": f"{SCORE_MIN}..{SCORE_MAX}"}
            )
            continue
        scores[name] = value

    if errors:
        raise ValidationError("Invalid progress entry.", errors=errors)

    return ProgressEntry(
        weight=weight,
        notes=str(data.get("notes") or ""),
        recorded_at=recorded_at or datetime.now(timezone.utc),
        **scores,
    )


def compute_trend(entries: Sequence[ProgressEntry], metric: str) -> Optional[Trend]:
    """Change between the two most recent entries.

    For weight and stress a decrease counts as positive; for every other
    metric an increase does. Returns ``None`` with fewer than two entries or a zero
    previous value.
    """

    if len(entries) < 2:
        return None
    ordered = sorted(entries, key=lambda entry: entry.recorded_at)
    latest = getattr(ordered[-1], metric)
    previous = getattr(ordered[-2], metric)
    if not latest or not previous:
        return None

    change = latest - previous
    is_positive = change < 0 if metric in LOWER_IS_BETTER else change > 0
    return Trend(
        change=round(change, 2),
        is_positive=is_positive,
        percentage=round(abs(change / previous) * 100, 1),
    )


def meal_slot_key(week: int, day: int, meal: str) -> str:
    return f"w{week}-d{day}-{meal}"


def meal_slot_keys(plan: Any) -> List[str]:
    """Every assignable slot of a plan, in plan order."""

    return [
        meal_slot_key(day.week, day.day, meal)
        for day in plan.days
        for meal in plan.meal_categories
    ]


def completion_percent(completed: Iterable[str], plan: Any) -> int:
    """Percent of the plan's meal slots marked complete (0-100)."""

    total = plan.total_meal_slots
    if total <= 0:
        return 0
    keys = set(completed)
    done = keys & set(meal_slot_keys(plan))
    if len(done) < len(keys):
        log.info("progress.completion.ignored_keys count=%s", len(keys) - len(done))
    return round(100 * len(done) / total)


__all__ = [
    "ProgressEntry",
    "Trend",
    "completion_percent",
    "compute_trend",
    "meal_slot_key",
    "meal_slot_keys",
    "parse_progress_entry",
]
