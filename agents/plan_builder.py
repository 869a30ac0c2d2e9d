"""Deterministic generation of multi-week meal and lifestyle plans.

The plan combines a classification, free-form goals and restrictions and a
duration in weeks. It uses only the static knowledge base and a
caller-supplied seed, never the wall clock, so the same request and seed
always produce the same plan.

Selection: for each week and meal category the (restriction-filtered) dish
pool is shuffled with a ``random.Random`` seeded from ``seed``, the week
and the meal category. Day *d* takes position *d* of that order, so a pool
of seven or more dishes never repeats within a week.
"""

from __future__ import annotations

import json
import logging
import random
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from modules.assessment.dto import Category, Classification
from modules.assessment.errors import InvalidDurationError

from .knowledge_base import MEAL_CATEGORIES, Dish, KnowledgeBase
from .recommendations import resolve_recommendations

log = logging.getLogger(__name__)

MIN_DURATION_WEEKS = 1
MAX_DURATION_WEEKS = 52
DEFAULT_DURATION_WEEKS = 4
DAYS_PER_WEEK = 7
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

Seed = Union[int, str]


@dataclass(frozen=True)
class PlanRequest:
    """Input of :func:`build_plan`. Goals may be enumerated keys or free text."""

    classification: Classification
    goals: Tuple[str, ...] = ()
    restrictions: str = ""
    duration_weeks: int = DEFAULT_DURATION_WEEKS


@dataclass(frozen=True)
class PlanDay:
    week: int
    day: int
    day_name: str
    meals: Mapping[str, str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week": self.week,
            "day": self.day,
            "day_name": self.day_name,
            "meals": dict(self.meals),
        }


@dataclass(frozen=True)
class Plan:
    """Immutable plan artifact. Regenerate instead of patching."""

    category: Category
    secondary: Optional[Category]
    duration_weeks: int
    seed: Seed
    meal_categories: Tuple[str, ...]
    days: Tuple[PlanDay, ...]
    principles: Tuple[str, ...]
    foods_to_include: Tuple[str, ...]
    foods_to_avoid: Tuple[str, ...]
    supplements: Tuple[str, ...]
    lifestyle: Tuple[str, ...]
    goals: Tuple[str, ...] = ()
    goal_guidance: Tuple[str, ...] = ()
    daily_routine: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    restrictions: str = ""
    restriction_unsatisfiable: bool = False
    unsatisfiable_meals: Tuple[str, ...] = ()

    @property
    def total_meal_slots(self) -> int:
        """Assignable slots, for the external progress tracker."""

        return DAYS_PER_WEEK * self.duration_weeks * len(self.meal_categories)

    def week(self, number: int) -> Tuple[PlanDay, ...]:
        """Days of week ``number`` (1-based)."""

        return tuple(day for day in self.days if day.week == number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "secondary": self.secondary.value if self.secondary else None,
            "duration_weeks": self.duration_weeks,
            "seed": self.seed,
            "meal_categories": list(self.meal_categories),
            "days": [day.to_dict() for day in self.days],
            "principles": list(self.principles),
            "foods_to_include": list(self.foods_to_include),
            "foods_to_avoid": list(self.foods_to_avoid),
            "supplements": list(self.supplements),
            "lifestyle": list(self.lifestyle),
            "goals": list(self.goals),
            "goal_guidance": list(self.goal_guidance),
            "daily_routine": {k: list(v) for k, v in self.daily_routine.items()},
            "restrictions": self.restrictions,
            "restriction_unsatisfiable": self.restriction_unsatisfiable,
            "unsatisfiable_meals": list(self.unsatisfiable_meals),
            "total_meal_slots": self.total_meal_slots,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Plan":
        """Rebuild a plan from a stored snapshot."""

        secondary = data.get("secondary")
        return cls(
            category=Category.parse(data.get("category")),
            secondary=Category.parse(secondary) if secondary else None,
            duration_weeks=int(data["duration_weeks"]),
            seed=data.get("seed"),
            meal_categories=tuple(data.get("meal_categories") or MEAL_CATEGORIES),
            days=tuple(
                PlanDay(
                    week=int(day["week"]),
                    day=int(day["day"]),
                    day_name=str(day.get("day_name", "")),
                    meals=dict(day.get("meals") or {}),
                )
                for day in data.get("days") or []
            ),
            principles=tuple(data.get("principles") or ()),
            foods_to_include=tuple(data.get("foods_to_include") or ()),
            foods_to_avoid=tuple(data.get("foods_to_avoid") or ()),
            supplements=tuple(data.get("supplements") or ()),
            lifestyle=tuple(data.get("lifestyle") or ()),
            goals=tuple(data.get("goals") or ()),
            goal_guidance=tuple(data.get("goal_guidance") or ()),
            daily_routine={k: tuple(v) for k, v in (data.get("daily_routine") or {}).items()},
            restrictions=str(data.get("restrictions") or ""),
            restriction_unsatisfiable=bool(data.get("restriction_unsatisfiable", False)),
            unsatisfiable_meals=tuple(data.get("unsatisfiable_meals") or ()),
        )

    def to_json(self) -> str:
        """Canonical JSON: equal plans serialize to identical strings."""

        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def validate_duration(duration_weeks: Any) -> int:
    """Return the duration as int or raise :class:`InvalidDurationError`."""

    if isinstance(duration_weeks, bool) or not isinstance(duration_weeks, int):
        raise InvalidDurationError(
            f"Duration must be a whole number of weeks, got {duration_weeks!r}.",
            duration=duration_weeks,
            expected=f"{MIN_DURATION_WEEKS}..{MAX_DURATION_WEEKS}",
        )
    if not MIN_DURATION_WEEKS <= duration_weeks <= MAX_DURATION_WEEKS:
        raise InvalidDurationError(
            f"Duration must be between {MIN_DURATION_WEEKS} and {MAX_DURATION_WEEKS} weeks, got {duration_weeks}.",
            duration=duration_weeks,
            expected=f"{MIN_DURATION_WEEKS}..{MAX_DURATION_WEEKS}",
        )
    return duration_weeks


def normalize_goals(goals: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    """Split free text or clean a list of goals into canonical keys."""

    if goals is None:
        return ()
    if isinstance(goals, str):
        goals = re.split(r"[,;\n]", goals)
    cleaned: List[str] = []
    for goal in goals:
        key = re.sub(r"[\s\-]+", "_", str(goal).strip().lower())
        if key and key not in cleaned:
            cleaned.append(key)
    return tuple(cleaned)


def _is_restricted(dish: Dish, restriction_text: str) -> bool:
    return any(tag and tag.lower() in restriction_text for tag in dish.tags)


def filter_dishes(dishes: Sequence[Dish], restrictions: str) -> Tuple[Dish, ...]:
    """Drop dishes with a tag found (case-insensitive substring) in ``restrictions``."""

    text = (restrictions or "").strip().lower()
    if not text:
        return tuple(dishes)
    return tuple(dish for dish in dishes if not _is_restricted(dish, text))


def _week_order(pool: Sequence[Dish], seed: Seed, week: int, meal: str) -> List[Dish]:
    rng = random.Random(f"{seed}:{week}:{meal}")
    order = list(pool)
    rng.shuffle(order)
    return order


def _goal_guidance(goals: Sequence[str], kb: KnowledgeBase) -> Tuple[str, ...]:
    tips: List[str] = []
    for goal in goals:
        guidance = kb.goal_guidance.get(goal)
        if guidance is None:
            log.info("plan.goal.unknown goal=%s", goal)
            continue
        tips.extend(tip for tip in guidance if tip not in tips)
    return tuple(tips)


def build_plan(request: PlanRequest, kb: KnowledgeBase, seed: Seed) -> Plan:
    """Build the plan for ``request``.

    Raises :class:`InvalidDurationError` for durations outside 1..52 weeks.
    A restriction that removes every dish of a meal category does not fail:
    that slot falls back to the full pool and the plan is flagged
    ``restriction_unsatisfiable``.
    """

    duration = validate_duration(request.duration_weeks)
    classification = request.classification
    profile = kb.profile(classification.dominant)
    goals = normalize_goals(request.goals)

    pools: Dict[str, Tuple[Dish, ...]] = {}
    unsatisfiable: List[str] = []
    for meal in MEAL_CATEGORIES:
        candidates = profile.meals[meal]
        filtered = filter_dishes(candidates, request.restrictions)
        if not filtered:
            unsatisfiable.append(meal)
            log.warning(
                "plan.restriction.unsatisfiable category=%s meal=%s",
                profile.category.value,
                meal,
            )
            filtered = tuple(candidates)
        pools[meal] = filtered

    days: List[PlanDay] = []
    for week in range(1, duration + 1):
        orders = {meal: _week_order(pools[meal], seed, week, meal) for meal in MEAL_CATEGORIES}
        for day_index in range(DAYS_PER_WEEK):
            meals = {
                meal: orders[meal][day_index % len(orders[meal])].name
                for meal in MEAL_CATEGORIES
            }
            days.append(
                PlanDay(week=week, day=day_index + 1, day_name=DAY_NAMES[day_index], meals=meals)
            )

    bundle = resolve_recommendations(classification, kb)
    plan = Plan(
        category=classification.dominant,
        secondary=classification.secondary,
        duration_weeks=duration,
        seed=seed,
        meal_categories=MEAL_CATEGORIES,
        days=tuple(days),
        principles=bundle.principles,
        foods_to_include=bundle.foods_to_include,
        foods_to_avoid=bundle.foods_to_avoid,
        supplements=bundle.supplements,
        lifestyle=bundle.lifestyle,
        goals=goals,
        goal_guidance=_goal_guidance(goals, kb),
        daily_routine=dict(kb.daily_routine),
        restrictions=request.restrictions or "",
        restriction_unsatisfiable=bool(unsatisfiable),
        unsatisfiable_meals=tuple(unsatisfiable),
    )
    log.info(
        "plan.build category=%s weeks=%s seed=%s slots=%s",
        plan.category.value,
        duration,
        seed,
        plan.total_meal_slots,
    )
    return plan


__all__ = [
    "DAY_NAMES",
    "DEFAULT_DURATION_WEEKS",
    "MAX_DURATION_WEEKS",
    "MIN_DURATION_WEEKS",
    "Plan",
    "PlanDay",
    "PlanRequest",
    "build_plan",
    "filter_dishes",
    "normalize_goals",
    "validate_duration",
]
