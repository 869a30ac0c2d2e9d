"""Static knowledge base: one profile per category plus shared guidance.

Loaded from ``data/knowledge_base.json``. Loading is exhaustive over
:class:`~modules.assessment.dto.Category`: a file that omits a category or
names one outside the enumeration is rejected with
:class:`~modules.assessment.errors.UnknownCategoryError`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from modules import config
from modules.assessment.dto import CATEGORY_ORDER, Category
from modules.assessment.errors import UnknownCategoryError

from .questionnaire_loader import CatalogError

log = logging.getLogger(__name__)

MEAL_CATEGORIES: Tuple[str, ...] = ("breakfast", "lunch", "dinner")
DEFAULT_LIFESTYLE_DESCRIPTION = "Follow this practice regularly for optimal health"


@dataclass(frozen=True)
class Dish:
    """A dish description with the tags used for restriction filtering."""

    name: str
    tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryProfile:
    category: Category
    label: str
    elements: str
    qualities: str
    characteristics: Tuple[str, ...]
    principles: Tuple[str, ...]
    foods_to_include: Tuple[str, ...]
    foods_to_avoid: Tuple[str, ...]
    lifestyle: Tuple[str, ...]
    supplements: Tuple[str, ...]
    meals: Mapping[str, Tuple[Dish, ...]]


@dataclass(frozen=True)
class KnowledgeBase:
    version: str
    profiles: Mapping[Category, CategoryProfile]
    lifestyle_descriptions: Mapping[str, str] = field(default_factory=dict)
    goal_guidance: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    daily_routine: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def profile(self, category: Category | str) -> CategoryProfile:
        """Return the profile of ``category``; unknown categories are fatal."""

        resolved = Category.parse(category)
        try:
            return self.profiles[resolved]
        except KeyError:
            raise UnknownCategoryError(
                f"No knowledge base entry for category {resolved.value!r}.",
                category=resolved.value,
                expected=[c.value for c in self.profiles],
            ) from None


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(
            f"Knowledge base file not found at '{path}'. Check the data/ directory."
        )

    with path.open("r", encoding="utf-8") as fp:
        try:
            return json.load(fp)
        except json.JSONDecodeError as exc:  # pragma: no cover - protection
            raise CatalogError(f"invalid knowledge base JSON: {exc}") from exc


def _texts(values: Any) -> Tuple[str, ...]:
    return tuple(str(v).strip() for v in (values or []) if str(v).strip())


def _build_dish(raw: Any) -> Dish:
    if isinstance(raw, Mapping):
        return Dish(
            name=str(raw.get("name", "")).strip(),
            tags=tuple(str(tag).strip().lower() for tag in raw.get("tags") or [] if str(tag).strip()),
        )
    return Dish(name=str(raw).strip())


def _build_profile(category: Category, raw: Mapping[str, Any]) -> CategoryProfile:
    meals_raw = raw.get("meals") or {}
    meals: Dict[str, Tuple[Dish, ...]] = {}
    for meal in MEAL_CATEGORIES:
        dishes = tuple(_build_dish(item) for item in meals_raw.get(meal) or [])
        if not dishes:
            raise CatalogError(f"Category '{category.value}' has no dishes for {meal}.")
        meals[meal] = dishes

    include = _texts(raw.get("foods_to_include"))
    avoid = _texts(raw.get("foods_to_avoid"))
    overlap = {item.casefold() for item in include} & {item.casefold() for item in avoid}
    if overlap:
        raise CatalogError(
            f"Category '{category.value}' lists foods both to include and to avoid: {sorted(overlap)}"
        )

    return CategoryProfile(
        category=category,
        label=str(raw.get("label") or category.label),
        elements=str(raw.get("elements", "")),
        qualities=str(raw.get("qualities", "")),
        characteristics=_texts(raw.get("characteristics")),
        principles=_texts(raw.get("principles")),
        foods_to_include=include,
        foods_to_avoid=avoid,
        lifestyle=_texts(raw.get("lifestyle")),
        supplements=_texts(raw.get("supplements")),
        meals=meals,
    )


def build_knowledge_base(raw: Mapping[str, Any]) -> KnowledgeBase:
    """Validate a raw payload and build an immutable :class:`KnowledgeBase`."""

    categories_raw: Mapping[str, Any] = raw.get("categories") or {}
    profiles: Dict[Category, CategoryProfile] = {}
    for key, payload in categories_raw.items():
        category = Category.parse(key)
        profiles[category] = _build_profile(category, payload or {})

    missing: List[str] = [c.value for c in CATEGORY_ORDER if c not in profiles]
    if missing:
        raise UnknownCategoryError(
            f"Knowledge base has no entry for: {', '.join(missing)}",
            missing=missing,
            expected=[c.value for c in CATEGORY_ORDER],
        )

    # Keep declared order regardless of the file layout.
    ordered = {category: profiles[category] for category in CATEGORY_ORDER}
    return KnowledgeBase(
        version=str(raw.get("version", "")),
        profiles=ordered,
        lifestyle_descriptions={str(k): str(v) for k, v in (raw.get("lifestyle_descriptions") or {}).items()},
        goal_guidance={str(k): _texts(v) for k, v in (raw.get("goal_guidance") or {}).items()},
        daily_routine={str(k): _texts(v) for k, v in (raw.get("daily_routine") or {}).items()},
    )


def load_knowledge_base(path: str | Path | None = None) -> KnowledgeBase:
    """Load and validate the knowledge base file."""

    if path is None:
        path = config.knowledge_base_path()
    kb = build_knowledge_base(_load_json(Path(path)))
    log.info("kb.load version=%s categories=%s", kb.version, len(kb.profiles))
    return kb


@lru_cache(maxsize=1)
def get_knowledge_base() -> KnowledgeBase:
    """Process-wide knowledge base loaded from the default location."""

    return load_knowledge_base()


def describe_lifestyle(practice: str, kb: KnowledgeBase) -> str:
    """Long description of a lifestyle practice, with a generic fallback."""

    return kb.lifestyle_descriptions.get(practice, DEFAULT_LIFESTYLE_DESCRIPTION)


__all__ = [
    "CategoryProfile",
    "DEFAULT_LIFESTYLE_DESCRIPTION",
    "Dish",
    "KnowledgeBase",
    "MEAL_CATEGORIES",
    "build_knowledge_base",
    "describe_lifestyle",
    "get_knowledge_base",
    "load_knowledge_base",
]
