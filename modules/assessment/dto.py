"""Data Transfer Objects shared by the assessment pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import UnknownCategoryError


class Category(str, Enum):
    """Closed set of constitutional categories (doshas)."""

    VATA = "vata"
    PITTA = "pitta"
    KAPHA = "kapha"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Resolve ``value`` (enum or case-insensitive name) to a category."""

        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise UnknownCategoryError(
            f"Unknown category: {value!r}",
            category=value,
            expected=[member.value for member in cls],
        )

    @property
    def label(self) -> str:
        return self.value.title()


# Declared tie-break priority. Never rely on mapping iteration order.
CATEGORY_ORDER: Tuple[Category, ...] = (Category.VATA, Category.PITTA, Category.KAPHA)


@dataclass(frozen=True)
class Option:
    """One selectable answer of a question."""

    id: str
    text: str
    category: Category
    weight: int = 1


@dataclass(frozen=True)
class Question:
    id: str
    category: str
    text: str
    options: Tuple[Option, ...]

    def option(self, option_id: str) -> Optional[Option]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


@dataclass(frozen=True)
class Questionnaire:
    """Active questionnaire, read-only for the process lifetime."""

    version: str
    questions: Tuple[Question, ...]

    def get(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def question_ids(self) -> Tuple[str, ...]:
        return tuple(q.id for q in self.questions)


@dataclass(frozen=True)
class Answer:
    """A user's choice for one question."""

    question_id: str
    option_id: str


@dataclass(frozen=True)
class AnswerPair:
    """Normalized answer: the category the option counts towards and its weight."""

    category: Category
    weight: int


@dataclass(frozen=True)
class ScoreVector:
    totals: Dict[Category, int]
    percentages: Dict[Category, int]
    degenerate: bool = False

    @property
    def grand_total(self) -> int:
        return sum(self.totals.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totals": {cat.value: value for cat, value in self.totals.items()},
            "percentages": {cat.value: value for cat, value in self.percentages.items()},
            "grand_total": self.grand_total,
            "degenerate": self.degenerate,
        }


@dataclass(frozen=True)
class Classification:
    """Immutable result of one scoring run."""

    dominant: Category
    secondary: Optional[Category]
    scores: ScoreVector
    tie: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dominant": self.dominant.value,
            "secondary": self.secondary.value if self.secondary else None,
            "tie": self.tie,
            "scores": self.scores.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Classification":
        """Rebuild a classification from a stored snapshot."""

        scores = data.get("scores") or {}
        totals = {Category.parse(k): int(v) for k, v in (scores.get("totals") or {}).items()}
        percentages = {Category.parse(k): int(v) for k, v in (scores.get("percentages") or {}).items()}
        secondary = data.get("secondary")
        return cls(
            dominant=Category.parse(data.get("dominant")),
            secondary=Category.parse(secondary) if secondary else None,
            scores=ScoreVector(
                totals=totals,
                percentages=percentages,
                degenerate=bool(scores.get("degenerate", False)),
            ),
            tie=bool(data.get("tie", False)),
        )


@dataclass(frozen=True)
class RecommendationBundle:
    """Recommendations for a dominant category, optionally blended with a secondary one."""

    categories: Tuple[Category, ...]
    characteristics: Tuple[str, ...]
    principles: Tuple[str, ...]
    foods_to_include: Tuple[str, ...]
    foods_to_avoid: Tuple[str, ...]
    lifestyle: Tuple[str, ...]
    supplements: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [cat.value for cat in self.categories],
            "characteristics": list(self.characteristics),
            "principles": list(self.principles),
            "foods_to_include": list(self.foods_to_include),
            "foods_to_avoid": list(self.foods_to_avoid),
            "lifestyle": list(self.lifestyle),
            "supplements": list(self.supplements),
        }
