"""Loader for the Prakriti questionnaire shipped in ``data/questionnaire.json``.

The questionnaire is configuration, not user data: it is read once and kept
as an immutable :class:`~modules.assessment.dto.Questionnaire`.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from modules import config
from modules.assessment.dto import Category, Option, Question, Questionnaire


class CatalogError(RuntimeError):
    """Controlled errors raised while loading static catalogs."""


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(
            f"Questionnaire file not found at '{path}'. Check the data/ directory."
        )

    with path.open("r", encoding="utf-8") as fp:
        try:
            return json.load(fp)
        except json.JSONDecodeError as exc:  # pragma: no cover - protection
            raise CatalogError(f"invalid questionnaire JSON: {exc}") from exc


def _build_option(question_id: str, raw: Dict[str, Any]) -> Option:
    weight = int(raw.get("weight", 1))
    if weight < 0:
        raise CatalogError(f"Negative weight in question '{question_id}'.")
    return Option(
        id=str(raw["id"]),
        text=str(raw.get("text", "")),
        category=Category.parse(raw.get("dosha")),
        weight=weight,
    )


def build_questionnaire(raw: Dict[str, Any]) -> Questionnaire:
    """Validate a raw payload and turn it into a :class:`Questionnaire`."""

    questions: List[Question] = []
    seen: set[str] = set()
    for item in raw.get("questions") or []:
        question_id = str(item.get("id", "")).strip()
        if not question_id:
            raise CatalogError("Question without id in questionnaire.")
        if question_id in seen:
            raise CatalogError(f"Duplicate question id: {question_id}")
        seen.add(question_id)

        options = tuple(_build_option(question_id, opt) for opt in item.get("options") or [])
        if not options:
            raise CatalogError(f"Question '{question_id}' has no options.")
        if len({opt.id for opt in options}) != len(options):
            raise CatalogError(f"Duplicate option id in question '{question_id}'.")

        questions.append(
            Question(
                id=question_id,
                category=str(item.get("category", "")),
                text=str(item.get("text", "")),
                options=options,
            )
        )

    if not questions:
        raise CatalogError("No questions found in questionnaire.")

    return Questionnaire(version=str(raw.get("version", "")), questions=tuple(questions))


def load_questionnaire(path: str | Path | None = None) -> Questionnaire:
    """Load and validate the questionnaire file."""

    if path is None:
        path = config.questionnaire_path()
    return build_questionnaire(_load_json(Path(path)))


@lru_cache(maxsize=1)
def get_questionnaire() -> Questionnaire:
    """Process-wide questionnaire loaded from the default location."""

    return load_questionnaire()


__all__ = [
    "CatalogError",
    "build_questionnaire",
    "get_questionnaire",
    "load_questionnaire",
]
