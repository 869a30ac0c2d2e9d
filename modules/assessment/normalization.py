"""Normalization of raw questionnaire answers into (category, weight) pairs."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Union

from .dto import Answer, AnswerPair, Questionnaire
from .errors import ValidationError

log = logging.getLogger(__name__)

RawAnswer = Union[Answer, Mapping[str, Any]]


def _coerce_answer(raw: RawAnswer) -> Answer:
    """Accept either an :class:`Answer` or a mapping with ``question_id``/``option_id``."""

    if isinstance(raw, Answer):
        return raw
    if isinstance(raw, Mapping):
        question_id = raw.get("question_id", raw.get("questionId"))
        option_id = raw.get("option_id", raw.get("optionId"))
        return Answer(
            question_id=str(question_id) if question_id is not None else "",
            option_id=str(option_id) if option_id is not None else "",
        )
    raise ValidationError(
        f"Unsupported answer payload: {type(raw).__name__}",
        errors=[{"code": "malformed_answer", "actual": type(raw).__name__}],
    )


def normalize_answers(responses: Iterable[RawAnswer], questionnaire: Questionnaire) -> List[AnswerPair]:
    """Map a complete response set to one :class:`AnswerPair` per answer.

    The output keeps the order of ``responses``. Every problem found is
    collected and raised together as a single :class:`ValidationError`:
    empty set, unknown question, unknown option, duplicate answer for the
    same question (never last-write-wins) and unanswered questions.
    """

    answers = [_coerce_answer(raw) for raw in (responses or [])]
    if not answers:
        raise ValidationError(
            "Response set is empty.",
            errors=[{"code": "empty", "expected": len(questionnaire.questions), "actual": 0}],
        )

    errors: List[Dict[str, Any]] = []
    pairs: List[AnswerPair] = []
    seen: set[str] = set()

    for position, answer in enumerate(answers):
        question = questionnaire.get(answer.question_id)
        if question is None:
            errors.append(
                {"code": "unknown_question", "position": position, "question_id": answer.question_id}
            )
            continue
        if answer.question_id in seen:
            errors.append(
                {"code": "duplicate_answer", "position": position, "question_id": answer.question_id}
            )
            continue
        seen.add(answer.question_id)

        option = question.option(answer.option_id)
        if option is None:
            errors.append(
                {
                    "code": "unknown_option",
                    "position": position,
                    "question_id": answer.question_id,
                    "option_id": answer.option_id,
                    "expected": [opt.id for opt in question.options],
                }
            )
            continue
        pairs.append(AnswerPair(category=option.category, weight=option.weight))

    missing = [qid for qid in questionnaire.question_ids if qid not in seen]
    for qid in missing:
        errors.append({"code": "missing_answer", "question_id": qid})

    if errors:
        log.info("assessment.normalize.fail count=%s", len(errors))
        codes = sorted({err["code"] for err in errors})
        raise ValidationError(
            f"Invalid response set ({', '.join(codes)}).",
            errors=errors,
            expected=len(questionnaire.questions),
            actual=len(answers),
        )

    log.debug("assessment.normalize.ok answers=%s", len(pairs))
    return pairs


__all__ = ["normalize_answers"]
