import pytest

from agents.orchestrator import assess
from modules.assessment.dto import Answer, AnswerPair, Category
from modules.assessment.errors import ValidationError
from modules.assessment.normalization import normalize_answers


def _codes(exc):
    return [err["code"] for err in exc.value.errors]


def test_normalize_maps_options_to_pairs_in_order(tiny_questionnaire):
    pairs = normalize_answers(
        [
            {"question_id": "q2", "option_id": "q2.k"},
            {"question_id": "q1", "option_id": "q1.v"},
        ],
        tiny_questionnaire,
    )
    assert pairs == [
        AnswerPair(category=Category.KAPHA, weight=3),
        AnswerPair(category=Category.VATA, weight=2),
    ]


def test_normalize_accepts_answer_objects_and_camel_case(tiny_questionnaire):
    pairs = normalize_answers(
        [Answer("q1", "q1.p"), {"questionId": "q2", "optionId": "q2.z"}],
        tiny_questionnaire,
    )
    assert [p.category for p in pairs] == [Category.PITTA, Category.PITTA]
    assert [p.weight for p in pairs] == [1, 0]


def test_normalize_empty_set(tiny_questionnaire):
    with pytest.raises(ValidationError) as exc:
        normalize_answers([], tiny_questionnaire)
    assert _codes(exc) == ["empty"]


def test_normalize_rejects_duplicates_instead_of_last_write_wins(tiny_questionnaire):
    with pytest.raises(ValidationError) as exc:
        normalize_answers(
            [
                {"question_id": "q1", "option_id": "q1.v"},
                {"question_id": "q1", "option_id": "q1.p"},
                {"question_id": "q2", "option_id": "q2.k"},
            ],
            tiny_questionnaire,
        )
    assert _codes(exc) == ["duplicate_answer"]
    assert exc.value.errors[0]["position"] == 1


def test_normalize_collects_every_problem(tiny_questionnaire):
    with pytest.raises(ValidationError) as exc:
        normalize_answers(
            [
                {"question_id": "q1", "option_id": "q1.nope"},
                {"question_id": "q9", "option_id": "q9.v"},
            ],
            tiny_questionnaire,
        )
    assert set(_codes(exc)) == {"unknown_option", "unknown_question", "missing_answer"}
    assert exc.value.context["expected"] == 2
    assert exc.value.context["actual"] == 2
    unknown_option = next(e for e in exc.value.errors if e["code"] == "unknown_option")
    assert unknown_option["expected"] == ["q1.v", "q1.p", "q1.z"]


def test_normalize_rejects_incomplete_set(tiny_questionnaire):
    with pytest.raises(ValidationError) as exc:
        normalize_answers([{"question_id": "q1", "option_id": "q1.v"}], tiny_questionnaire)
    assert exc.value.errors == [{"code": "missing_answer", "question_id": "q2"}]


def test_normalize_rejects_unsupported_payload(tiny_questionnaire):
    with pytest.raises(ValidationError) as exc:
        normalize_answers([42], tiny_questionnaire)
    assert _codes(exc) == ["malformed_answer"]


def test_validation_error_is_a_value_error(tiny_questionnaire):
    with pytest.raises(ValueError):
        normalize_answers([], tiny_questionnaire)


def test_zero_weight_response_set_is_degenerate_not_an_error(tiny_questionnaire):
    result = assess(
        [
            {"question_id": "q1", "option_id": "q1.z"},
            {"question_id": "q2", "option_id": "q2.z"},
        ],
        tiny_questionnaire,
    )
    assert result.scores.degenerate
    assert set(result.scores.percentages.values()) == {0}
    assert result.scores.grand_total == 0
    assert result.secondary is None
