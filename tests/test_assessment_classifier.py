import pytest

from agents.orchestrator import assess
from modules.assessment.classifier import classify
from modules.assessment.dto import AnswerPair, Category, Classification, ScoreVector
from modules.assessment.errors import UnknownCategoryError
from modules.assessment.scoring import aggregate_scores

V, P, K = Category.VATA, Category.PITTA, Category.KAPHA


def _scores(v, p, k):
    return aggregate_scores(
        [AnswerPair(V, v), AnswerPair(P, p), AnswerPair(K, k)],
    )


def test_clear_dominant_without_secondary(questionnaire, answers_for):
    result = assess(answers_for(vata=7, pitta=2, kapha=1), questionnaire)
    assert result.scores.totals == {V: 21, P: 6, K: 3}
    assert result.scores.percentages == {V: 70, P: 20, K: 10}
    assert result.dominant is V
    assert result.secondary is None
    assert result.tie is False


def test_secondary_at_threshold_is_included():
    result = classify(_scores(10, 8, 1))
    assert result.dominant is V
    assert result.secondary is P


def test_secondary_below_threshold_is_dropped():
    result = classify(_scores(10, 7, 1))
    assert result.secondary is None


def test_threshold_is_configurable():
    assert classify(_scores(10, 6, 0), secondary_threshold=0.5).secondary is P
    with pytest.raises(ValueError):
        classify(_scores(10, 6, 0), secondary_threshold=0)


def test_exact_tie_uses_priority_order():
    result = classify(_scores(0, 5, 5))
    assert result.dominant is P
    assert result.secondary is K
    assert result.tie is True

    reordered = classify(_scores(0, 5, 5), priority=(K, P, V))
    assert reordered.dominant is K
    assert reordered.secondary is P


def test_three_way_tie_picks_first_two_in_priority():
    result = classify(_scores(3, 3, 3))
    assert result.dominant is V
    assert result.secondary is P
    assert result.tie


def test_degenerate_scores_yield_priority_head_and_no_secondary():
    result = classify(_scores(0, 0, 0))
    assert result.scores.degenerate
    assert result.dominant is V
    assert result.secondary is None
    assert result.tie is True


def test_priority_must_cover_every_scored_category():
    with pytest.raises(UnknownCategoryError):
        classify(_scores(1, 2, 3), priority=(V, P))


def test_classification_round_trips_through_snapshot():
    result = classify(_scores(4, 4, 1))
    restored = Classification.from_dict(result.to_dict())
    assert restored == result


def test_score_vector_serializes_with_category_names():
    data = _scores(2, 1, 1).to_dict()
    assert data["totals"] == {"vata": 2, "pitta": 1, "kapha": 1}
    assert data["percentages"] == {"vata": 50, "pitta": 25, "kapha": 25}
    assert data["grand_total"] == 4
    assert isinstance(ScoreVector(totals={}, percentages={}).grand_total, int)
