import uuid

import pytest

from agents.orchestrator import build_sample_plan, sample_classification
from modules import repo
from modules.assessment.dto import Category, Classification
from modules.db import init_models, is_sqlite
from modules.progress import parse_progress_entry


@pytest.fixture(autouse=True)
def _tables():
    init_models()


@pytest.fixture
def user_id():
    return f"user-{uuid.uuid4()}"


def test_tests_run_on_sqlite():
    assert is_sqlite()


def test_latest_classification_round_trip(user_id):
    assert repo.get_latest_classification(user_id) is None

    repo.save_classification(user_id, sample_classification(Category.VATA))
    second_id = repo.save_classification(user_id, sample_classification(Category.KAPHA))

    stored = repo.get_latest_classification(user_id)
    assert stored["id"] == second_id
    assert Classification.from_dict(stored["classification"]).dominant is Category.KAPHA


def test_save_requires_user():
    with pytest.raises(ValueError):
        repo.save_classification("", sample_classification())


def test_plan_snapshot(user_id, kb):
    plan = build_sample_plan(kb, duration_weeks=1)
    plan_id = repo.save_plan(user_id, plan, assessment_id="a-1")
    stored = repo.get_latest_plan(user_id)
    assert stored["id"] == plan_id
    assert stored["assessment_id"] == "a-1"
    assert stored["plan"] == plan.to_dict()


def test_progress_entries_are_append_only(user_id):
    repo.append_progress_entry(user_id, parse_progress_entry({"weight": 70, "energy_level": 5}))
    repo.append_progress_entry(user_id, parse_progress_entry({"weight": 69, "energy_level": 6}))
    entries = repo.list_progress_entries(user_id)
    assert [e.weight for e in entries] == [69, 70]


def test_meal_completion_is_idempotent(user_id):
    plan_id = str(uuid.uuid4())
    assert repo.record_meal_completion(user_id, plan_id, "w1-d1-lunch") is True
    assert repo.record_meal_completion(user_id, plan_id, "w1-d1-lunch") is False
    assert repo.record_meal_completion(user_id, plan_id, "w1-d2-lunch") is True
    assert repo.list_completed_meals(plan_id) == ["w1-d1-lunch", "w1-d2-lunch"]


def test_meal_completion_race_returns_false(user_id, monkeypatch):
    plan_id = str(uuid.uuid4())
    assert repo.record_meal_completion(user_id, plan_id, "w1-d3-dinner") is True

    # Another request inserted the slot between the existence check and the insert.
    monkeypatch.setattr(repo, "_completion_exists", lambda plan_id, slot_key: False)
    assert repo.record_meal_completion(user_id, plan_id, "w1-d3-dinner") is False
    assert repo.list_completed_meals(plan_id) == ["w1-d3-dinner"]
