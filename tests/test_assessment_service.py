import uuid
from dataclasses import replace
from datetime import timedelta

import pytest

from agents.orchestrator import build_sample_plan
from modules.assessment.errors import InvalidDurationError, ValidationError
from modules.assessment.service import AssessmentService
from modules.config import EngineConfig


class FakeRepo:
    def __init__(self):
        self.classifications = {}
        self.plans = {}
        self.progress = {}
        self.completed = {}

    def save_classification(self, user_id, classification):
        self.classifications[user_id] = {"id": "a-1", "classification": classification.to_dict()}
        return "a-1"

    def get_latest_classification(self, user_id):
        return self.classifications.get(user_id)

    def save_plan(self, user_id, plan, assessment_id=None):
        plan_id = f"p-{len(self.plans) + 1}"
        self.plans[user_id] = {"id": plan_id, "assessment_id": assessment_id, "plan": plan.to_dict()}
        return plan_id

    def get_latest_plan(self, user_id):
        return self.plans.get(user_id)

    def append_progress_entry(self, user_id, entry):
        self.progress.setdefault(user_id, []).append(entry)
        return f"e-{len(self.progress[user_id])}"

    def list_progress_entries(self, user_id):
        return list(reversed(self.progress.get(user_id, [])))

    def record_meal_completion(self, user_id, plan_id, slot_key):
        slots = self.completed.setdefault(plan_id, [])
        if slot_key in slots:
            return False
        slots.append(slot_key)
        return True

    def list_completed_meals(self, plan_id):
        return list(self.completed.get(plan_id, []))


@pytest.fixture
def service(questionnaire, kb):
    return AssessmentService(repository=FakeRepo(), questionnaire=questionnaire, knowledge_base=kb)


def test_submit_assessment_stores_snapshot(service, answers_for):
    result = service.submit_assessment("u1", answers_for(vata=7, pitta=2, kapha=1))
    assert result["id"] == "a-1"
    assert result["classification"]["dominant"] == "vata"
    assert result["recommendations"]["categories"] == ["vata"]
    assert service._repo.classifications["u1"]["classification"] == result["classification"]


def test_submit_invalid_responses_stores_nothing(service):
    with pytest.raises(ValidationError):
        service.submit_assessment("u1", [{"question_id": "sleep", "option_id": "sleep.vata"}])
    assert service._repo.classifications == {}


def test_create_plan_requires_assessment(service):
    with pytest.raises(LookupError):
        service.create_plan("nobody", seed=1)


def test_create_plan_uses_stored_classification(service, answers_for):
    service.submit_assessment("u1", answers_for(vata=1, pitta=2, kapha=7))
    result = service.create_plan("u1", seed=42, goals="energy", restrictions="dairy", duration_weeks=2)
    assert result["id"] == "p-1"
    assert result["plan"]["category"] == "kapha"
    assert result["plan"]["duration_weeks"] == 2
    assert service._repo.plans["u1"]["assessment_id"] == "a-1"

    again = service.create_plan("u1", seed=42, goals="energy", restrictions="dairy", duration_weeks=2)
    assert again["plan"] == result["plan"]


@pytest.mark.parametrize("weeks", [0, -2, 60])
def test_create_plan_rejects_bad_duration(service, answers_for, weeks):
    service.submit_assessment("u1", answers_for(vata=10))
    with pytest.raises(InvalidDurationError):
        service.create_plan("u1", seed=1, duration_weeks=weeks)
    assert service._repo.plans == {}


def test_get_plan_falls_back_to_sample(service, kb):
    result = service.get_plan("new-user")
    assert result["sample"] is True
    assert result["id"] is None
    assert result["plan"] == build_sample_plan(kb).to_dict()


def test_default_duration_comes_from_engine_config(questionnaire, kb, answers_for):
    service = AssessmentService(
        repository=FakeRepo(),
        questionnaire=questionnaire,
        knowledge_base=kb,
        engine=EngineConfig(default_duration_weeks=1),
    )
    service.submit_assessment("u1", answers_for(pitta=10))
    assert service.create_plan("u1", seed=1)["plan"]["duration_weeks"] == 1


def test_complete_meal_tracks_percent(service, answers_for):
    service.submit_assessment("u1", answers_for(vata=10))
    service.create_plan("u1", seed=3, duration_weeks=1)

    first = service.complete_meal("u1", 1, 1, "breakfast")
    assert first == {
        "slot": "w1-d1-breakfast",
        "created": True,
        "completed": 1,
        "total_slots": 21,
        "percent_complete": 5,
    }
    repeat = service.complete_meal("u1", 1, 1, "breakfast")
    assert repeat["created"] is False
    assert repeat["completed"] == 1


def test_complete_meal_rejects_unknown_slot(service, answers_for):
    service.submit_assessment("u1", answers_for(vata=10))
    service.create_plan("u1", seed=3, duration_weeks=1)
    with pytest.raises(ValidationError) as exc:
        service.complete_meal("u1", 2, 1, "lunch")
    assert exc.value.errors[0]["code"] == "unknown_slot"


def test_progress_summary(service):
    user = f"u-{uuid.uuid4()}"
    assert service.progress_summary(user)["count"] == 0

    service.add_progress(user, {"weight": 80, "energy_level": 4, "stress_level": 7})
    first = service._repo.progress[user][0]
    service._repo.progress[user][0] = replace(first, recorded_at=first.recorded_at - timedelta(days=7))
    service.add_progress(user, {"weight": 78, "energy_level": 6, "stress_level": 5})

    summary = service.progress_summary(user)
    assert summary["count"] == 2
    assert summary["latest"]["weight"] == 78
    assert summary["trends"]["weight"]["is_positive"] is True
    assert summary["trends"]["energy_level"]["is_positive"] is True
    assert summary["trends"]["stress_level"]["is_positive"] is True
    assert summary["trends"]["sleep_quality"]["change"] == 0
