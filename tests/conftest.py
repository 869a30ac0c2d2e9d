import os

# In-memory database for every test run; must be set before modules.db is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from agents.knowledge_base import build_knowledge_base, get_knowledge_base
from agents.questionnaire_loader import build_questionnaire, get_questionnaire

QUESTION_IDS = (
    "body_build",
    "skin_type",
    "hair",
    "appetite",
    "digestion",
    "thinking",
    "stress",
    "memory",
    "free_time",
    "sleep",
)


def make_answers(vata=0, pitta=0, kapha=0):
    """Answer the shipped questionnaire with the given number of options per dosha."""
    doshas = ["vata"] * vata + ["pitta"] * pitta + ["kapha"] * kapha
    assert len(doshas) == len(QUESTION_IDS)
    return [
        {"question_id": qid, "option_id": f"{qid}.{dosha}"}
        for qid, dosha in zip(QUESTION_IDS, doshas)
    ]


def _profile(label, include, avoid, dishes):
    return {
        "label": label,
        "characteristics": [f"{label} trait"],
        "principles": [f"Eat {label.lower()} style", "Eat mindfully"],
        "foods_to_include": include,
        "foods_to_avoid": avoid,
        "lifestyle": ["Daily oil massage", f"{label} walk"],
        "supplements": ["Triphala"],
        "meals": {
            "breakfast": dishes,
            "lunch": dishes,
            "dinner": dishes,
        },
    }


@pytest.fixture
def kb_payload():
    dishes = [
        {"name": "Oat porridge", "tags": ["gluten"]},
        {"name": "Rice bowl", "tags": ["grains"]},
        {"name": "Lentil soup", "tags": ["legumes"]},
    ]
    return {
        "version": "test",
        "categories": {
            "vata": _profile("Vata", ["Rice", "Dairy", "Ghee"], ["Cold foods", "Raw vegetables"], dishes),
            "pitta": _profile("Pitta", ["Coconut", "Rice"], ["Spicy foods"], dishes),
            "kapha": _profile("Kapha", ["Spices", "Honey"], ["Dairy", "Cold foods"], dishes),
        },
        "lifestyle_descriptions": {"Daily oil massage": "Warm sesame oil before bathing."},
        "goal_guidance": {"better_sleep": ["Dinner before 7pm"]},
        "daily_routine": {"morning": ["Wake before sunrise"]},
    }


@pytest.fixture
def small_kb(kb_payload):
    return build_knowledge_base(kb_payload)


@pytest.fixture
def kb():
    return get_knowledge_base()


@pytest.fixture
def questionnaire():
    return get_questionnaire()


@pytest.fixture
def tiny_questionnaire():
    return build_questionnaire(
        {
            "version": "tiny",
            "questions": [
                {
                    "id": "q1",
                    "options": [
                        {"id": "q1.v", "dosha": "vata", "weight": 2},
                        {"id": "q1.p", "dosha": "pitta", "weight": 1},
                        {"id": "q1.z", "dosha": "kapha", "weight": 0},
                    ],
                },
                {
                    "id": "q2",
                    "options": [
                        {"id": "q2.k", "dosha": "kapha", "weight": 3},
                        {"id": "q2.z", "dosha": "pitta", "weight": 0},
                    ],
                },
            ],
        }
    )


@pytest.fixture
def answers_for():
    return make_answers
