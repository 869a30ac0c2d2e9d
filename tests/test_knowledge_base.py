import pytest

from agents.knowledge_base import (
    DEFAULT_LIFESTYLE_DESCRIPTION,
    MEAL_CATEGORIES,
    build_knowledge_base,
    describe_lifestyle,
)
from agents.questionnaire_loader import CatalogError
from modules.assessment.dto import CATEGORY_ORDER, Category
from modules.assessment.errors import UnknownCategoryError


def test_shipped_knowledge_base_covers_every_category(kb):
    assert tuple(kb.profiles) == CATEGORY_ORDER
    for category in Category:
        profile = kb.profile(category)
        assert profile.principles
        for meal in MEAL_CATEGORIES:
            assert len(profile.meals[meal]) >= 7


def test_profile_accepts_names(kb):
    assert kb.profile("Kapha").category is Category.KAPHA


def test_missing_category_is_a_config_error(kb_payload):
    del kb_payload["categories"]["pitta"]
    with pytest.raises(UnknownCategoryError) as exc:
        build_knowledge_base(kb_payload)
    assert exc.value.context["missing"] == ["pitta"]


def test_unknown_category_key_is_rejected(kb_payload):
    kb_payload["categories"]["ether"] = kb_payload["categories"]["vata"]
    with pytest.raises(UnknownCategoryError):
        build_knowledge_base(kb_payload)


def test_empty_meal_pool_is_rejected(kb_payload):
    kb_payload["categories"]["kapha"]["meals"]["dinner"] = []
    with pytest.raises(CatalogError):
        build_knowledge_base(kb_payload)


def test_include_and_avoid_must_be_disjoint(kb_payload):
    kb_payload["categories"]["vata"]["foods_to_avoid"].append("dairy")
    with pytest.raises(CatalogError):
        build_knowledge_base(kb_payload)


def test_dish_tags_are_lowercased(kb_payload):
    kb_payload["categories"]["vata"]["meals"]["lunch"] = [{"name": "Naan", "tags": ["Gluten"]}]
    kb = build_knowledge_base(kb_payload)
    assert kb.profile(Category.VATA).meals["lunch"][0].tags == ("gluten",)


def test_describe_lifestyle_falls_back(small_kb):
    assert describe_lifestyle("Daily oil massage", small_kb) == "Warm sesame oil before bathing."
    assert describe_lifestyle("Juggling", small_kb) == DEFAULT_LIFESTYLE_DESCRIPTION
