"""Unit tests for profile and board models."""

from datetime import date
from decimal import Decimal

import pytest

from compcard.boards.models import (
    BoardConfig,
    BoardRequirement,
    BoardScoringWeights,
    SocialReachImportance,
)
from compcard.profile.models import TalentProfile, calculate_age


@pytest.mark.unit
def test_calculate_age_before_and_after_birthday():
    dob = date(2000, 6, 15)
    assert calculate_age(dob, date(2026, 6, 14)) == 25
    assert calculate_age(dob, date(2026, 6, 15)) == 26
    assert calculate_age(None, date(2026, 1, 1)) is None
    assert calculate_age(date(2030, 1, 1), date(2026, 1, 1)) is None


@pytest.mark.unit
def test_profile_from_record_parses_stored_columns():
    record = {
        "id": 42,
        "first_name": "Ana",
        "last_name": "Silva",
        "height_cm": 177,
        "bust": 0,
        "body_type": "Athletic",
        "comfort_levels": '["Swimwear", "Lingerie"]',
        "skills": "[broken",
        "date_of_birth": "2000-06-15",
        "instagram_followers": 9000,
        "tiktok_followers": 3000,
        "unrelated_column": "ignored",
    }

    profile = TalentProfile.from_record(record, as_of=date(2026, 6, 14))

    assert profile.id == "42"
    assert profile.name == "Ana Silva"
    assert profile.height_cm == 177.0
    assert profile.bust is None
    assert profile.body_types == ["Athletic"]
    assert profile.comfort_levels == ["Swimwear", "Lingerie"]
    assert profile.skills == []
    assert profile.age == 25
    assert profile.follower_count == 12000


@pytest.mark.unit
def test_profile_age_not_derived_without_reference_date():
    profile = TalentProfile.from_record({"date_of_birth": date(2000, 1, 1)})
    assert profile.age is None


@pytest.mark.unit
def test_profile_explicit_age_wins_over_date_of_birth():
    profile = TalentProfile.from_record(
        {"age": 30, "date_of_birth": "2000-01-01"}, as_of=date(2026, 1, 1)
    )
    assert profile.age == 30


@pytest.mark.unit
def test_follower_count_prefers_explicit_total():
    profile = TalentProfile(social_reach=500, social_followers={"instagram": 9000})
    assert profile.follower_count == 500
    assert TalentProfile().follower_count is None
    assert TalentProfile(social_followers='{"tiktok": 40}').follower_count == 40


@pytest.mark.unit
def test_requirement_tolerates_malformed_columns(caplog):
    req = BoardRequirement.from_record({
        "min_height_cm": "170",
        "max_height_cm": "tall",
        "skills": "[oops",
        "locations": '["Paris", "Milan"]',
        "min_social_reach": "-5",
        "social_reach_importance": "extreme",
        "board_id": "ignored",
    })

    assert req.min_height_cm == 170.0
    assert req.max_height_cm is None
    assert req.skills == []
    assert req.locations == ["Paris", "Milan"]
    assert req.min_social_reach is None
    assert req.social_reach_importance is None
    assert caplog.records


@pytest.mark.unit
def test_requirement_importance_is_case_insensitive():
    req = BoardRequirement(social_reach_importance="High")
    assert req.social_reach_importance is SocialReachImportance.HIGH


@pytest.mark.unit
def test_requirement_is_empty():
    assert BoardRequirement().is_empty()
    assert BoardRequirement(social_reach_importance="critical").is_empty()
    assert not BoardRequirement(genders=["Female"]).is_empty()
    assert not BoardRequirement(max_age=30).is_empty()


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [
        (3, 3.0),
        (Decimal("2.5"), 2.5),
        ("4", 4.0),
        (7, 5.0),
        (-2, 0.0),
        ("heavy", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
    ],
)
def test_weights_are_clamped_to_scale(raw, expected):
    weights = BoardScoringWeights(height_weight=raw)
    assert weights.height_weight == expected


@pytest.mark.unit
def test_weights_from_record_and_lookup():
    weights = BoardScoringWeights.from_record({
        "id": "w-1",
        "board_id": "b-1",
        "skills_weight": Decimal("3.0"),
        "body_type_weight": Decimal("1.5"),
    })
    assert weights.for_criterion("skills") == 3.0
    assert weights.for_criterion("body_type") == 1.5
    assert weights.as_dict()["age"] == 0.0
    assert len(weights.as_dict()) == 9


@pytest.mark.unit
def test_board_config_defaults_for_missing_rows():
    board = BoardConfig.model_validate(
        {"board_id": 7, "requirements": None, "weights": None}
    )
    assert board.board_id == "7"
    assert board.requirements.is_empty()
    assert board.weights.as_dict() == {name: 0.0 for name in board.weights.as_dict()}
