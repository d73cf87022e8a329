"""Unit tests for settings and YAML loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from compcard.config import (
    DB_PATH_ENV,
    DEFAULT_DB_PATH,
    ScoringSettings,
    get_db_path,
    load_board,
    load_profile,
    load_settings,
    save_profile,
)
from compcard.matching.engine import MatchingEngine
from compcard.profile.models import TalentProfile


@pytest.mark.unit
def test_missing_settings_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings == ScoringSettings()
    assert settings.range_tolerance.fraction == 0.10
    assert settings.max_workers == 4


@pytest.mark.unit
def test_empty_settings_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("")
    assert load_settings(path) == ScoringSettings()


@pytest.mark.unit
def test_settings_overrides_reach_engine(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "range_tolerance:\n"
        "  fraction: 0.2\n"
        "tolerance_overrides:\n"
        "  height:\n"
        "    fraction: 0.0\n"
        "    minimum: 4\n"
        "max_workers: 2\n"
    )
    settings = load_settings(path)
    engine = MatchingEngine.from_settings(settings)

    assert settings.max_workers == 2
    assert engine.evaluator.tolerance.fraction == 0.2
    assert engine.evaluator.tolerance.minimum == 1.0
    assert engine.evaluator.tolerance_overrides["height"].minimum == 4.0


@pytest.mark.unit
@pytest.mark.parametrize(
    "data",
    [
        {"max_workers": 0},
        {"range_tolerance": {"fraction": -0.1}},
        {"range_tolerance": {"minimum": 0}},
    ],
)
def test_invalid_settings_rejected(data):
    with pytest.raises(ValidationError):
        ScoringSettings.model_validate(data)


@pytest.mark.unit
def test_db_path_env_override(monkeypatch, tmp_path):
    monkeypatch.delenv(DB_PATH_ENV, raising=False)
    assert get_db_path() == DEFAULT_DB_PATH

    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "other.db"))
    assert get_db_path() == Path(tmp_path / "other.db")


@pytest.mark.unit
def test_profile_yaml_round_trip(tmp_path, runway_profile):
    path = save_profile(runway_profile, tmp_path / "nested" / "profile.yaml")
    assert load_profile(path) == runway_profile


@pytest.mark.unit
def test_empty_yaml_files(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_profile(path) == TalentProfile()
    assert load_board(path).requirements.is_empty()


@pytest.mark.unit
def test_load_board_yaml(tmp_path):
    path = tmp_path / "board.yaml"
    path.write_text(
        "board_id: summer-swim\n"
        "name: Summer swimwear\n"
        "requirements:\n"
        "  min_height_cm: 170\n"
        "  comfort_levels: [Swimwear]\n"
        "weights:\n"
        "  height_weight: 5\n"
        "  comfort_weight: 12\n"
    )
    board = load_board(path)

    assert board.board_id == "summer-swim"
    assert board.requirements.comfort_levels == ["Swimwear"]
    assert board.weights.height_weight == 5.0
    assert board.weights.comfort_weight == 5.0
