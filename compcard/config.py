"""Configuration management for compcard."""

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field

from compcard.boards.models import BoardConfig
from compcard.matching.evaluator import RangeTolerance
from compcard.profile.models import TalentProfile

# Default paths
DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_DB_PATH = DATA_DIR / "compcard.db"
DEFAULT_SETTINGS_PATH = DATA_DIR / "settings.yaml"
LOG_PATH = DATA_DIR / "compcard.log"

# Environment overrides
DB_PATH_ENV = "COMPCARD_DB_PATH"
LOG_LEVEL_ENV = "COMPCARD_LOG_LEVEL"


class ToleranceSettings(BaseModel):
    """Falloff window for range criteria outside the configured bounds."""

    fraction: float = Field(0.10, ge=0.0, description="Share of the configured range")
    minimum: float = Field(1.0, gt=0.0, description="Smallest window in criterion units")

    def to_tolerance(self) -> RangeTolerance:
        return RangeTolerance(fraction=self.fraction, minimum=self.minimum)


class ScoringSettings(BaseModel):
    """Tunable parameters of the matching engine."""

    range_tolerance: ToleranceSettings = Field(default_factory=ToleranceSettings)
    tolerance_overrides: Dict[str, ToleranceSettings] = Field(
        default_factory=dict,
        description="Per-criterion windows: age, height, bust, waist, hips",
    )
    max_workers: int = Field(4, ge=1, description="Threads used for batch recompute")


def ensure_data_dir() -> None:
    """Ensure the data directory exists."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def get_db_path() -> Path:
    """Database path, honouring the COMPCARD_DB_PATH environment variable."""
    override = os.getenv(DB_PATH_ENV)
    if override:
        return Path(override)
    return DEFAULT_DB_PATH


def _read_yaml(path: Path) -> Optional[dict]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_settings(path: Optional[Path] = None) -> ScoringSettings:
    """Load scoring settings from YAML.

    Args:
        path: Optional path to settings file. Defaults to data/settings.yaml.

    Returns:
        ScoringSettings instance. Returns defaults if file doesn't exist.
    """
    if path is None:
        path = DEFAULT_SETTINGS_PATH

    if not path.exists():
        return ScoringSettings()

    data = _read_yaml(path)
    if data is None:
        return ScoringSettings()

    return ScoringSettings.model_validate(data)


def load_profile(path: Path) -> TalentProfile:
    """Load a talent profile snapshot from a YAML file.

    Args:
        path: Path to the profile file.

    Returns:
        TalentProfile instance. Returns an empty profile if the file is empty.
    """
    data = _read_yaml(path)
    if data is None:
        return TalentProfile()

    return TalentProfile.model_validate(data)


def save_profile(profile: TalentProfile, path: Path) -> Path:
    """Save a talent profile snapshot to a YAML file.

    Args:
        profile: TalentProfile instance to save.
        path: Path to save to.

    Returns:
        Path where profile was saved.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Convert to dict, excluding None values for cleaner YAML
    data = profile.model_dump(mode="json", exclude_none=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path


def load_board(path: Path) -> BoardConfig:
    """Load a board's requirements and weights from a YAML file.

    Expected layout::

        board_id: summer-swim
        name: Summer swimwear
        requirements:
          min_height_cm: 170
          skills: [runway, editorial]
        weights:
          height_weight: 5

    Args:
        path: Path to the board file.

    Returns:
        BoardConfig instance. Returns an empty board if the file is empty.
    """
    data = _read_yaml(path)
    if data is None:
        return BoardConfig()

    return BoardConfig.model_validate(data)
