"""Pydantic models for board requirements and scoring weights."""

import logging
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from compcard.processing.normalizer import parse_count, parse_number, parse_tag_list

logger = logging.getLogger(__name__)


class SocialReachImportance(str, Enum):
    """How much the agency cares about social reach (informational only)."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class BoardRequirement(BaseModel):
    """Talent requirements configured on a board.

    Every field is optional; an unset field places no constraint on the
    matching criterion.
    """

    # Range criteria
    min_age: Optional[float] = None
    max_age: Optional[float] = None
    min_height_cm: Optional[float] = None
    max_height_cm: Optional[float] = None
    min_bust: Optional[float] = None
    max_bust: Optional[float] = None
    min_waist: Optional[float] = None
    max_waist: Optional[float] = None
    min_hips: Optional[float] = None
    max_hips: Optional[float] = None

    # Set criteria (stored as JSON arrays)
    genders: List[str] = Field(default_factory=list)
    body_types: List[str] = Field(default_factory=list)
    comfort_levels: List[str] = Field(default_factory=list)
    experience_levels: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)

    # Social reach
    min_social_reach: Optional[int] = Field(None, description="Minimum follower count")
    social_reach_importance: Optional[SocialReachImportance] = None

    @field_validator(
        "min_age", "max_age", "min_height_cm", "max_height_cm",
        "min_bust", "max_bust", "min_waist", "max_waist", "min_hips", "max_hips",
        mode="before",
    )
    @classmethod
    def _coerce_bound(cls, value: Any, info: ValidationInfo) -> Optional[float]:
        return parse_number(value, info.field_name)

    @field_validator(
        "genders", "body_types", "comfort_levels", "experience_levels", "skills", "locations",
        mode="before",
    )
    @classmethod
    def _coerce_tags(cls, value: Any, info: ValidationInfo) -> List[str]:
        return parse_tag_list(value, info.field_name)

    @field_validator("min_social_reach", mode="before")
    @classmethod
    def _coerce_reach(cls, value: Any) -> Optional[int]:
        return parse_count(value, "min_social_reach")

    @field_validator("social_reach_importance", mode="before")
    @classmethod
    def _coerce_importance(cls, value: Any) -> Optional[SocialReachImportance]:
        if value is None or value == "":
            return None
        try:
            return SocialReachImportance(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown social_reach_importance: {value!r}")
            return None

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "BoardRequirement":
        """Build requirements from a board_requirements row (or None)."""
        if not record:
            return cls()
        return cls.model_validate(
            {key: record[key] for key in cls.model_fields if key in record}
        )

    def is_empty(self) -> bool:
        """Check if no criterion is constrained at all."""
        for value in self.model_dump(exclude={"social_reach_importance"}).values():
            if isinstance(value, list):
                if value:
                    return False
            elif value is not None:
                return False
        return True


class BoardScoringWeights(BaseModel):
    """Per-criterion weight sliders on a 0-5 scale."""

    MIN_WEIGHT: ClassVar[float] = 0.0
    MAX_WEIGHT: ClassVar[float] = 5.0

    age_weight: float = 0.0
    height_weight: float = 0.0
    measurements_weight: float = 0.0
    body_type_weight: float = 0.0
    comfort_weight: float = 0.0
    experience_weight: float = 0.0
    skills_weight: float = 0.0
    location_weight: float = 0.0
    social_reach_weight: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value: Any, info: ValidationInfo) -> float:
        weight = parse_number(value, info.field_name)
        if weight is None:
            if value is not None:
                logger.warning(f"Invalid {info.field_name} {value!r}, using 0")
            return cls.MIN_WEIGHT
        if weight < cls.MIN_WEIGHT or weight > cls.MAX_WEIGHT:
            clamped = min(cls.MAX_WEIGHT, max(cls.MIN_WEIGHT, weight))
            logger.warning(f"{info.field_name} {weight} out of range, clamped to {clamped}")
            return clamped
        return weight

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "BoardScoringWeights":
        """Build weights from a board_scoring_weights row (or None)."""
        if not record:
            return cls()
        return cls.model_validate(
            {key: record[key] for key in cls.model_fields if key in record}
        )

    def for_criterion(self, criterion: str) -> float:
        """Return the weight for a criterion family name, e.g. "body_type"."""
        return getattr(self, f"{criterion}_weight")

    def as_dict(self) -> Dict[str, float]:
        """Weights keyed by criterion family name."""
        return {
            name[: -len("_weight")]: value
            for name, value in self.model_dump().items()
        }


class BoardConfig(BaseModel):
    """Everything the engine needs to know about a board."""

    board_id: Optional[str] = None
    name: Optional[str] = None
    requirements: BoardRequirement = Field(default_factory=BoardRequirement)
    weights: BoardScoringWeights = Field(default_factory=BoardScoringWeights)

    @field_validator("board_id", "name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("requirements", "weights", mode="before")
    @classmethod
    def _none_is_default(cls, value: Any) -> Any:
        return {} if value is None else value
