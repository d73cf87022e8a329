"""Pydantic models for talent profile snapshots."""

import json
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from compcard.processing.normalizer import (
    parse_count,
    parse_positive_number,
    parse_tag_list,
)


def calculate_age(date_of_birth: Optional[date], as_of: date) -> Optional[int]:
    """Whole years between date_of_birth and as_of, or None."""
    if date_of_birth is None:
        return None

    age = as_of.year - date_of_birth.year
    if (as_of.month, as_of.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1

    return age if age >= 0 else None


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


class TalentProfile(BaseModel):
    """Read-only snapshot of a talent profile as seen by the matching engine.

    Every attribute is optional. A missing value never raises; the evaluator
    treats it as "cannot claim a match" for any criterion that needs it.
    """

    id: Optional[str] = Field(None, description="Profile id")
    name: Optional[str] = Field(None, description="Display name")

    # Physical attributes
    age: Optional[int] = Field(None, description="Age in whole years")
    date_of_birth: Optional[date] = Field(None, description="Date of birth")
    height_cm: Optional[float] = Field(None, description="Height in centimetres")
    bust: Optional[float] = Field(None, description="Bust measurement")
    waist: Optional[float] = Field(None, description="Waist measurement")
    hips: Optional[float] = Field(None, description="Hips measurement")
    gender: Optional[str] = Field(None, description="Gender as entered on the profile")
    body_types: List[str] = Field(default_factory=list, description="Body type tags")

    # Work preferences and experience
    comfort_levels: List[str] = Field(
        default_factory=list, description="Comfort levels, e.g. Swimwear, Lingerie"
    )
    experience_level: Optional[str] = Field(
        None, description="Beginner, Intermediate, Experienced or Professional"
    )
    skills: List[str] = Field(default_factory=list, description="Skill tags")

    # Location
    city: Optional[str] = Field(None, description="Primary city")
    city_secondary: Optional[str] = Field(None, description="Secondary city")

    # Social reach
    social_reach: Optional[int] = Field(
        None, description="Total follower count when known as a single number"
    )
    social_followers: Dict[str, int] = Field(
        default_factory=dict, description="Follower counts per platform"
    )

    @field_validator("body_types", "comfort_levels", "skills", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any, info: ValidationInfo) -> List[str]:
        return parse_tag_list(value, info.field_name)

    @field_validator("age", "social_reach", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any, info: ValidationInfo) -> Optional[int]:
        return parse_count(value, info.field_name)

    @field_validator("height_cm", "bust", "waist", "hips", mode="before")
    @classmethod
    def _coerce_measurement(cls, value: Any, info: ValidationInfo) -> Optional[float]:
        return parse_positive_number(value, info.field_name)

    @field_validator(
        "id", "name", "gender", "experience_level", "city", "city_secondary", mode="before"
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[date]:
        return _parse_date(value)

    @field_validator("social_followers", mode="before")
    @classmethod
    def _coerce_followers(cls, value: Any) -> Dict[str, int]:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return {}
        if not isinstance(value, Mapping):
            return {}
        followers = {}
        for platform, count in value.items():
            parsed = parse_count(count, f"social_followers.{platform}")
            if parsed is not None:
                followers[str(platform)] = parsed
        return followers

    @property
    def follower_count(self) -> Optional[int]:
        """Total social reach, or None when nothing is known."""
        if self.social_reach is not None:
            return self.social_reach
        if self.social_followers:
            return sum(self.social_followers.values())
        return None

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        as_of: Optional[date] = None,
    ) -> "TalentProfile":
        """Build a snapshot from a stored profile row.

        Args:
            record: Column mapping from the profiles table
            as_of: Date used to derive age from date_of_birth when age is unset

        Returns:
            TalentProfile with tolerant parsing applied to every field
        """
        data = {key: record.get(key) for key in cls.model_fields if key in record}

        # Older rows carry a single body_type column
        if not data.get("body_types") and record.get("body_type"):
            data["body_types"] = [record["body_type"]]

        if "social_followers" not in data:
            followers = {}
            for platform in ("instagram", "tiktok", "twitter"):
                count = record.get(f"{platform}_followers")
                if count is not None:
                    followers[platform] = count
            data["social_followers"] = followers

        if record.get("id") is not None:
            data["id"] = str(record["id"])

        if not data.get("name"):
            first = record.get("first_name") or ""
            last = record.get("last_name") or ""
            data["name"] = f"{first} {last}".strip() or None

        profile = cls.model_validate(data)

        if profile.age is None and profile.date_of_birth and as_of is not None:
            profile = profile.model_copy(
                update={"age": calculate_age(profile.date_of_birth, as_of)}
            )

        return profile
