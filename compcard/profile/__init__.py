"""Profile module for talent profile snapshots."""

from compcard.profile.models import TalentProfile, calculate_age

__all__ = [
    "TalentProfile",
    "calculate_age",
]
