"""Boards module for requirement and weight configuration."""

from compcard.boards.models import (
    BoardConfig,
    BoardRequirement,
    BoardScoringWeights,
    SocialReachImportance,
)

__all__ = [
    "BoardConfig",
    "BoardRequirement",
    "BoardScoringWeights",
    "SocialReachImportance",
]
