"""Matching module for requirement evaluation and match score calculation."""

from compcard.matching.engine import MatchingEngine, calculate_match_score
from compcard.matching.evaluator import (
    CRITERION_FAMILIES,
    CriterionEvaluation,
    RangeTolerance,
    RequirementEvaluation,
    RequirementEvaluator,
)
from compcard.matching.recompute import BatchRecomputer, BatchResult, ScoringJob
from compcard.matching.scorer import (
    CriterionScore,
    MatchResult,
    RankedMatch,
    WeightedScorer,
    rank_matches,
)

__all__ = [
    "CRITERION_FAMILIES",
    "BatchRecomputer",
    "BatchResult",
    "CriterionEvaluation",
    "CriterionScore",
    "MatchResult",
    "MatchingEngine",
    "RangeTolerance",
    "RankedMatch",
    "RequirementEvaluation",
    "RequirementEvaluator",
    "ScoringJob",
    "WeightedScorer",
    "calculate_match_score",
    "rank_matches",
]
