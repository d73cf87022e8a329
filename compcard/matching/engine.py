"""Matching engine: requirement evaluation followed by weighted scoring."""

from typing import Optional

from compcard.boards.models import BoardConfig
from compcard.matching.evaluator import RequirementEvaluator
from compcard.matching.scorer import MatchResult, WeightedScorer
from compcard.profile.models import TalentProfile


class MatchingEngine:
    """Scores talent profiles against boards.

    Pure computation with no shared mutable state; safe to call from any
    number of threads.
    """

    def __init__(
        self,
        evaluator: Optional[RequirementEvaluator] = None,
        scorer: Optional[WeightedScorer] = None,
    ):
        self.evaluator = evaluator or RequirementEvaluator()
        self.scorer = scorer or WeightedScorer()

    @classmethod
    def from_settings(cls, settings) -> "MatchingEngine":
        """Build an engine from ScoringSettings (see compcard.config)."""
        return cls(
            evaluator=RequirementEvaluator(
                tolerance=settings.range_tolerance.to_tolerance(),
                tolerance_overrides={
                    name: override.to_tolerance()
                    for name, override in settings.tolerance_overrides.items()
                },
            )
        )

    def score(self, profile: TalentProfile, board: BoardConfig) -> MatchResult:
        """Score one profile against one board."""
        evaluation = self.evaluator.evaluate(profile, board.requirements)
        return self.scorer.score(
            evaluation,
            board.weights,
            social_reach_importance=board.requirements.social_reach_importance,
            board_id=board.board_id,
        )


def calculate_match_score(profile: TalentProfile, board: BoardConfig) -> MatchResult:
    """Score a profile against a board with default settings."""
    return MatchingEngine().score(profile, board)
