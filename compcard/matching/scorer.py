"""Weighted match score calculation.

Combines per-criterion satisfaction values with a board's weight sliders:

    score = round_half_up(100 * sum(w_i * s_i) / sum(w_i))

over active criteria only, where a criterion is active when the board
configured it and its weight is above zero. A board with no active criteria
scores 0.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from compcard.boards.models import BoardScoringWeights, SocialReachImportance
from compcard.matching.evaluator import (
    CRITERION_FAMILIES,
    MEASUREMENT_CRITERIA,
    CriterionEvaluation,
    RequirementEvaluation,
)

logger = logging.getLogger(__name__)

# Bumped whenever the scoring rules change, so stale cached details can be spotted
ENGINE_VERSION = "3"

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class CriterionScore:
    """Contribution of one criterion family to the final score."""
    criterion: str
    configured: bool        # Board has a requirement for it
    active: bool            # Configured and weight > 0
    weight: float           # Clamped 0-5 weight
    satisfaction: float     # 0.0-1.0
    contribution: float     # Points added to the 0-100 score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active": self.active,
            "configured": self.configured,
            "weight": self.weight,
            "satisfaction": round(self.satisfaction, 4),
            "contribution": round(self.contribution, 4),
        }


@dataclass
class MatchResult:
    """Final score and breakdown for a (profile, board) pair."""
    score: int                              # 0-100
    weighted_score: int                     # 0-100 before the eligibility gate
    eligible: bool                          # Passed the gender gate
    no_active_criteria: bool
    criteria: Dict[str, CriterionScore] = field(default_factory=dict)
    gates: Dict[str, CriterionEvaluation] = field(default_factory=dict)
    measurements: Dict[str, CriterionEvaluation] = field(default_factory=dict)
    social_reach_importance: Optional[SocialReachImportance] = None
    profile_id: Optional[str] = None
    board_id: Optional[str] = None

    def to_details(self) -> Dict[str, Any]:
        """Breakdown payload stored as board_applications.match_details."""
        return {
            "criteria": {name: c.to_dict() for name, c in self.criteria.items()},
            "no_active_criteria": self.no_active_criteria,
            "eligible": self.eligible,
            "weighted_score": self.weighted_score,
            "gates": {name: g.to_dict() for name, g in self.gates.items()},
            "measurements": {
                name: m.to_dict() for name, m in self.measurements.items() if m.configured
            },
            "social_reach_importance": (
                self.social_reach_importance.value if self.social_reach_importance else None
            ),
            "engine_version": ENGINE_VERSION,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile_id": self.profile_id,
            "board_id": self.board_id,
            "match_score": self.score,
            "match_details": self.to_details(),
        }

    @property
    def active_criteria(self) -> List[str]:
        return [name for name, c in self.criteria.items() if c.active]


def _decimal(value: float) -> Decimal:
    # Shortest repr, so a stored weight of 2.9 stays exactly 2.9
    return Decimal(repr(float(value)))


def round_score(fraction: Union[float, Decimal]) -> int:
    """Convert a 0-1 fraction to a 0-100 integer, rounding half up."""
    if not isinstance(fraction, Decimal):
        fraction = _decimal(fraction)
    points = (fraction * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(MIN_SCORE, min(MAX_SCORE, int(points)))


class WeightedScorer:
    """Calculates 0-100 match scores from criterion evaluations."""

    def combine(
        self,
        satisfactions: Mapping[str, float],
        configured: Mapping[str, bool],
        weights: BoardScoringWeights,
    ) -> Dict[str, CriterionScore]:
        """Build per-family scores from raw satisfaction values.

        Args:
            satisfactions: Satisfaction per criterion family (missing = 0)
            configured: Whether the board configured each family (missing = no)
            weights: Board weight sliders

        Returns:
            CriterionScore for every family, in canonical order
        """
        weight_map = weights.as_dict()
        active_weight = math.fsum(
            weight_map[name]
            for name in CRITERION_FAMILIES
            if configured.get(name, False) and weight_map[name] > 0
        )

        scores = {}
        for name in CRITERION_FAMILIES:
            weight = weight_map[name]
            is_configured = bool(configured.get(name, False))
            active = is_configured and weight > 0
            satisfaction = min(1.0, max(0.0, float(satisfactions.get(name, 0.0))))
            contribution = 100 * weight * satisfaction / active_weight if active else 0.0
            scores[name] = CriterionScore(
                criterion=name,
                configured=is_configured,
                active=active,
                weight=weight,
                satisfaction=satisfaction,
                contribution=contribution,
            )
        return scores

    def exact_average(self, criteria: Mapping[str, CriterionScore]) -> Optional[Decimal]:
        """Weighted mean satisfaction over active criteria, computed in Decimal.

        Exact for tenth-unit weights, so half points such as 2.9 / 20 round up.

        Returns:
            Decimal in [0, 1], or None if no criterion is active
        """
        active = [c for c in criteria.values() if c.active]
        if not active:
            return None

        total_weight = sum((_decimal(c.weight) for c in active), Decimal(0))
        weighted = sum(
            (_decimal(c.weight) * _decimal(c.satisfaction) for c in active), Decimal(0)
        )
        return weighted / total_weight

    def weighted_average(self, criteria: Mapping[str, CriterionScore]) -> Optional[float]:
        """Weighted mean satisfaction over active criteria, or None if there are none."""
        average = self.exact_average(criteria)
        return None if average is None else float(average)

    def score(
        self,
        evaluation: RequirementEvaluation,
        weights: BoardScoringWeights,
        social_reach_importance: Optional[SocialReachImportance] = None,
        board_id: Optional[str] = None,
    ) -> MatchResult:
        """Calculate the match score for an evaluated pair.

        Args:
            evaluation: Result from the requirement evaluator
            weights: Board weight sliders
            social_reach_importance: Carried into the breakdown, not scored
            board_id: ID of the board

        Returns:
            MatchResult with the score and full breakdown
        """
        families = evaluation.families
        criteria = self.combine(
            {name: f.satisfaction for name, f in families.items()},
            {name: f.configured for name, f in families.items()},
            weights,
        )

        average = self.exact_average(criteria)
        no_active = average is None
        weighted_score = MIN_SCORE if no_active else round_score(average)

        eligible = evaluation.eligible
        score = weighted_score if eligible else MIN_SCORE

        return MatchResult(
            score=score,
            weighted_score=weighted_score,
            eligible=eligible,
            no_active_criteria=no_active,
            criteria=criteria,
            gates={"gender": evaluation.gender_gate},
            measurements={name: evaluation.criteria[name] for name in MEASUREMENT_CRITERIA},
            social_reach_importance=social_reach_importance,
            profile_id=evaluation.profile_id,
            board_id=board_id,
        )


def ranking_key(
    score: Optional[int],
    created_at: Optional[datetime],
    application_id: str,
) -> Tuple[bool, int, float, str]:
    """Sort key for (score desc, created_at asc), unscored last."""
    created = created_at.timestamp() if created_at else math.inf
    return (score is None, -(score or 0), created, application_id)


@dataclass
class RankedMatch:
    """A scored application ready for sorting in a talent list."""
    application_id: str
    created_at: Optional[datetime]
    result: Optional[MatchResult]           # None when scoring was skipped
    profile_name: Optional[str] = None

    @property
    def score(self) -> Optional[int]:
        return self.result.score if self.result else None


def rank_matches(matches: Sequence[RankedMatch]) -> List[RankedMatch]:
    """Sort by score (highest first), then earliest application.

    Unscored entries go last; the application id breaks any remaining tie so
    the order is identical across recomputations.

    Args:
        matches: Scored applications in any order

    Returns:
        New list in ranking order
    """
    ranked = sorted(
        matches,
        key=lambda m: ranking_key(m.score, m.created_at, m.application_id),
    )
    logger.debug(f"Ranked {len(ranked)} applications")
    return ranked
