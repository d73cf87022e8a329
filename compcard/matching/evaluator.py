"""Requirement evaluation engine.

Compares a talent profile against a board's requirements and produces a
satisfaction value in [0, 1] for every criterion, together with whether the
board configured that criterion at all. Range criteria fall off linearly
outside the configured window; set criteria are binary.
"""

import logging
from dataclasses import dataclass, field
from statistics import fmean
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from compcard.boards.models import BoardRequirement
from compcard.processing.normalizer import normalize_tag, tag_set
from compcard.profile.models import TalentProfile

logger = logging.getLogger(__name__)


# Weighted criterion families, in breakdown order
CRITERION_FAMILIES = (
    "age",
    "height",
    "measurements",
    "body_type",
    "comfort",
    "experience",
    "skills",
    "location",
    "social_reach",
)

MEASUREMENT_CRITERIA = ("bust", "waist", "hips")


@dataclass(frozen=True)
class RangeTolerance:
    """Falloff window for range criteria.

    Outside [min, max] satisfaction drops linearly to 0 over
    max(fraction * span, minimum) units, where span is the configured range,
    or the violated bound itself for one-sided and degenerate ranges.
    """
    fraction: float = 0.10
    minimum: float = 1.0

    def window(self, low: Optional[float], high: Optional[float], bound: float) -> float:
        if low is not None and high is not None and high > low:
            span = high - low
        else:
            span = abs(bound)
        return max(self.fraction * span, self.minimum)


@dataclass(frozen=True)
class CriterionEvaluation:
    """Result of evaluating a single criterion."""
    criterion: str                  # Criterion name, e.g. "height"
    configured: bool                # Board constrains this criterion
    satisfaction: float = 0.0       # 0.0-1.0, meaningful only when configured
    profile_value: Optional[str] = None
    required_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criterion": self.criterion,
            "configured": self.configured,
            "satisfaction": round(self.satisfaction, 4),
            "profile_value": self.profile_value,
            "required_value": self.required_value,
        }


@dataclass
class RequirementEvaluation:
    """All criterion evaluations for one (profile, board) pair."""
    profile_id: Optional[str]
    criteria: Dict[str, CriterionEvaluation] = field(default_factory=dict)

    @property
    def families(self) -> Dict[str, CriterionEvaluation]:
        """Evaluations keyed by weighted criterion family.

        Bust, waist and hips fold into "measurements" as the mean of the
        configured sub-criteria.
        """
        families = {}
        for name in CRITERION_FAMILIES:
            if name == "measurements":
                families[name] = self._measurements()
            else:
                families[name] = self.criteria[name]
        return families

    @property
    def gender_gate(self) -> CriterionEvaluation:
        return self.criteria["gender"]

    @property
    def eligible(self) -> bool:
        """False when the board restricts gender and the profile's gender differs.

        A profile without a gender passes; only a known mismatch excludes it.
        """
        gate = self.gender_gate
        if not gate.configured or gate.profile_value is None:
            return True
        return gate.satisfaction >= 1.0

    def _measurements(self) -> CriterionEvaluation:
        configured = [
            self.criteria[name]
            for name in MEASUREMENT_CRITERIA
            if self.criteria[name].configured
        ]
        if not configured:
            return CriterionEvaluation(criterion="measurements", configured=False)

        return CriterionEvaluation(
            criterion="measurements",
            configured=True,
            satisfaction=fmean(c.satisfaction for c in configured),
            profile_value=", ".join(f"{c.criterion}={c.profile_value}" for c in configured),
            required_value=", ".join(f"{c.criterion} {c.required_value}" for c in configured),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile_id": self.profile_id,
            "eligible": self.eligible,
            "criteria": {name: c.to_dict() for name, c in self.criteria.items()},
        }


def _format_range(low: Optional[float], high: Optional[float]) -> str:
    if low is not None and high is not None:
        return f"{low:g}-{high:g}"
    if low is not None:
        return f">= {low:g}"
    return f"<= {high:g}"


class RequirementEvaluator:
    """Evaluates talent profiles against board requirements.

    Stateless apart from its tolerance settings, so one instance can be
    shared between threads.
    """

    def __init__(
        self,
        tolerance: Optional[RangeTolerance] = None,
        tolerance_overrides: Optional[Mapping[str, RangeTolerance]] = None,
    ):
        """Initialize the evaluator.

        Args:
            tolerance: Default falloff window for range criteria
            tolerance_overrides: Per-criterion windows, e.g. {"height": ...}
        """
        self.tolerance = tolerance or RangeTolerance()
        self.tolerance_overrides = dict(tolerance_overrides or {})

    def evaluate(
        self,
        profile: TalentProfile,
        requirements: BoardRequirement,
    ) -> RequirementEvaluation:
        """Evaluate a profile against a board's requirements.

        Args:
            profile: Talent profile snapshot
            requirements: Board requirements

        Returns:
            RequirementEvaluation covering every criterion
        """
        req = requirements
        checks = [
            self._check_range("age", profile.age, req.min_age, req.max_age),
            self._check_range("height", profile.height_cm, req.min_height_cm, req.max_height_cm),
            self._check_range("bust", profile.bust, req.min_bust, req.max_bust),
            self._check_range("waist", profile.waist, req.min_waist, req.max_waist),
            self._check_range("hips", profile.hips, req.min_hips, req.max_hips),
            self._check_membership("gender", _one(profile.gender), req.genders),
            self._check_membership("body_type", profile.body_types, req.body_types),
            self._check_membership("comfort", profile.comfort_levels, req.comfort_levels),
            self._check_membership("experience", _one(profile.experience_level), req.experience_levels),
            self._check_membership("skills", profile.skills, req.skills),
            self._check_location(profile, req.locations),
            self._check_social_reach(profile, req.min_social_reach),
        ]

        return RequirementEvaluation(
            profile_id=profile.id,
            criteria={c.criterion: c for c in checks},
        )

    def _tolerance_for(self, criterion: str) -> RangeTolerance:
        return self.tolerance_overrides.get(criterion, self.tolerance)

    def _check_range(
        self,
        criterion: str,
        value: Optional[float],
        low: Optional[float],
        high: Optional[float],
    ) -> CriterionEvaluation:
        """Check a numeric value against an optional [low, high] window."""
        if low is None and high is None:
            return CriterionEvaluation(criterion=criterion, configured=False)

        if low is not None and high is not None and low > high:
            logger.warning(f"Inverted {criterion} range {low:g}-{high:g}, swapping bounds")
            low, high = high, low

        required = _format_range(low, high)

        # Zero or negative measurements mean "not provided"
        if value is None or value <= 0:
            return CriterionEvaluation(
                criterion=criterion,
                configured=True,
                satisfaction=0.0,
                profile_value=None,
                required_value=required,
            )

        if low is not None and value < low:
            distance, bound = low - value, low
        elif high is not None and value > high:
            distance, bound = value - high, high
        else:
            return CriterionEvaluation(
                criterion=criterion,
                configured=True,
                satisfaction=1.0,
                profile_value=f"{value:g}",
                required_value=required,
            )

        window = self._tolerance_for(criterion).window(low, high, bound)
        satisfaction = max(0.0, 1.0 - distance / window)

        return CriterionEvaluation(
            criterion=criterion,
            configured=True,
            satisfaction=satisfaction,
            profile_value=f"{value:g}",
            required_value=required,
        )

    def _check_membership(
        self,
        criterion: str,
        profile_values: Sequence[str],
        required_values: Sequence[str],
    ) -> CriterionEvaluation:
        """Binary match: any profile value appears in the board's set."""
        required = tag_set(required_values)
        if not required:
            return CriterionEvaluation(criterion=criterion, configured=False)

        offered = tag_set(profile_values)
        matched = bool(offered & required)

        return CriterionEvaluation(
            criterion=criterion,
            configured=True,
            satisfaction=1.0 if matched else 0.0,
            profile_value=", ".join(profile_values) or None,
            required_value=", ".join(required_values),
        )

    def _check_location(
        self,
        profile: TalentProfile,
        locations: Sequence[str],
    ) -> CriterionEvaluation:
        """Match primary or secondary city against the board's locations.

        A city matches when it equals a configured location or one contains
        the other ("New York" vs "New York City").
        """
        required = [normalize_tag(loc) for loc in locations if loc.strip()]
        if not required:
            return CriterionEvaluation(criterion="location", configured=False)

        cities = [c for c in (profile.city, profile.city_secondary) if c]
        matched = any(
            req in city or city in req
            for city in (normalize_tag(c) for c in cities)
            for req in required
        )

        return CriterionEvaluation(
            criterion="location",
            configured=True,
            satisfaction=1.0 if matched else 0.0,
            profile_value=", ".join(cities) or None,
            required_value=", ".join(locations),
        )

    def _check_social_reach(
        self,
        profile: TalentProfile,
        threshold: Optional[int],
    ) -> CriterionEvaluation:
        """Full credit at the threshold, linear down to 0 at half of it."""
        if threshold is None or threshold <= 0:
            return CriterionEvaluation(criterion="social_reach", configured=False)

        count = profile.follower_count
        if count is None:
            satisfaction = 0.0
        elif count >= threshold:
            satisfaction = 1.0
        else:
            half = threshold / 2
            satisfaction = min(1.0, max(0.0, (count - half) / half))

        return CriterionEvaluation(
            criterion="social_reach",
            configured=True,
            satisfaction=satisfaction,
            profile_value=str(count) if count is not None else None,
            required_value=f">= {threshold}",
        )

    def evaluate_batch(
        self,
        pairs: Iterable[Tuple[TalentProfile, BoardRequirement]],
    ) -> List[RequirementEvaluation]:
        """Evaluate many (profile, requirements) pairs.

        Args:
            pairs: Iterable of (profile, requirements)

        Returns:
            List of RequirementEvaluations in input order
        """
        results = [self.evaluate(profile, req) for profile, req in pairs]
        logger.debug(f"Evaluated {len(results)} profile/board pairs")
        return results


def _one(value: Optional[str]) -> List[str]:
    return [value] if value else []
