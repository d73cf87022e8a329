"""Batch recomputation of cached match scores.

Each (application, board) pair is scored independently, so a batch can run
in parallel with no ordering between pairs. Ranking happens only after every
pair in the batch has finished. A pair that fails (for example, an unreadable
profile) is skipped and reported; the rest of the batch still completes.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Union

from compcard.boards.models import BoardConfig
from compcard.matching.engine import MatchingEngine
from compcard.matching.scorer import MatchResult, RankedMatch, rank_matches
from compcard.profile.models import TalentProfile

logger = logging.getLogger(__name__)

ProfileSource = Union[TalentProfile, Callable[[], TalentProfile]]


@dataclass
class ScoringJob:
    """One application to score against one board."""
    application_id: str
    board: BoardConfig
    profile: ProfileSource                  # Snapshot, or a loader returning one
    created_at: Optional[datetime] = None

    def resolve_profile(self) -> TalentProfile:
        if isinstance(self.profile, TalentProfile):
            return self.profile
        return self.profile()


@dataclass
class ScoredJob:
    job: ScoringJob
    result: MatchResult
    profile_name: Optional[str] = None


@dataclass
class SkippedJob:
    job: ScoringJob
    error: str


@dataclass
class BatchResult:
    """Outcome of a batch recompute."""
    scored: List[ScoredJob] = field(default_factory=list)
    skipped: List[SkippedJob] = field(default_factory=list)

    @property
    def ranking(self) -> List[RankedMatch]:
        """Scored applications sorted by (score desc, created_at asc)."""
        return rank_matches([
            RankedMatch(
                application_id=s.job.application_id,
                created_at=s.job.created_at,
                result=s.result,
                profile_name=s.profile_name,
            )
            for s in self.scored
        ])

    def summary(self) -> str:
        return f"{len(self.scored)} scored, {len(self.skipped)} skipped"


class BatchRecomputer:
    """Scores many jobs, optionally across a thread pool."""

    def __init__(self, engine: Optional[MatchingEngine] = None, max_workers: int = 1):
        """Initialize the recomputer.

        Args:
            engine: Matching engine to use (default settings if omitted)
            max_workers: Thread pool size; 1 runs serially
        """
        self.engine = engine or MatchingEngine()
        self.max_workers = max(1, max_workers)

    def run_one(self, job: ScoringJob) -> Union[ScoredJob, SkippedJob]:
        """Score a single job, converting any failure into a SkippedJob."""
        try:
            profile = job.resolve_profile()
            result = self.engine.score(profile, job.board)
        except Exception as e:
            logger.error(
                f"Skipping application {job.application_id} on board "
                f"{job.board.board_id}: {e}"
            )
            return SkippedJob(job=job, error=str(e) or type(e).__name__)
        return ScoredJob(job=job, result=result, profile_name=profile.name)

    def run(self, jobs: Sequence[ScoringJob]) -> BatchResult:
        """Score every job in the batch.

        Args:
            jobs: Jobs to score; order does not affect the results

        Returns:
            BatchResult with scored and skipped jobs in input order
        """
        if self.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(self.run_one, jobs))
        else:
            outcomes = [self.run_one(job) for job in jobs]

        batch = BatchResult()
        for outcome in outcomes:
            if isinstance(outcome, ScoredJob):
                batch.scored.append(outcome)
            else:
                batch.skipped.append(outcome)

        logger.info(f"Recomputed match scores: {batch.summary()}")
        return batch
