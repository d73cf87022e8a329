"""Unit tests for batch recomputation."""

from datetime import datetime, timedelta

import pytest

from compcard.matching.recompute import BatchRecomputer, ScoringJob
from compcard.profile.models import TalentProfile


@pytest.fixture
def height_board(make_board_config):
    return make_board_config(
        requirements={"min_height_cm": 170, "max_height_cm": 185, "skills": ["runway"]},
        weights={"height_weight": 3, "skills_weight": 1},
    )


def make_jobs(board, count=12):
    base = datetime(2025, 5, 1, 8, 0)
    jobs = []
    for i in range(count):
        profile = TalentProfile(
            id=f"p-{i}",
            name=f"Talent {i}",
            height_cm=160 + i * 2,
            skills=["runway"] if i % 2 else ["editorial"],
        )
        jobs.append(ScoringJob(
            application_id=f"app-{i:02d}",
            board=board,
            profile=profile,
            created_at=base + timedelta(minutes=i),
        ))
    return jobs


@pytest.mark.unit
def test_failing_profile_is_skipped(height_board, caplog):
    def broken_loader():
        raise ValueError("profile row unreadable")

    jobs = make_jobs(height_board, count=3)
    jobs.append(ScoringJob(application_id="app-bad", board=height_board, profile=broken_loader))

    batch = BatchRecomputer().run(jobs)

    assert len(batch.scored) == 3
    assert [s.job.application_id for s in batch.skipped] == ["app-bad"]
    assert batch.skipped[0].error == "profile row unreadable"
    assert "app-bad" in caplog.text
    assert batch.summary() == "3 scored, 1 skipped"


@pytest.mark.unit
def test_loader_called_lazily(height_board):
    calls = []

    def loader():
        calls.append(1)
        return TalentProfile(height_cm=175, skills=["runway"])

    job = ScoringJob(application_id="app-1", board=height_board, profile=loader)
    assert calls == []

    outcome = BatchRecomputer().run_one(job)
    assert calls == [1]
    assert outcome.result.score == 100


@pytest.mark.unit
def test_parallel_matches_serial(height_board):
    jobs = make_jobs(height_board)

    serial = BatchRecomputer(max_workers=1).run(jobs)
    parallel = BatchRecomputer(max_workers=4).run(jobs)

    assert [s.result.score for s in serial.scored] == [s.result.score for s in parallel.scored]
    assert (
        [m.application_id for m in serial.ranking]
        == [m.application_id for m in parallel.ranking]
    )


@pytest.mark.unit
def test_ranking_orders_by_score_then_time(height_board):
    jobs = make_jobs(height_board)
    ranking = BatchRecomputer().run(jobs).ranking

    scores = [m.score for m in ranking]
    assert scores == sorted(scores, reverse=True)
    for first, second in zip(ranking, ranking[1:]):
        if first.score == second.score:
            assert first.created_at <= second.created_at
    assert ranking[0].profile_name is not None


@pytest.mark.unit
def test_empty_batch():
    batch = BatchRecomputer(max_workers=8).run([])
    assert batch.scored == []
    assert batch.skipped == []
    assert batch.ranking == []


@pytest.mark.unit
def test_max_workers_floor():
    assert BatchRecomputer(max_workers=0).max_workers == 1
