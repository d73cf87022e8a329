"""Shared fixtures for compcard tests."""

import json
from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from compcard.boards.models import BoardConfig, BoardRequirement, BoardScoringWeights
from compcard.profile.models import TalentProfile
from compcard.storage.database import create_sqlite_engine
from compcard.storage.models import Application, Base, Board, Profile


@pytest.fixture
def session():
    """In-memory database session with every table created."""
    engine = create_sqlite_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def make_board_config():
    def _make(requirements=None, weights=None, board_id="board-1"):
        return BoardConfig(
            board_id=board_id,
            name="Test board",
            requirements=BoardRequirement.model_validate(requirements or {}),
            weights=BoardScoringWeights.model_validate(weights or {}),
        )
    return _make


@pytest.fixture
def runway_profile():
    return TalentProfile(
        id="p-1",
        name="Ana Silva",
        age=22,
        height_cm=177,
        bust=84,
        waist=61,
        hips=89,
        gender="Female",
        body_types=["Slim"],
        comfort_levels=["Swimwear", "Lingerie"],
        experience_level="Experienced",
        skills=["runway", "editorial"],
        city="New York City",
        social_reach=15000,
    )


@pytest.fixture
def add_application(session):
    """Create a profile and an application for it."""
    def _add(first_name="Ana", created_at=None, **profile_fields):
        for key in ("skills", "comfort_levels"):
            if isinstance(profile_fields.get(key), list):
                profile_fields[key] = json.dumps(profile_fields[key])
        profile = Profile(first_name=first_name, last_name="Test", **profile_fields)
        application = Application(
            profile=profile,
            agency_id="agency-1",
            created_at=created_at or datetime(2025, 1, 1, 12, 0, 0),
        )
        session.add_all([profile, application])
        session.flush()
        return application
    return _add


@pytest.fixture
def add_board(session):
    def _add(name="Runway SS26"):
        board = Board(agency_id="agency-1", name=name)
        session.add(board)
        session.flush()
        return board
    return _add
