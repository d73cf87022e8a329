"""Storage module for SQLite database operations."""

from compcard.storage.database import create_sqlite_engine, get_engine, get_session, init_db
from compcard.storage.models import (
    Application,
    Base,
    Board,
    BoardApplication,
    BoardRequirementRow,
    BoardScoringWeightsRow,
    Profile,
)
from compcard.storage.repository import (
    ApplicationNotFoundError,
    BoardNotFoundError,
    ProfileNotFoundError,
    assign_application_to_board,
    board_rankings,
    delete_board,
    duplicate_board,
    load_board_config,
    recompute_board_scores,
    recompute_profile_scores,
    update_board_requirements,
    update_board_weights,
    update_profile,
)

__all__ = [
    "Application",
    "ApplicationNotFoundError",
    "Base",
    "Board",
    "BoardApplication",
    "BoardNotFoundError",
    "BoardRequirementRow",
    "BoardScoringWeightsRow",
    "Profile",
    "ProfileNotFoundError",
    "assign_application_to_board",
    "board_rankings",
    "create_sqlite_engine",
    "delete_board",
    "duplicate_board",
    "get_engine",
    "get_session",
    "init_db",
    "load_board_config",
    "recompute_board_scores",
    "recompute_profile_scores",
    "update_board_requirements",
    "update_board_weights",
    "update_profile",
]
