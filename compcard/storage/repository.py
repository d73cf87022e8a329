"""Cached match score maintenance.

Loads board and profile snapshots from the database, runs the matching
engine and writes scores back onto board_applications (and the denormalized
copy on applications). Every change that can move a score triggers an
immediate recompute of the affected rows:

- board requirements or weights updated -> every application on that board
- profile updated -> every board placement of that profile's applications
- application assigned to a board -> that single placement
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from compcard.boards.models import BoardConfig, BoardRequirement, BoardScoringWeights
from compcard.matching.recompute import BatchRecomputer, BatchResult, ScoringJob
from compcard.matching.scorer import ENGINE_VERSION, ranking_key
from compcard.profile.models import TalentProfile
from compcard.storage.models import (
    Application,
    Board,
    BoardApplication,
    BoardRequirementRow,
    BoardScoringWeightsRow,
    Profile,
    utcnow,
)

logger = logging.getLogger(__name__)

REQUIREMENT_JSON_FIELDS = (
    "genders",
    "body_types",
    "comfort_levels",
    "experience_levels",
    "skills",
    "locations",
)
PROFILE_JSON_FIELDS = ("comfort_levels", "skills")


class BoardNotFoundError(LookupError):
    """Raised when a board id does not exist."""


class ApplicationNotFoundError(LookupError):
    """Raised when an application id does not exist."""


class ProfileNotFoundError(LookupError):
    """Raised when a profile id does not exist."""


def row_to_dict(row: Any) -> Dict[str, Any]:
    """Column values of an ORM row, keyed by column name."""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


def get_board(session: Session, board_id: str) -> Board:
    board = session.get(Board, board_id)
    if board is None:
        raise BoardNotFoundError(f"Board not found: {board_id}")
    return board


def get_application(session: Session, application_id: str) -> Application:
    application = session.get(Application, application_id)
    if application is None:
        raise ApplicationNotFoundError(f"Application not found: {application_id}")
    return application


def board_config(board: Board) -> BoardConfig:
    """Build the engine's view of a board from its rows.

    A board without a requirements row has no constraints; one without a
    weights row has every weight at 0.
    """
    requirements = row_to_dict(board.requirements) if board.requirements else None
    weights = row_to_dict(board.scoring_weights) if board.scoring_weights else None
    return BoardConfig(
        board_id=board.id,
        name=board.name,
        requirements=BoardRequirement.from_record(requirements),
        weights=BoardScoringWeights.from_record(weights),
    )


def load_board_config(session: Session, board_id: str) -> BoardConfig:
    """Load a board's requirements and weights by id."""
    return board_config(get_board(session, board_id))


def _profile_loader(
    record: Optional[Dict[str, Any]],
    application_id: str,
    as_of: date,
) -> Callable[[], TalentProfile]:
    def load() -> TalentProfile:
        if record is None:
            raise ProfileNotFoundError(f"No profile for application {application_id}")
        return TalentProfile.from_record(record, as_of=as_of)

    return load


def _recompute(
    session: Session,
    placements: Sequence[BoardApplication],
    configs: Mapping[str, BoardConfig],
    recomputer: Optional[BatchRecomputer],
    as_of: Optional[date],
) -> BatchResult:
    """Score placements and write the results back in this session."""
    as_of = as_of or date.today()
    recomputer = recomputer or BatchRecomputer()

    # Snapshot rows up front; workers never touch the session
    by_key: Dict[Tuple[str, str], BoardApplication] = {}
    jobs = []
    for placement in placements:
        application = placement.application
        profile = application.profile if application is not None else None
        record = row_to_dict(profile) if profile is not None else None
        by_key[(placement.board_id, placement.application_id)] = placement
        jobs.append(ScoringJob(
            application_id=placement.application_id,
            board=configs[placement.board_id],
            profile=_profile_loader(record, placement.application_id, as_of),
            created_at=application.created_at if application is not None else None,
        ))

    batch = recomputer.run(jobs)
    now = utcnow()

    for scored in batch.scored:
        placement = by_key[(scored.job.board.board_id, scored.job.application_id)]
        _store_score(placement, scored.result.score, scored.result.to_details(), now)

    for skipped in batch.skipped:
        placement = by_key[(skipped.job.board.board_id, skipped.job.application_id)]
        # Never leave an old score looking fresh
        _store_score(
            placement,
            None,
            {"error": skipped.error, "engine_version": ENGINE_VERSION},
            now,
        )

    session.flush()
    return batch


def _store_score(
    placement: BoardApplication,
    score: Optional[int],
    details: Dict[str, Any],
    now: datetime,
) -> None:
    placement.match_score = score
    placement.match_details = json.dumps(details, sort_keys=True)
    placement.updated_at = now

    application = placement.application
    if application is not None and application.board_id == placement.board_id:
        application.match_score = score
        application.match_calculated_at = now


def recompute_board_scores(
    session: Session,
    board_id: str,
    recomputer: Optional[BatchRecomputer] = None,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Recompute cached scores for every application on a board.

    Args:
        session: Open database session
        board_id: Board to recompute
        recomputer: Batch runner (defaults to a serial one)
        as_of: Date used to derive ages from dates of birth (default: today)

    Returns:
        BatchResult for the board
    """
    board = get_board(session, board_id)
    config = board_config(board)
    stmt = (
        select(BoardApplication)
        .where(BoardApplication.board_id == board.id)
        .options(selectinload(BoardApplication.application).selectinload(Application.profile))
    )
    placements = list(session.scalars(stmt))
    logger.info(f"Recomputing {len(placements)} match scores for board {board_id}")
    return _recompute(session, placements, {board.id: config}, recomputer, as_of)


def recompute_profile_scores(
    session: Session,
    profile_id: str,
    recomputer: Optional[BatchRecomputer] = None,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Recompute cached scores for every board placement of a profile.

    Args:
        session: Open database session
        profile_id: Profile whose attributes changed
        recomputer: Batch runner (defaults to a serial one)
        as_of: Date used to derive ages from dates of birth (default: today)

    Returns:
        BatchResult across all affected boards
    """
    if session.get(Profile, profile_id) is None:
        raise ProfileNotFoundError(f"Profile not found: {profile_id}")

    stmt = (
        select(BoardApplication)
        .join(Application, BoardApplication.application_id == Application.id)
        .where(Application.profile_id == profile_id)
        .options(selectinload(BoardApplication.board))
    )
    placements = list(session.scalars(stmt))

    configs: Dict[str, BoardConfig] = {}
    for placement in placements:
        if placement.board_id not in configs:
            configs[placement.board_id] = board_config(placement.board)

    logger.info(
        f"Recomputing {len(placements)} match scores for profile {profile_id} "
        f"across {len(configs)} boards"
    )
    return _recompute(session, placements, configs, recomputer, as_of)


def update_profile(
    session: Session,
    profile_id: str,
    values: Mapping[str, Any],
    recomputer: Optional[BatchRecomputer] = None,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Apply profile edits and refresh every score that depends on them.

    Args:
        session: Open database session
        profile_id: Profile to edit
        values: Column values; list values for JSON columns are encoded

    Returns:
        BatchResult of the triggered recompute

    Raises:
        ProfileNotFoundError: If the profile does not exist
        ValueError: If a key is not a profile column
    """
    profile = session.get(Profile, profile_id)
    if profile is None:
        raise ProfileNotFoundError(f"Profile not found: {profile_id}")

    columns = set(Profile.__table__.columns.keys()) - {"id", "created_at", "updated_at"}
    unknown = set(values) - columns
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    for key, value in values.items():
        if key in PROFILE_JSON_FIELDS and isinstance(value, (list, tuple)):
            value = json.dumps(list(value))
        setattr(profile, key, value)

    session.flush()
    return recompute_profile_scores(session, profile_id, recomputer, as_of)


def update_board_requirements(
    session: Session,
    board_id: str,
    values: Mapping[str, Any],
    recomputer: Optional[BatchRecomputer] = None,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Replace a board's requirements and recompute its scores.

    Fields missing from values are cleared (no constraint).
    """
    board = get_board(session, board_id)
    requirements = BoardRequirement.model_validate(dict(values))

    row = board.requirements
    if row is None:
        row = BoardRequirementRow()
        board.requirements = row

    for name in BoardRequirement.model_fields:
        value = getattr(requirements, name)
        if name in REQUIREMENT_JSON_FIELDS:
            value = json.dumps(value) if value else None
        elif name == "social_reach_importance":
            value = value.value if value is not None else None
        setattr(row, name, value)

    session.flush()
    return recompute_board_scores(session, board_id, recomputer, as_of)


def update_board_weights(
    session: Session,
    board_id: str,
    values: Mapping[str, Any],
    recomputer: Optional[BatchRecomputer] = None,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Replace a board's weight sliders and recompute its scores.

    Out-of-range weights are clamped to 0-5; missing ones become 0.
    """
    board = get_board(session, board_id)
    weights = BoardScoringWeights.model_validate(dict(values))

    row = board.scoring_weights
    if row is None:
        row = BoardScoringWeightsRow()
        board.scoring_weights = row

    for name, value in weights.model_dump().items():
        setattr(row, name, value)

    session.flush()
    return recompute_board_scores(session, board_id, recomputer, as_of)


def assign_application_to_board(
    session: Session,
    application_id: str,
    board_id: Optional[str],
    recomputer: Optional[BatchRecomputer] = None,
    as_of: Optional[date] = None,
) -> Optional[BoardApplication]:
    """Move an application onto a board and score it there.

    The application is removed from any other board first. Passing
    board_id=None only removes it.

    Returns:
        The board placement, or None when unassigned
    """
    application = get_application(session, application_id)
    board = get_board(session, board_id) if board_id is not None else None

    placement = None
    for existing in list(application.board_applications):
        if board is not None and existing.board_id == board.id:
            placement = existing
        else:
            application.board_applications.remove(existing)

    application.board_id = board.id if board is not None else None

    if board is None:
        application.match_score = None
        application.match_calculated_at = None
        session.flush()
        return None

    if placement is None:
        placement = BoardApplication(board=board, application=application)
        session.add(placement)
    session.flush()

    _recompute(session, [placement], {board.id: board_config(board)}, recomputer, as_of)
    return placement


def duplicate_board(session: Session, board_id: str, name: Optional[str] = None) -> Board:
    """Copy a board with its requirements and weights, but no applications."""
    board = get_board(session, board_id)

    copy = Board(
        agency_id=board.agency_id,
        name=name or f"{board.name} (Copy)",
        description=board.description,
        is_active=board.is_active,
        sort_order=board.sort_order,
    )

    skip = {"id", "board_id", "created_at", "updated_at"}
    if board.requirements is not None:
        copy.requirements = BoardRequirementRow(**{
            k: v for k, v in row_to_dict(board.requirements).items() if k not in skip
        })
    if board.scoring_weights is not None:
        copy.scoring_weights = BoardScoringWeightsRow(**{
            k: v for k, v in row_to_dict(board.scoring_weights).items() if k not in skip
        })

    session.add(copy)
    session.flush()
    logger.info(f"Duplicated board {board_id} as {copy.id}")
    return copy


def delete_board(session: Session, board_id: str) -> None:
    """Delete a board with its requirements, weights and placements."""
    board = get_board(session, board_id)
    session.delete(board)
    session.flush()


def parse_details(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode stored match_details, tolerating malformed JSON."""
    if not raw:
        return None
    try:
        details = json.loads(raw)
    except ValueError:
        logger.warning("Malformed match_details JSON")
        return None
    return details if isinstance(details, dict) else None


def board_rankings(session: Session, board_id: str) -> List[Dict[str, Any]]:
    """Cached scores for a board, ranked by (score desc, created_at asc).

    Rows whose details were produced by a different engine version are
    flagged as stale.
    """
    board = get_board(session, board_id)
    stmt = (
        select(BoardApplication)
        .where(BoardApplication.board_id == board.id)
        .options(selectinload(BoardApplication.application).selectinload(Application.profile))
    )

    rows = []
    for placement in session.scalars(stmt):
        application = placement.application
        profile = application.profile
        details = parse_details(placement.match_details)
        name = " ".join(p for p in (profile.first_name, profile.last_name) if p) or None
        rows.append({
            "application_id": placement.application_id,
            "profile_id": application.profile_id,
            "profile_name": name,
            "match_score": placement.match_score,
            "eligible": details.get("eligible") if details else None,
            "stale": details is None or details.get("engine_version") != ENGINE_VERSION,
            "match_details": details,
            "created_at": application.created_at,
            "scored_at": placement.updated_at,
        })

    rows.sort(key=lambda r: ranking_key(r["match_score"], r["created_at"], r["application_id"]))
    return rows
