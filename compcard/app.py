"""compcard command line entry point."""

import argparse
import json
import logging
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from compcard.config import (
    LOG_LEVEL_ENV,
    LOG_PATH,
    ensure_data_dir,
    load_board,
    load_profile,
    load_settings,
)
from compcard.matching.engine import MatchingEngine
from compcard.matching.recompute import BatchRecomputer, BatchResult
from compcard.output.export import export_results
from compcard.storage.database import get_session, init_db
from compcard.storage.repository import (
    board_rankings,
    get_board,
    recompute_board_scores,
    recompute_profile_scores,
)

logger = logging.getLogger(__name__)

session_scope = contextmanager(get_session)


def configure_logging() -> None:
    """Configure application logging."""
    ensure_data_dir()

    root_logger = logging.getLogger()
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    log_path = str(LOG_PATH.resolve())
    has_file_handler = any(
        isinstance(handler, logging.FileHandler)
        and handler.baseFilename == log_path
        for handler in root_logger.handlers
    )
    if not has_file_handler:
        file_handler = logging.FileHandler(LOG_PATH, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(logging.WARNING)
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)


def _recomputer(settings_path: Optional[Path]) -> BatchRecomputer:
    settings = load_settings(settings_path)
    return BatchRecomputer(
        engine=MatchingEngine.from_settings(settings),
        max_workers=settings.max_workers,
    )


def _print_batch(batch: BatchResult) -> None:
    print(json.dumps({
        "scored": len(batch.scored),
        "skipped": [
            {"application_id": s.job.application_id, "error": s.error}
            for s in batch.skipped
        ],
        "ranking": [
            {"application_id": m.application_id, "match_score": m.score}
            for m in batch.ranking
        ],
    }, indent=2))


def cmd_score(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    engine = MatchingEngine.from_settings(settings)
    result = engine.score(load_profile(args.profile), load_board(args.board))
    print(json.dumps(result.to_dict(), indent=2))
    return 0


def cmd_recompute_board(args: argparse.Namespace) -> int:
    with session_scope() as session:
        batch = recompute_board_scores(session, args.board_id, _recomputer(args.settings))
    _print_batch(batch)
    return 0 if not batch.skipped else 1


def cmd_recompute_profile(args: argparse.Namespace) -> int:
    with session_scope() as session:
        batch = recompute_profile_scores(session, args.profile_id, _recomputer(args.settings))
    _print_batch(batch)
    return 0 if not batch.skipped else 1


def cmd_export(args: argparse.Namespace) -> int:
    with session_scope() as session:
        board = get_board(session, args.board_id)
        rows = board_rankings(session, board.id)
        export_results(rows, args.output, board_name=board.name)
    print(f"Exported {len(rows)} applications to {args.output}")
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    init_db()
    print("Database initialized")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compcard",
        description="Score talent profiles against agency boards",
    )
    parser.add_argument(
        "--settings", type=Path, default=None,
        help="Scoring settings YAML (default: data/settings.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    score = sub.add_parser("score", help="Score a profile YAML against a board YAML")
    score.add_argument("profile", type=Path)
    score.add_argument("board", type=Path)
    score.set_defaults(func=cmd_score)

    board = sub.add_parser("recompute-board", help="Recompute cached scores for a board")
    board.add_argument("board_id")
    board.set_defaults(func=cmd_recompute_board)

    profile = sub.add_parser("recompute-profile", help="Recompute cached scores for a profile")
    profile.add_argument("profile_id")
    profile.set_defaults(func=cmd_recompute_profile)

    export = sub.add_parser("export", help="Export a board's ranked applications")
    export.add_argument("board_id")
    export.add_argument("output", help="Output file (.json or .csv)")
    export.set_defaults(func=cmd_export)

    init = sub.add_parser("init-db", help="Create database tables")
    init.set_defaults(func=cmd_init_db)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the application."""
    load_dotenv()
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        return args.func(args)
    except LookupError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
