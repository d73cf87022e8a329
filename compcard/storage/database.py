"""Database connection management and initialization."""

from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from compcard.config import get_db_path
from compcard.storage.models import Base

# Module-level engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_sqlite_engine(url: str) -> Engine:
    """Create a SQLite engine with foreign key enforcement.

    Args:
        url: SQLAlchemy URL, e.g. "sqlite:///data/compcard.db" or "sqlite://"

    Returns:
        SQLAlchemy Engine instance.
    """
    engine = create_engine(
        url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def get_engine(db_path: Path | None = None) -> Engine:
    """Get or create the SQLAlchemy engine.

    Args:
        db_path: Optional path to the database file. Defaults to data/compcard.db
            or the COMPCARD_DB_PATH environment variable.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine

    if _engine is None:
        if db_path is None:
            db_path = get_db_path()

        # Ensure data directory exists
        db_path.parent.mkdir(parents=True, exist_ok=True)

        _engine = create_sqlite_engine(f"sqlite:///{db_path}")

    return _engine


def get_session() -> Generator[Session, None, None]:
    """Get a database session.

    Yields:
        SQLAlchemy Session instance.
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine())

    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Initialize the database by creating all tables.

    Args:
        db_path: Optional path to the database file.
    """
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
