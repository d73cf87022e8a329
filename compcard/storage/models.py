"""SQLAlchemy models for the board matching tables."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Profile(Base):
    """Talent profile. Read-only to the matching engine."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    city_secondary: Mapped[Optional[str]] = mapped_column(String(100))
    gender: Mapped[Optional[str]] = mapped_column(String(50))
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    age: Mapped[Optional[int]] = mapped_column(Integer)
    height_cm: Mapped[Optional[int]] = mapped_column(Integer)
    bust: Mapped[Optional[int]] = mapped_column(Integer)
    waist: Mapped[Optional[int]] = mapped_column(Integer)
    hips: Mapped[Optional[int]] = mapped_column(Integer)
    body_type: Mapped[Optional[str]] = mapped_column(String(50))
    comfort_levels: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    experience_level: Mapped[Optional[str]] = mapped_column(String(30))
    skills: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    social_reach: Mapped[Optional[int]] = mapped_column(Integer)
    instagram_followers: Mapped[Optional[int]] = mapped_column(Integer)
    tiktok_followers: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    applications: Mapped[List["Application"]] = relationship(
        back_populates="profile", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id!r}, name={self.first_name!r} {self.last_name!r})>"


class Application(Base):
    """A talent's application to an agency, optionally placed on a board."""

    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    profile_id: Mapped[str] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    agency_id: Mapped[Optional[str]] = mapped_column(String(36), index=True)
    status: Mapped[Optional[str]] = mapped_column(String(30))
    board_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("boards.id", ondelete="SET NULL"), index=True
    )
    match_score: Mapped[Optional[int]] = mapped_column(Integer, index=True)  # 0-100
    match_calculated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    profile: Mapped[Profile] = relationship(back_populates="applications")
    board_applications: Mapped[List["BoardApplication"]] = relationship(
        back_populates="application", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Application(id={self.id!r}, board_id={self.board_id!r})>"


class Board(Base):
    """Agency-defined talent search board."""

    __tablename__ = "boards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    agency_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    requirements: Mapped[Optional["BoardRequirementRow"]] = relationship(
        back_populates="board", cascade="all, delete-orphan", passive_deletes=True
    )
    scoring_weights: Mapped[Optional["BoardScoringWeightsRow"]] = relationship(
        back_populates="board", cascade="all, delete-orphan", passive_deletes=True
    )
    board_applications: Mapped[List["BoardApplication"]] = relationship(
        back_populates="board", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Board(id={self.id!r}, name={self.name!r})>"


class BoardRequirementRow(Base):
    """Requirement bounds and sets for a board (at most one per board)."""

    __tablename__ = "board_requirements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    board_id: Mapped[str] = mapped_column(
        ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )

    min_age: Mapped[Optional[int]] = mapped_column(Integer)
    max_age: Mapped[Optional[int]] = mapped_column(Integer)
    min_height_cm: Mapped[Optional[int]] = mapped_column(Integer)
    max_height_cm: Mapped[Optional[int]] = mapped_column(Integer)
    genders: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    min_bust: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    max_bust: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    min_waist: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    max_waist: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    min_hips: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    max_hips: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    body_types: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    comfort_levels: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    experience_levels: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    skills: Mapped[Optional[str]] = mapped_column(Text)  # JSON array
    locations: Mapped[Optional[str]] = mapped_column(Text)  # JSON array of cities
    min_social_reach: Mapped[Optional[int]] = mapped_column(Integer)
    social_reach_importance: Mapped[Optional[str]] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    board: Mapped[Board] = relationship(back_populates="requirements")

    __table_args__ = (UniqueConstraint("board_id", name="uq_board_requirements_board"),)


class BoardScoringWeightsRow(Base):
    """Weight sliders for a board (at most one per board)."""

    __tablename__ = "board_scoring_weights"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    board_id: Mapped[str] = mapped_column(
        ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )

    age_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    height_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    measurements_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    body_type_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    comfort_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    experience_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    skills_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    location_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    social_reach_weight: Mapped[Decimal] = mapped_column(Numeric(3, 1), default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    board: Mapped[Board] = relationship(back_populates="scoring_weights")

    __table_args__ = (UniqueConstraint("board_id", name="uq_board_scoring_weights_board"),)


class BoardApplication(Base):
    """An application placed on a board, with its cached match score."""

    __tablename__ = "board_applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    board_id: Mapped[str] = mapped_column(
        ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    application_id: Mapped[str] = mapped_column(
        ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    match_score: Mapped[Optional[int]] = mapped_column(Integer, index=True)  # 0-100
    match_details: Mapped[Optional[str]] = mapped_column(Text)  # JSON breakdown
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    board: Mapped[Board] = relationship(back_populates="board_applications")
    application: Mapped[Application] = relationship(back_populates="board_applications")

    __table_args__ = (
        UniqueConstraint("board_id", "application_id", name="uq_board_application"),
    )

    def __repr__(self) -> str:
        return (
            f"<BoardApplication(board_id={self.board_id!r}, "
            f"application_id={self.application_id!r}, match_score={self.match_score})>"
        )
