"""scrims, scrim_players and scrim_score_submissions table models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base

SCRIM_STATUSES = (
    "waiting",
    "ready_check",
    "in_progress",
    "scoring",
    "finalized",
    "expired",
    "cancelled",
)
TEAMS = ("team_a", "team_b")
WINNERS = ("team_a", "team_b", "draw")


class Scrim(Base):
    """One peer-organized match and its lifecycle timestamps."""

    __tablename__ = "scrims"
    __table_args__ = (
        CheckConstraint("min_players_per_team >= 1", name="ck_scrims_min_players"),
        CheckConstraint(
            "max_players_per_team >= min_players_per_team",
            name="ck_scrims_max_players",
        ),
        Index("idx_scrims_status", "status"),
        Index("idx_scrims_status_expires", "status", "expires_at"),
        Index("idx_scrims_created_by", "created_by"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_by_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    title: Mapped[str | None] = mapped_column(String(256), nullable=True)
    map: Mapped[str | None] = mapped_column(String(128), nullable=True)
    min_players_per_team: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_players_per_team: Mapped[int] = mapped_column(Integer, nullable=False, default=8)
    status: Mapped[str] = mapped_column(
        Enum(*SCRIM_STATUSES, name="scrim_status", native_enum=False),
        nullable=False,
        default="waiting",
    )
    team_a_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    team_b_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    winner: Mapped[str | None] = mapped_column(
        Enum(*WINNERS, name="scrim_winner", native_enum=False),
        nullable=True,
    )
    tracker_session_id: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_ranked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    ranked_processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    ready_check_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    finalized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)


class ScrimPlayer(Base):
    """Membership of one account in one scrim."""

    __tablename__ = "scrim_players"
    __table_args__ = (
        UniqueConstraint("scrim_id", "account_id", name="uq_scrim_players_scrim_account"),
        Index("idx_scrim_players_scrim_team", "scrim_id", "team"),
        Index("idx_scrim_players_account", "account_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    scrim_id: Mapped[int] = mapped_column(
        ForeignKey("scrims.id", ondelete="CASCADE"),
        nullable=False,
    )
    account_id: Mapped[str] = mapped_column(String(128), nullable=False)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    is_ready: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    team: Mapped[str | None] = mapped_column(
        Enum(*TEAMS, name="scrim_team", native_enum=False),
        nullable=True,
    )
    voted_reroll: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    ready_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)


class ScrimScoreSubmission(Base):
    """One participant's claim of the final score."""

    __tablename__ = "scrim_score_submissions"
    __table_args__ = (
        UniqueConstraint("scrim_id", "account_id", name="uq_scrim_scores_scrim_account"),
        CheckConstraint("team_a_score >= 0", name="ck_scrim_scores_team_a"),
        CheckConstraint("team_b_score >= 0", name="ck_scrim_scores_team_b"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    scrim_id: Mapped[int] = mapped_column(
        ForeignKey("scrims.id", ondelete="CASCADE"),
        nullable=False,
    )
    account_id: Mapped[str] = mapped_column(String(128), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    team_a_score: Mapped[int] = mapped_column(Integer, nullable=False)
    team_b_score: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
