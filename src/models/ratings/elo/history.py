"""elo_history table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
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
from models.scrim import TEAMS

RESULTS = ("win", "loss", "draw")


class EloHistory(Base):
    """Immutable rating-change event (one row per rated player per scrim)."""

    __tablename__ = "elo_history"
    __table_args__ = (
        UniqueConstraint("scrim_id", "game_name_lower", name="uq_elo_history_scrim_player"),
        CheckConstraint("elo_after = elo_before + elo_change", name="ck_elo_history_delta"),
        Index("idx_elo_history_player", "game_name_lower", "created_at"),
        Index("idx_elo_history_scrim", "scrim_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_name_lower: Mapped[str] = mapped_column(String(64), nullable=False)
    scrim_id: Mapped[int] = mapped_column(ForeignKey("scrims.id"), nullable=False)
    elo_before: Mapped[int] = mapped_column(Integer, nullable=False)
    elo_after: Mapped[int] = mapped_column(Integer, nullable=False)
    elo_change: Mapped[int] = mapped_column(Integer, nullable=False)
    result: Mapped[str] = mapped_column(
        Enum(*RESULTS, name="elo_result", native_enum=False),
        nullable=False,
    )
    team: Mapped[str] = mapped_column(
        Enum(*TEAMS, name="elo_history_team", native_enum=False),
        nullable=False,
    )
    team_score: Mapped[int] = mapped_column(Integer, nullable=False)
    opponent_score: Mapped[int] = mapped_column(Integer, nullable=False)
    kills: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deaths: Mapped[int | None] = mapped_column(Integer, nullable=True)
    k_factor: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
