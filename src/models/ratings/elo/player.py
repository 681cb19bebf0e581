"""player_elo table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class PlayerElo(Base):
    """Current Elo per in-game name (telemetry identifies players by name, not account)."""

    __tablename__ = "player_elo"
    __table_args__ = (
        UniqueConstraint("game_name_lower", name="uq_player_elo_game_name_lower"),
        CheckConstraint("games_played >= 0", name="ck_player_elo_games_played"),
        CheckConstraint(
            "games_played = wins + losses + draws",
            name="ck_player_elo_result_counts",
        ),
        Index("idx_player_elo_rating", "elo"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_name_lower: Mapped[str] = mapped_column(String(64), nullable=False)
    game_name: Mapped[str] = mapped_column(String(64), nullable=False)
    elo: Mapped[int] = mapped_column(Integer, nullable=False, default=1200)
    games_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    draws: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
