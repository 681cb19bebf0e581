"""user_game_names table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class UserGameName(Base):
    """In-game name claimed by an account (first claim wins, case-insensitive)."""

    __tablename__ = "user_game_names"
    __table_args__ = (
        UniqueConstraint("game_name_lower", name="uq_user_game_names_lower"),
        Index("idx_user_game_names_account", "account_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(String(128), nullable=False)
    game_name: Mapped[str] = mapped_column(String(64), nullable=False)
    game_name_lower: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
