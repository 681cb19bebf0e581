"""Persistence helpers for claimed in-game names."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from models.game_name import UserGameName
from repositories.common import dialect_insert


def insert_game_name_if_free(
    session: Session,
    *,
    account_id: str,
    game_name: str,
    now: datetime,
) -> UserGameName | None:
    """Claim ``game_name``; None when any account already holds it (case-insensitive)."""
    game_name_lower = game_name.lower()
    stmt = (
        dialect_insert(session, UserGameName)
        .values(
            account_id=account_id,
            game_name=game_name,
            game_name_lower=game_name_lower,
            created_at=now,
        )
        .on_conflict_do_nothing(index_elements=[UserGameName.game_name_lower])
    )
    result = session.execute(stmt)
    if result.rowcount != 1:
        return None
    return get_game_name_by_lower(session, game_name_lower)


def get_game_name_by_lower(session: Session, game_name_lower: str) -> UserGameName | None:
    stmt = select(UserGameName).where(UserGameName.game_name_lower == game_name_lower)
    return session.execute(stmt).scalar_one_or_none()


def list_game_names(session: Session, account_id: str) -> list[UserGameName]:
    """Newest claim first."""
    stmt = (
        select(UserGameName)
        .where(UserGameName.account_id == account_id)
        .order_by(UserGameName.created_at.desc(), UserGameName.id.desc())
    )
    return list(session.execute(stmt).scalars())


def fetch_aliases(session: Session, account_ids: Sequence[str]) -> dict[str, list[str]]:
    """Map each account to its claimed names, oldest claim first."""
    if not account_ids:
        return {}
    stmt = (
        select(UserGameName.account_id, UserGameName.game_name)
        .where(UserGameName.account_id.in_(list(account_ids)))
        .order_by(UserGameName.created_at, UserGameName.id)
    )
    aliases: dict[str, list[str]] = defaultdict(list)
    for account_id, game_name in session.execute(stmt):
        aliases[account_id].append(game_name)
    return dict(aliases)


def delete_game_name(session: Session, *, account_id: str, game_name_id: int) -> int:
    """Delete only when the row belongs to ``account_id``."""
    result = session.execute(
        delete(UserGameName)
        .where(UserGameName.id == game_name_id, UserGameName.account_id == account_id)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)
