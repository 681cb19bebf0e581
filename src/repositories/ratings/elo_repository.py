"""Persistence helpers for player Elo state and per-scrim history."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from domain.ratings.common import EloResult
from domain.ratings.elo.calculator import PlayerEloEvent
from models.ratings.elo import EloHistory, PlayerElo
from repositories.common import dialect_insert

_RESULT_COUNTERS = {
    EloResult.WIN.value: "wins",
    EloResult.LOSS.value: "losses",
    EloResult.DRAW.value: "draws",
}


def history_exists(session: Session, scrim_id: int) -> bool:
    stmt = select(func.count()).select_from(EloHistory).where(EloHistory.scrim_id == scrim_id)
    return int(session.execute(stmt).scalar_one()) > 0


def fetch_scrim_history(session: Session, scrim_id: int) -> list[EloHistory]:
    stmt = (
        select(EloHistory)
        .where(EloHistory.scrim_id == scrim_id)
        .order_by(EloHistory.team, EloHistory.elo_change.desc(), EloHistory.id)
    )
    return list(session.execute(stmt).scalars())


def lock_player_elos(
    session: Session,
    game_names: Mapping[str, str],
    *,
    initial_elo: int,
    now: datetime,
) -> dict[str, PlayerElo]:
    """Seed missing rows, then load every requested row ``FOR UPDATE``.

    ``game_names`` maps lowercased name to the display casing used for new rows.
    """
    if not game_names:
        return {}

    seed_rows = [
        {
            "game_name_lower": game_name_lower,
            "game_name": game_name,
            "elo": initial_elo,
            "games_played": 0,
            "wins": 0,
            "losses": 0,
            "draws": 0,
            "created_at": now,
            "updated_at": now,
        }
        for game_name_lower, game_name in game_names.items()
    ]
    session.execute(
        dialect_insert(session, PlayerElo)
        .values(seed_rows)
        .on_conflict_do_nothing(index_elements=[PlayerElo.game_name_lower])
    )

    stmt = (
        select(PlayerElo)
        .where(PlayerElo.game_name_lower.in_(list(game_names)))
        .order_by(PlayerElo.game_name_lower)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {row.game_name_lower: row for row in session.execute(stmt).scalars()}


def insert_elo_history_events(
    session: Session,
    events: Sequence[PlayerEloEvent],
    *,
    now: datetime,
) -> None:
    if not events:
        return

    payload = [
        {
            "game_name_lower": event.game_name_lower,
            "scrim_id": event.scrim_id,
            "elo_before": event.elo_before,
            "elo_after": event.elo_after,
            "elo_change": event.elo_change,
            "result": event.result.value,
            "team": event.team.value,
            "team_score": event.team_score,
            "opponent_score": event.opponent_score,
            "kills": event.kills,
            "deaths": event.deaths,
            "k_factor": event.k_factor,
            "created_at": now,
        }
        for event in events
    ]
    session.execute(insert(EloHistory), payload)


def apply_elo_events(
    session: Session,
    events: Sequence[PlayerEloEvent],
    players: Mapping[str, PlayerElo],
    *,
    now: datetime,
) -> None:
    """Move each locked PlayerElo row to its post-scrim rating and bump its counters."""
    for event in events:
        player = players[event.game_name_lower]
        player.elo = event.elo_after
        player.game_name = event.game_name
        player.games_played += 1
        counter = _RESULT_COUNTERS[event.result.value]
        setattr(player, counter, getattr(player, counter) + 1)
        player.updated_at = now
    session.flush()


def revert_scrim_history(session: Session, scrim_id: int, *, now: datetime) -> int:
    """Undo every rating effect of one scrim and delete its history rows."""
    history = fetch_scrim_history(session, scrim_id)
    if not history:
        return 0

    stmt = (
        select(PlayerElo)
        .where(PlayerElo.game_name_lower.in_([row.game_name_lower for row in history]))
        .order_by(PlayerElo.game_name_lower)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    players = {row.game_name_lower: row for row in session.execute(stmt).scalars()}

    for row in history:
        player = players.get(row.game_name_lower)
        if player is None:
            continue
        player.elo -= row.elo_change
        player.games_played = max(0, player.games_played - 1)
        counter = _RESULT_COUNTERS[row.result]
        setattr(player, counter, max(0, getattr(player, counter) - 1))
        player.updated_at = now
    session.flush()

    session.execute(
        delete(EloHistory)
        .where(EloHistory.scrim_id == scrim_id)
        .execution_options(synchronize_session=False)
    )
    return len(history)
