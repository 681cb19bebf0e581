"""Start condition, team split and reroll threshold."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence

from domain.common import Team


def can_start(player_count: int, ready_count: int, min_players_per_team: int) -> bool:
    """Two full-enough even teams, everybody ready."""
    return (
        player_count >= 2 * min_players_per_team
        and player_count % 2 == 0
        and ready_count == player_count
    )


def is_full(player_count: int, max_players_per_team: int) -> bool:
    return player_count >= 2 * max_players_per_team


def reroll_passes(votes: int, assigned: int) -> bool:
    """Strict majority of assigned players."""
    return assigned > 0 and votes * 2 > assigned


def random_split(account_ids: Sequence[str], rng: random.Random) -> dict[str, Team]:
    """Uniformly shuffle and cut in half; the first half is team A."""
    pool = list(account_ids)
    rng.shuffle(pool)
    half = len(pool) // 2
    return {
        account_id: Team.TEAM_A if index < half else Team.TEAM_B
        for index, account_id in enumerate(pool)
    }


def balanced_split(
    account_ids: Sequence[str],
    ratings: Mapping[str, float],
    rng: random.Random,
    *,
    default_rating: float,
) -> dict[str, Team]:
    """Snake draft by rating (A, B, B, A, A, B, ...); equal ratings fall back to shuffle order."""
    pool = list(account_ids)
    rng.shuffle(pool)
    # sorted() is stable, so shuffle order survives among ties.
    ordered = sorted(pool, key=lambda account_id: ratings.get(account_id, default_rating), reverse=True)

    assignment: dict[str, Team] = {}
    for index, account_id in enumerate(ordered):
        assignment[account_id] = Team.TEAM_A if index % 4 in (0, 3) else Team.TEAM_B
    return assignment
