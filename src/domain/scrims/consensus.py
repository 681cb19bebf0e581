"""Score agreement between participants."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from domain.common import Winner

CONSENSUS_THRESHOLD = 2


@dataclass(frozen=True)
class ScoreClaim:
    account_id: str
    team_a_score: int
    team_b_score: int


def agreed_score(
    claims: Iterable[ScoreClaim],
    threshold: int = CONSENSUS_THRESHOLD,
) -> tuple[int, int] | None:
    """Return the first (A, B) pair submitted identically by ``threshold`` accounts."""
    counts: Counter[tuple[int, int]] = Counter()
    for claim in claims:
        pair = (claim.team_a_score, claim.team_b_score)
        counts[pair] += 1
        if counts[pair] >= threshold:
            return pair
    return None


def winner_for(team_a_score: int, team_b_score: int) -> Winner:
    if team_a_score > team_b_score:
        return Winner.TEAM_A
    if team_b_score > team_a_score:
        return Winner.TEAM_B
    return Winner.DRAW
