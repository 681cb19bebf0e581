"""Shared types for scrim rating."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from domain.common import Team


class EloResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


@dataclass(frozen=True)
class TelemetryPlayer:
    """Per-player line from one telemetry session."""

    name: str
    kills: int = 0
    deaths: int = 0


@dataclass(frozen=True)
class TelemetrySession:
    """Player list of one recorded in-game session."""

    session_id: str
    players: tuple[TelemetryPlayer, ...]


@dataclass(frozen=True)
class RatedPlayer:
    """A resolved participant together with their stored rating state."""

    game_name_lower: str
    game_name: str
    team: Team
    pre_elo: int
    games_played: int
    kills: int | None = None
    deaths: int | None = None


@dataclass(frozen=True)
class ScrimRatingInput:
    """Canonical finalized-scrim payload used by the rating calculator."""

    scrim_id: int
    team_a_score: int
    team_b_score: int
    players: tuple[RatedPlayer, ...]

    def score_for(self, team: Team) -> tuple[int, int]:
        """Return (rounds_for, rounds_against) from the given team's perspective."""
        if team is Team.TEAM_A:
            return self.team_a_score, self.team_b_score
        return self.team_b_score, self.team_a_score
