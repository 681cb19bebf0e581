"""Shared enums and helpers for the scrim lifecycle."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum


class ScrimStatus(str, Enum):
    """Lifecycle phase of a scrim."""

    WAITING = "waiting"
    # Reserved: nothing transitions into it; accepted wherever WAITING is for cancellation.
    READY_CHECK = "ready_check"
    IN_PROGRESS = "in_progress"
    SCORING = "scoring"
    FINALIZED = "finalized"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (
    ScrimStatus.WAITING,
    ScrimStatus.READY_CHECK,
    ScrimStatus.IN_PROGRESS,
    ScrimStatus.SCORING,
)
CANCELLABLE_STATUSES = (ScrimStatus.WAITING, ScrimStatus.READY_CHECK)
TRACKER_LINKABLE_STATUSES = (ScrimStatus.SCORING, ScrimStatus.FINALIZED)


class Team(str, Enum):
    TEAM_A = "team_a"
    TEAM_B = "team_b"

    @property
    def opponent(self) -> Team:
        return Team.TEAM_B if self is Team.TEAM_A else Team.TEAM_A


class Winner(str, Enum):
    TEAM_A = "team_a"
    TEAM_B = "team_b"
    DRAW = "draw"


class TeamAssignmentMode(str, Enum):
    """How teams are split when a scrim starts."""

    RANDOM = "random"
    BALANCED = "balanced"


def utcnow() -> datetime:
    """Naive UTC timestamp, the convention for every stored datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


__all__ = [
    "ACTIVE_STATUSES",
    "CANCELLABLE_STATUSES",
    "ScrimStatus",
    "TRACKER_LINKABLE_STATUSES",
    "Team",
    "TeamAssignmentMode",
    "Winner",
    "utcnow",
]
