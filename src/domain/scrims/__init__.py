"""Pure scrim lifecycle rules (team split, reroll votes, score consensus)."""

from domain.scrims.consensus import CONSENSUS_THRESHOLD, ScoreClaim, agreed_score, winner_for
from domain.scrims.session_ids import normalize_session_ids, split_session_ids
from domain.scrims.teams import (
    balanced_split,
    can_start,
    is_full,
    random_split,
    reroll_passes,
)

__all__ = [
    "CONSENSUS_THRESHOLD",
    "ScoreClaim",
    "agreed_score",
    "balanced_split",
    "can_start",
    "is_full",
    "normalize_session_ids",
    "random_split",
    "reroll_passes",
    "split_session_ids",
    "winner_for",
]
