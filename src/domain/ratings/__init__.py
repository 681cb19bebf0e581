"""Rating domain modules."""

from domain.ratings.common import (
    EloResult,
    RatedPlayer,
    ScrimRatingInput,
    TelemetryPlayer,
    TelemetrySession,
)
from domain.ratings.identity import Participant, Resolved, Unresolved, resolve_identities

__all__ = [
    "EloResult",
    "Participant",
    "RatedPlayer",
    "Resolved",
    "ScrimRatingInput",
    "TelemetryPlayer",
    "TelemetrySession",
    "Unresolved",
    "resolve_identities",
]
