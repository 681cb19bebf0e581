"""Database repository helpers."""

from repositories.scrim_repository import (
    claim_rating_marker,
    expire_stale_scrims,
    get_scrim,
    list_players,
    transition_status,
)

__all__ = [
    "claim_rating_marker",
    "expire_stale_scrims",
    "get_scrim",
    "list_players",
    "transition_status",
]
