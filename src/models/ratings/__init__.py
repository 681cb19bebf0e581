"""Rating ORM models."""

from models.ratings.elo import EloHistory, PlayerElo

__all__ = [
    "EloHistory",
    "PlayerElo",
]
