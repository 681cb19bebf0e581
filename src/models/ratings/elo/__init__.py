"""Elo ORM models."""

from models.ratings.elo.history import EloHistory
from models.ratings.elo.player import PlayerElo

__all__ = [
    "EloHistory",
    "PlayerElo",
]
