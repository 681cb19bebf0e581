"""ORM models."""

from models.base import Base
from models.game_name import UserGameName
from models.ratings import EloHistory, PlayerElo
from models.scrim import Scrim, ScrimPlayer, ScrimScoreSubmission

__all__ = [
    "Base",
    "EloHistory",
    "PlayerElo",
    "Scrim",
    "ScrimPlayer",
    "ScrimScoreSubmission",
    "UserGameName",
]
