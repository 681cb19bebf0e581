"""Application services: one method per scrim and rating operation."""

from services.game_name_service import GameNameService
from services.rating_service import RatingService
from services.scrim_service import ScrimOptions, ScrimService

__all__ = ["GameNameService", "RatingService", "ScrimOptions", "ScrimService"]
