"""Claim, list and release in-game names used to match telemetry players."""

from __future__ import annotations

import logging

from domain.errors import ConflictError, ValidationError
from models.game_name import UserGameName
from repositories import game_name_repository
from services.base import BaseService

logger = logging.getLogger(__name__)

MAX_GAME_NAME_LENGTH = 50


class GameNameService(BaseService):
    def add_game_name(self, account_id: str, game_name: str) -> UserGameName:
        name = (game_name or "").strip()
        if not name:
            raise ValidationError("game name is required")
        if len(name) > MAX_GAME_NAME_LENGTH:
            raise ValidationError(f"game name is too long (max {MAX_GAME_NAME_LENGTH} characters)")

        with self.transaction() as session:
            row = game_name_repository.insert_game_name_if_free(
                session,
                account_id=account_id,
                game_name=name,
                now=self.clock(),
            )
            if row is None:
                raise ConflictError(f"{name!r} has already been claimed")

        logger.info("account %s claimed game name %r", account_id, name)
        return row

    def list_game_names(self, account_id: str) -> list[UserGameName]:
        with self.transaction() as session:
            return game_name_repository.list_game_names(session, account_id)

    def delete_game_name(self, account_id: str, game_name_id: int) -> bool:
        """Release one of the caller's own names; other accounts' rows are left alone."""
        with self.transaction() as session:
            deleted = game_name_repository.delete_game_name(
                session,
                account_id=account_id,
                game_name_id=game_name_id,
            )
        return deleted > 0
