"""Rate finalized ranked scrims and correct them on admin request."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from clients.telemetry import TelemetrySource
from domain.common import ScrimStatus, Team, utcnow
from domain.errors import (
    AlreadyProcessedError,
    InvalidPhaseError,
    NoMatchedPlayersError,
    NotFoundError,
    ScrimError,
    UnauthorizedError,
)
from domain.ratings.common import RatedPlayer, ScrimRatingInput
from domain.ratings.elo.calculator import EloParameters, PlayerEloEvent, ScrimEloCalculator
from domain.ratings.identity import Participant, Resolved, resolve_identities
from domain.scrims.session_ids import split_session_ids
from models.scrim import Scrim
from repositories.game_name_repository import fetch_aliases
from repositories.ratings.elo_repository import (
    apply_elo_events,
    history_exists,
    insert_elo_history_events,
    lock_player_elos,
    revert_scrim_history,
)
from repositories.scrim_repository import (
    claim_rating_marker,
    clear_rating_marker,
    get_scrim,
    list_players,
)
from services.base import BaseService

logger = logging.getLogger(__name__)


class RatingService(BaseService):
    """Apply the Elo update for a scrim exactly once."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        telemetry: TelemetrySource,
        *,
        params: EloParameters | None = None,
        admin_account_id: str = "",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(session_factory, clock=clock)
        self.telemetry = telemetry
        self.params = params or EloParameters()
        self.calculator = ScrimEloCalculator(self.params)
        self.admin_account_id = admin_account_id

    def process_ranked_scrim(self, scrim_id: int) -> list[PlayerEloEvent]:
        with self.transaction() as session:
            scrim = self._require_rateable(session, scrim_id)
            if scrim.ranked_processed_at is not None or history_exists(session, scrim_id):
                raise AlreadyProcessedError(f"scrim_id={scrim_id} was already rated")

            participants = [
                Participant(
                    account_id=player.account_id,
                    display_name=player.display_name,
                    team=Team(player.team) if player.team else None,
                )
                for player in list_players(session, scrim_id)
            ]
            aliases = fetch_aliases(session, [participant.account_id for participant in participants])
            session_ids = split_session_ids(scrim.tracker_session_id)
            team_a_score = int(scrim.team_a_score)
            team_b_score = int(scrim.team_b_score)

        # Network I/O stays outside any open transaction.
        sessions = self.telemetry.fetch_sessions(session_ids)

        resolutions = resolve_identities(participants, aliases, sessions)
        resolved = [resolution for resolution in resolutions if isinstance(resolution, Resolved)]
        unresolved_count = len(resolutions) - len(resolved)
        if not resolved:
            raise NoMatchedPlayersError(
                f"scrim_id={scrim_id}: none of {len(participants)} participants matched telemetry"
            )

        with self.transaction() as session:
            now = self.clock()
            if not claim_rating_marker(session, scrim_id, now):
                raise AlreadyProcessedError(f"scrim_id={scrim_id} was already rated")
            if history_exists(session, scrim_id):
                raise AlreadyProcessedError(f"scrim_id={scrim_id} already has rating history")

            rows = lock_player_elos(
                session,
                {resolution.game_name_lower: resolution.game_name for resolution in resolved},
                initial_elo=self.params.initial_elo,
                now=now,
            )
            rating_input = ScrimRatingInput(
                scrim_id=scrim_id,
                team_a_score=team_a_score,
                team_b_score=team_b_score,
                players=tuple(
                    RatedPlayer(
                        game_name_lower=resolution.game_name_lower,
                        game_name=resolution.game_name,
                        team=resolution.team,
                        pre_elo=rows[resolution.game_name_lower].elo,
                        games_played=rows[resolution.game_name_lower].games_played,
                        kills=resolution.kills,
                        deaths=resolution.deaths,
                    )
                    for resolution in resolved
                ),
            )
            events = self.calculator.process_scrim(rating_input)
            insert_elo_history_events(session, events, now=now)
            apply_elo_events(session, events, rows, now=now)

        logger.info(
            "scrim_id=%s rated players=%d unresolved=%d score=%d-%d",
            scrim_id,
            len(events),
            unresolved_count,
            team_a_score,
            team_b_score,
        )
        return events

    def try_process(self, scrim_id: int) -> list[PlayerEloEvent] | None:
        """Rate the scrim when it is ranked, linked and unprocessed; never raise on failure."""
        with self.transaction() as session:
            scrim = get_scrim(session, scrim_id)
            eligible = (
                scrim is not None
                and scrim.status == ScrimStatus.FINALIZED.value
                and scrim.is_ranked
                and bool(scrim.tracker_session_id)
                and scrim.ranked_processed_at is None
            )
        if not eligible:
            logger.debug("scrim_id=%s not eligible for automatic rating", scrim_id)
            return None

        try:
            return self.process_ranked_scrim(scrim_id)
        except ScrimError as exc:
            logger.warning(
                "scrim_id=%s automatic rating skipped: %s: %s",
                scrim_id,
                type(exc).__name__,
                exc,
            )
            return None
        except SQLAlchemyError:
            logger.exception("scrim_id=%s automatic rating failed on the database", scrim_id)
            return None

    def admin_recalculate_elo(self, scrim_id: int, account_id: str) -> list[PlayerEloEvent]:
        """Revert the scrim's rating effects, then rate it again from fresh telemetry."""
        if not self.admin_account_id or account_id != self.admin_account_id:
            raise UnauthorizedError("only the configured admin may recalculate ratings")

        with self.transaction() as session:
            scrim = get_scrim(session, scrim_id, for_update=True)
            if scrim is None:
                raise NotFoundError(f"scrim_id={scrim_id} not found")
            if scrim.status != ScrimStatus.FINALIZED.value or not scrim.is_ranked:
                raise InvalidPhaseError(f"scrim_id={scrim_id} is not a finalized ranked scrim")

            reverted = revert_scrim_history(session, scrim_id, now=self.clock())
            clear_rating_marker(session, scrim_id)

        logger.info("scrim_id=%s reverted %d rating rows for recalculation", scrim_id, reverted)
        return self.process_ranked_scrim(scrim_id)

    @staticmethod
    def _require_rateable(session: Session, scrim_id: int) -> Scrim:
        scrim = get_scrim(session, scrim_id)
        if scrim is None:
            raise NotFoundError(f"scrim_id={scrim_id} not found")
        if scrim.status != ScrimStatus.FINALIZED.value:
            raise InvalidPhaseError(f"scrim_id={scrim_id} is {scrim.status}, not finalized")
        if not scrim.is_ranked:
            raise InvalidPhaseError(f"scrim_id={scrim_id} is unranked")
        if scrim.team_a_score is None or scrim.team_b_score is None:
            raise InvalidPhaseError(f"scrim_id={scrim_id} has no agreed score")
        if not split_session_ids(scrim.tracker_session_id):
            raise InvalidPhaseError(f"scrim_id={scrim_id} has no linked telemetry session")
        return scrim
