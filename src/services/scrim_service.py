"""Scrim lifecycle operations: create, join, ready, play, score, cancel."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from domain.common import (
    ACTIVE_STATUSES,
    CANCELLABLE_STATUSES,
    TRACKER_LINKABLE_STATUSES,
    ScrimStatus,
    TeamAssignmentMode,
    utcnow,
)
from domain.config import ScrimSettings
from domain.errors import (
    FullError,
    InvalidPhaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from domain.scrims.consensus import ScoreClaim, agreed_score, winner_for
from domain.scrims.session_ids import DEFAULT_MAX_SESSIONS, normalize_session_ids
from domain.scrims.teams import balanced_split, can_start, is_full, random_split, reroll_passes
from models.ratings.elo import PlayerElo
from models.scrim import Scrim, ScrimPlayer
from repositories import scrim_repository
from repositories.game_name_repository import fetch_aliases
from services.base import BaseService
from services.rating_service import RatingService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrimOptions:
    """Creator-supplied settings; ``None`` falls back to the configured defaults."""

    title: str | None = None
    map: str | None = None
    min_players_per_team: int | None = None
    max_players_per_team: int | None = None
    is_ranked: bool = True


class ScrimService(BaseService):
    """Coordinator for the scrim state machine.

    Every phase change is a compare-and-swap on ``status`` so concurrent
    callers racing for the same transition see exactly one winner.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        settings: ScrimSettings | None = None,
        rating_service: RatingService | None = None,
        rng: random.Random | None = None,
        max_tracker_sessions: int = DEFAULT_MAX_SESSIONS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(session_factory, clock=clock)
        self.settings = settings or ScrimSettings()
        self.rating_service = rating_service
        self.rng = rng or random.SystemRandom()
        self.max_tracker_sessions = max_tracker_sessions

    def create_scrim(
        self,
        account_id: str,
        display_name: str,
        options: ScrimOptions | None = None,
    ) -> Scrim:
        options = options or ScrimOptions()
        min_per_team = (
            self.settings.default_min_players_per_team
            if options.min_players_per_team is None
            else options.min_players_per_team
        )
        max_per_team = (
            self.settings.default_max_players_per_team
            if options.max_players_per_team is None
            else options.max_players_per_team
        )
        if min_per_team < 1:
            raise ValidationError("min_players_per_team must be >= 1")
        if max_per_team < min_per_team:
            raise ValidationError("max_players_per_team must be >= min_players_per_team")

        now = self.clock()
        with self.transaction() as session:
            scrim = scrim_repository.insert_scrim(
                session,
                created_by=account_id,
                created_by_name=display_name,
                title=options.title,
                map=options.map,
                min_players_per_team=min_per_team,
                max_players_per_team=max_per_team,
                status=ScrimStatus.WAITING.value,
                is_ranked=options.is_ranked,
                created_at=now,
                expires_at=now + timedelta(minutes=self.settings.ttl_minutes),
            )
            scrim_repository.upsert_player(
                session,
                scrim_id=scrim.id,
                account_id=account_id,
                display_name=display_name,
                now=now,
            )

        logger.info("scrim_id=%s created by %s", scrim.id, account_id)
        return scrim

    def get_scrim(self, scrim_id: int) -> Scrim:
        with self.transaction() as session:
            return self._require_scrim(session, scrim_id)

    def list_players(self, scrim_id: int) -> list[ScrimPlayer]:
        with self.transaction() as session:
            self._require_scrim(session, scrim_id)
            return scrim_repository.list_players(session, scrim_id)

    def expire_stale_scrims(self) -> int:
        with self.transaction() as session:
            expired = scrim_repository.expire_stale_scrims(session, self.clock())
        if expired:
            logger.info("expired %d stale scrims", expired)
        return expired

    def list_active_scrims(self) -> list[Scrim]:
        self.expire_stale_scrims()
        with self.transaction() as session:
            return scrim_repository.list_scrims_by_status(session, ACTIVE_STATUSES)

    def join_scrim(self, scrim_id: int, account_id: str, display_name: str) -> Scrim:
        self.expire_stale_scrims()
        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id, for_update=True)
            if scrim.status != ScrimStatus.WAITING.value:
                raise InvalidPhaseError(f"scrim_id={scrim_id} is {scrim.status}, not joinable")

            existing = scrim_repository.get_player(session, scrim_id, account_id)
            if existing is None and is_full(
                scrim_repository.count_players(session, scrim_id),
                scrim.max_players_per_team,
            ):
                raise FullError(f"scrim_id={scrim_id} is full")

            scrim_repository.upsert_player(
                session,
                scrim_id=scrim_id,
                account_id=account_id,
                display_name=display_name,
                now=self.clock(),
            )
        return scrim

    def leave_scrim(self, scrim_id: int, account_id: str) -> None:
        with self.transaction() as session:
            scrim_repository.delete_player(session, scrim_id, account_id)

    def toggle_ready(self, scrim_id: int, account_id: str) -> ScrimPlayer:
        """Flip the caller's ready flag and start the match when everyone is ready."""
        self.expire_stale_scrims()
        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id, for_update=True)
            player = scrim_repository.get_player(session, scrim_id, account_id)
            if player is None:
                raise NotFoundError(f"{account_id} is not in scrim_id={scrim_id}")

            scrim_repository.set_player_ready(
                session,
                scrim_id=scrim_id,
                account_id=account_id,
                is_ready=not player.is_ready,
                now=self.clock(),
            )
            if scrim.status == ScrimStatus.WAITING.value:
                self._try_auto_start(session, scrim)
            player = scrim_repository.get_player(session, scrim_id, account_id)
        return player

    def end_game(self, scrim_id: int, account_id: str) -> Scrim:
        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id)
            self._require_creator_or_participant(session, scrim, account_id)
            if scrim.status != ScrimStatus.IN_PROGRESS.value:
                raise InvalidPhaseError(f"scrim_id={scrim_id} is {scrim.status}, not in_progress")

            if not scrim_repository.transition_status(
                session,
                scrim_id,
                expected=ScrimStatus.IN_PROGRESS,
                new_status=ScrimStatus.SCORING,
                finished_at=self.clock(),
            ):
                raise InvalidPhaseError(f"scrim_id={scrim_id} left in_progress concurrently")
            scrim = self._require_scrim(session, scrim_id)

        logger.info("scrim_id=%s in_progress->scoring", scrim_id)
        return scrim

    def cancel_scrim(self, scrim_id: int, account_id: str) -> Scrim:
        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id)
            if scrim.created_by != account_id:
                raise UnauthorizedError(f"only the creator may cancel scrim_id={scrim_id}")
            if not scrim_repository.transition_status(
                session,
                scrim_id,
                expected=CANCELLABLE_STATUSES,
                new_status=ScrimStatus.CANCELLED,
            ):
                raise InvalidPhaseError(f"scrim_id={scrim_id} is {scrim.status}, not cancellable")
            scrim = self._require_scrim(session, scrim_id)

        logger.info("scrim_id=%s cancelled by creator", scrim_id)
        return scrim

    def set_tracker_session(self, scrim_id: int, account_id: str, raw_input: str) -> Scrim:
        session_ids = normalize_session_ids(raw_input, self.max_tracker_sessions)
        if not session_ids:
            raise ValidationError("no telemetry session id found in input")

        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id)
            self._require_creator_or_participant(session, scrim, account_id)
            if scrim.status not in {status.value for status in TRACKER_LINKABLE_STATUSES}:
                raise InvalidPhaseError(
                    f"scrim_id={scrim_id} is {scrim.status}; sessions link after the match"
                )
            scrim_repository.set_tracker_session(session, scrim_id, "+".join(session_ids))
            scrim = self._require_scrim(session, scrim_id)

        logger.info("scrim_id=%s linked sessions=%s", scrim_id, ",".join(session_ids))
        if scrim.status == ScrimStatus.FINALIZED.value:
            self._trigger_rating(scrim_id)
        return scrim

    def vote_reroll(self, scrim_id: int, account_id: str) -> bool:
        """Toggle the caller's vote; True when the vote carried and teams were reshuffled."""
        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id, for_update=True)
            if scrim.status != ScrimStatus.IN_PROGRESS.value:
                raise InvalidPhaseError(f"scrim_id={scrim_id} is {scrim.status}, not in_progress")

            player = scrim_repository.get_player(session, scrim_id, account_id)
            if player is None or player.team is None:
                raise InvalidPhaseError(f"{account_id} has no team in scrim_id={scrim_id}")

            scrim_repository.set_reroll_vote(
                session,
                scrim_id=scrim_id,
                account_id=account_id,
                voted=not player.voted_reroll,
            )

            assigned = [
                member
                for member in scrim_repository.list_players(session, scrim_id)
                if member.team is not None
            ]
            votes = sum(1 for member in assigned if member.voted_reroll)
            if not reroll_passes(votes, len(assigned)):
                return False

            assignment = random_split([member.account_id for member in assigned], self.rng)
            scrim_repository.assign_teams(session, scrim_id, assignment)

        logger.info("scrim_id=%s reroll passed votes=%d/%d", scrim_id, votes, len(assigned))
        return True

    def submit_score(
        self,
        scrim_id: int,
        account_id: str,
        display_name: str | None,
        team_a_score: int,
        team_b_score: int,
    ) -> Scrim:
        for score in (team_a_score, team_b_score):
            if isinstance(score, bool) or not isinstance(score, int) or score < 0:
                raise ValidationError("scores must be non-negative integers")

        finalized = False
        with self.transaction() as session:
            scrim = self._require_scrim(session, scrim_id, for_update=True)
            if scrim.status != ScrimStatus.SCORING.value:
                raise InvalidPhaseError(f"scrim_id={scrim_id} is {scrim.status}, not scoring")
            if scrim_repository.get_player(session, scrim_id, account_id) is None:
                raise UnauthorizedError(f"{account_id} did not play scrim_id={scrim_id}")

            now = self.clock()
            scrim_repository.upsert_score_submission(
                session,
                scrim_id=scrim_id,
                account_id=account_id,
                display_name=display_name,
                team_a_score=team_a_score,
                team_b_score=team_b_score,
                now=now,
            )

            claims = [
                ScoreClaim(row.account_id, row.team_a_score, row.team_b_score)
                for row in scrim_repository.list_score_submissions(session, scrim_id)
            ]
            agreed = agreed_score(claims)
            if agreed is not None:
                score_a, score_b = agreed
                finalized = scrim_repository.finalize_scrim(
                    session,
                    scrim_id,
                    team_a_score=score_a,
                    team_b_score=score_b,
                    winner=winner_for(score_a, score_b).value,
                    now=now,
                )
            scrim = self._require_scrim(session, scrim_id)

        if finalized:
            logger.info(
                "scrim_id=%s scoring->finalized score=%s-%s winner=%s",
                scrim_id,
                scrim.team_a_score,
                scrim.team_b_score,
                scrim.winner,
            )
            self._trigger_rating(scrim_id)
        return scrim

    def _try_auto_start(self, session: Session, scrim: Scrim) -> bool:
        players = scrim_repository.list_players(session, scrim.id)
        ready_count = sum(1 for player in players if player.is_ready)
        if not can_start(len(players), ready_count, scrim.min_players_per_team):
            return False

        if not scrim_repository.transition_status(
            session,
            scrim.id,
            expected=ScrimStatus.WAITING,
            new_status=ScrimStatus.IN_PROGRESS,
            started_at=self.clock(),
        ):
            return False

        # Re-read under the won transition; undo it if membership moved underneath.
        players = scrim_repository.list_players(session, scrim.id)
        ready_count = sum(1 for player in players if player.is_ready)
        if not can_start(len(players), ready_count, scrim.min_players_per_team):
            scrim_repository.transition_status(
                session,
                scrim.id,
                expected=ScrimStatus.IN_PROGRESS,
                new_status=ScrimStatus.WAITING,
                started_at=None,
            )
            return False

        account_ids = [player.account_id for player in players]
        if self.settings.team_assignment is TeamAssignmentMode.BALANCED:
            assignment = balanced_split(
                account_ids,
                self._current_ratings(session, players),
                self.rng,
                default_rating=float(self._initial_elo()),
            )
        else:
            assignment = random_split(account_ids, self.rng)
        scrim_repository.assign_teams(session, scrim.id, assignment)

        logger.info("scrim_id=%s waiting->in_progress players=%d", scrim.id, len(players))
        return True

    def _current_ratings(self, session: Session, players: Sequence[ScrimPlayer]) -> dict[str, float]:
        """Best-known Elo per account: first claimed alias with a rating, then display name."""
        aliases = fetch_aliases(session, [player.account_id for player in players])
        candidates = {
            player.account_id: [
                *(alias.lower() for alias in aliases.get(player.account_id, [])),
                player.display_name.strip().lower(),
            ]
            for player in players
        }
        names = {name for names in candidates.values() for name in names}
        rows = session.execute(
            select(PlayerElo.game_name_lower, PlayerElo.elo).where(
                PlayerElo.game_name_lower.in_(names)
            )
        )
        elo_by_name = {name: elo for name, elo in rows}

        ratings: dict[str, float] = {}
        for account_id, names_for_account in candidates.items():
            for name in names_for_account:
                if name in elo_by_name:
                    ratings[account_id] = float(elo_by_name[name])
                    break
        return ratings

    def _initial_elo(self) -> int:
        if self.rating_service is not None:
            return self.rating_service.params.initial_elo
        return 1200

    def _trigger_rating(self, scrim_id: int) -> None:
        if self.rating_service is None:
            return
        self.rating_service.try_process(scrim_id)

    @staticmethod
    def _require_scrim(session: Session, scrim_id: int, *, for_update: bool = False) -> Scrim:
        scrim = scrim_repository.get_scrim(session, scrim_id, for_update=for_update)
        if scrim is None:
            raise NotFoundError(f"scrim_id={scrim_id} not found")
        return scrim

    @staticmethod
    def _require_creator_or_participant(session: Session, scrim: Scrim, account_id: str) -> None:
        if scrim.created_by == account_id:
            return
        if scrim_repository.get_player(session, scrim.id, account_id) is None:
            raise UnauthorizedError(f"{account_id} is not part of scrim_id={scrim.id}")
