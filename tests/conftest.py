"""Shared fixtures: in-memory database, fake telemetry and a controllable clock."""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator, Sequence
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory, ensure_schema
from domain.config import ScrimSettings
from domain.ratings.common import TelemetryPlayer, TelemetrySession
from models.scrim import ScrimPlayer
from services.game_name_service import GameNameService
from services.rating_service import RatingService
from services.scrim_service import ScrimOptions, ScrimService

ADMIN_ACCOUNT_ID = "admin"
DEFAULT_ACCOUNTS = ("alice", "bob", "carol", "dave")


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeTelemetry:
    """In-memory telemetry source keyed by session id."""

    def __init__(self) -> None:
        self.sessions: dict[str, list[tuple[str, int, int]]] = {}
        self.error: Exception | None = None
        self.calls: list[list[str]] = []

    def fetch_sessions(self, session_ids: Sequence[str]) -> list[TelemetrySession]:
        self.calls.append(list(session_ids))
        if self.error is not None:
            raise self.error
        return [
            TelemetrySession(
                session_id=session_id,
                players=tuple(
                    TelemetryPlayer(name=name, kills=kills, deaths=deaths)
                    for name, kills, deaths in self.sessions.get(session_id, [])
                ),
            )
            for session_id in session_ids
        ]


@pytest.fixture
def session_factory() -> Iterator[sessionmaker[Session]]:
    engine = create_db_engine("sqlite:///:memory:")
    ensure_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 18, 0, 0))


@pytest.fixture
def telemetry() -> FakeTelemetry:
    return FakeTelemetry()


@pytest.fixture
def rating_service(
    session_factory: sessionmaker[Session],
    telemetry: FakeTelemetry,
    clock: FakeClock,
) -> RatingService:
    return RatingService(
        session_factory,
        telemetry,
        admin_account_id=ADMIN_ACCOUNT_ID,
        clock=clock,
    )


@pytest.fixture
def scrim_service(
    session_factory: sessionmaker[Session],
    rating_service: RatingService,
    clock: FakeClock,
) -> ScrimService:
    return ScrimService(
        session_factory,
        settings=ScrimSettings(admin_account_id=ADMIN_ACCOUNT_ID),
        rating_service=rating_service,
        rng=random.Random(1234),
        clock=clock,
    )


@pytest.fixture
def game_name_service(session_factory: sessionmaker[Session], clock: FakeClock) -> GameNameService:
    return GameNameService(session_factory, clock=clock)


@pytest.fixture
def start_scrim(scrim_service: ScrimService, clock: FakeClock) -> Callable[..., int]:
    """Create, fill and ready up a scrim; returns its id once it is in_progress."""

    def _start(accounts: Sequence[str] = DEFAULT_ACCOUNTS, **options: object) -> int:
        creator = accounts[0]
        scrim = scrim_service.create_scrim(creator, creator.title(), ScrimOptions(**options))
        for account in accounts[1:]:
            clock.advance(seconds=1)
            scrim_service.join_scrim(scrim.id, account, account.title())
        for account in accounts:
            scrim_service.toggle_ready(scrim.id, account)
        return scrim.id

    return _start


@pytest.fixture
def finish_scrim(
    scrim_service: ScrimService,
    start_scrim: Callable[..., int],
) -> Callable[..., int]:
    """Play a scrim through to an agreed score, optionally linking telemetry first."""

    def _finish(
        score: tuple[int, int] = (13, 7),
        *,
        session_ids: str | None = None,
        accounts: Sequence[str] = DEFAULT_ACCOUNTS,
        **options: object,
    ) -> int:
        scrim_id = start_scrim(accounts, **options)
        scrim_service.end_game(scrim_id, accounts[0])
        if session_ids is not None:
            scrim_service.set_tracker_session(scrim_id, accounts[0], session_ids)
        for account in accounts[:2]:
            scrim_service.submit_score(scrim_id, account, account.title(), *score)
        return scrim_id

    return _finish


def teams_by_account(session_factory: sessionmaker[Session], scrim_id: int) -> dict[str, str | None]:
    with session_factory() as session:
        rows = session.execute(
            select(ScrimPlayer.account_id, ScrimPlayer.team).where(ScrimPlayer.scrim_id == scrim_id)
        )
        return {account_id: team for account_id, team in rows}


@pytest.fixture
def team_lookup(session_factory: sessionmaker[Session]) -> Callable[[int], dict[str, str | None]]:
    return lambda scrim_id: teams_by_account(session_factory, scrim_id)
