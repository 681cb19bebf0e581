"""HTTP client for the read-only game telemetry API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from domain.errors import ExternalUnavailableError
from domain.ratings.common import TelemetryPlayer, TelemetrySession

logger = logging.getLogger(__name__)

# Matches the width of the rating tables' game name columns.
MAX_TELEMETRY_NAME_LENGTH = 64


class TelemetrySource(Protocol):
    def fetch_sessions(self, session_ids: Sequence[str]) -> list[TelemetrySession]: ...


class TelemetryClient:
    """Fetch per-player kills/deaths for recorded sessions.

    ``GET {base_url}/sessions/{id}/players`` answers with either a JSON list or
    ``{"players": [...]}``. A 404 is an empty session; any other failure raises
    :class:`ExternalUnavailableError` so no partial result is ever rated.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        max_sessions: int = 8,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout_seconds, connect=min(3.0, timeout_seconds))
        self.max_sessions = max_sessions
        self._transport = transport

    def fetch_sessions(self, session_ids: Sequence[str]) -> list[TelemetrySession]:
        if not self.base_url:
            raise ExternalUnavailableError("telemetry base URL is not configured")

        sessions: list[TelemetrySession] = []
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            for session_id in list(session_ids)[: self.max_sessions]:
                sessions.append(self._fetch_session(client, session_id))
        return sessions

    def _fetch_session(self, client: httpx.Client, session_id: str) -> TelemetrySession:
        url = f"{self.base_url}/sessions/{quote(session_id, safe='')}/players"
        logger.debug("telemetry request: GET %s", url)
        try:
            response = client.get(url)
        except httpx.HTTPError as exc:
            raise ExternalUnavailableError(
                f"telemetry request for session {session_id!r} failed: {exc}"
            ) from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.debug("telemetry session %s not found, treating as empty", session_id)
            return TelemetrySession(session_id=session_id, players=())
        if response.is_error:
            raise ExternalUnavailableError(
                f"telemetry returned HTTP {response.status_code} for session {session_id!r}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ExternalUnavailableError(
                f"telemetry returned malformed JSON for session {session_id!r}"
            ) from exc

        return TelemetrySession(session_id=session_id, players=_parse_players(payload, session_id))


def _parse_players(payload: Any, session_id: str) -> tuple[TelemetryPlayer, ...]:
    if isinstance(payload, dict):
        payload = payload.get("players", [])
    if not isinstance(payload, list):
        raise ExternalUnavailableError(
            f"telemetry payload for session {session_id!r} is not a player list"
        )

    players: list[TelemetryPlayer] = []
    for entry in payload:
        if not isinstance(entry, dict):
            raise ExternalUnavailableError(
                f"telemetry payload for session {session_id!r} has a non-object player"
            )
        name = str(entry.get("name") or "").strip()
        if not name:
            continue
        if len(name) > MAX_TELEMETRY_NAME_LENGTH:
            logger.debug("telemetry session %s: skipping over-long name %.20r...", session_id, name)
            continue
        kills = _parse_stat(entry.get("kills"), "kills", session_id)
        deaths = _parse_stat(entry.get("deaths"), "deaths", session_id)
        players.append(TelemetryPlayer(name=name, kills=kills, deaths=deaths))
    return tuple(players)


def _parse_stat(value: Any, field: str, session_id: str) -> int:
    try:
        stat = int(value or 0)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ExternalUnavailableError(
            f"telemetry payload for session {session_id!r} has a non-numeric {field} value"
        ) from exc
    if stat < 0:
        raise ExternalUnavailableError(
            f"telemetry payload for session {session_id!r} has a negative {field} value"
        )
    return stat

