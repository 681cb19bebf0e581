"""Typed failures returned by scrim and rating operations."""

from __future__ import annotations


class ScrimError(Exception):
    """Base class for every expected, caller-facing failure."""


class ValidationError(ScrimError):
    """Malformed input (bad score, empty session id, invalid team size)."""


class NotFoundError(ScrimError):
    """Scrim, membership or alias does not exist."""


class InvalidPhaseError(ScrimError):
    """Operation attempted outside the phase it is valid in."""


class UnauthorizedError(ScrimError):
    """Caller is neither creator nor participant, or not the admin."""


class FullError(ScrimError):
    """Scrim already holds two full teams."""


class ConflictError(ScrimError):
    """Uniqueness violation, e.g. an in-game name claimed by another account."""


class AlreadyProcessedError(ScrimError):
    """Rating effects for the scrim were already applied."""


class NoMatchedPlayersError(ScrimError):
    """No participant could be matched to a telemetry player."""


class ExternalUnavailableError(ScrimError):
    """Telemetry service could not be reached or returned garbage."""


__all__ = [
    "AlreadyProcessedError",
    "ConflictError",
    "ExternalUnavailableError",
    "FullError",
    "InvalidPhaseError",
    "NoMatchedPlayersError",
    "NotFoundError",
    "ScrimError",
    "UnauthorizedError",
    "ValidationError",
]
