"""Normalize user-pasted telemetry session links into stored ids."""

from __future__ import annotations

import re
from urllib.parse import unquote

_SEPARATORS = re.compile(r"[+~\s]+")

DEFAULT_MAX_SESSIONS = 8


def _clean_token(token: str) -> str:
    value = token.strip()
    for marker in ("?", "#"):
        value = value.split(marker, 1)[0]
    value = value.rstrip("/")
    if "/" in value:
        value = value.rsplit("/", 1)[-1]
    return value.strip()


def normalize_session_ids(raw_input: str, max_sessions: int = DEFAULT_MAX_SESSIONS) -> list[str]:
    """Split on ``+``, ``~`` or whitespace, reduce URLs to their last path segment, dedupe.

    Order is preserved and at most ``max_sessions`` ids are kept.
    """
    session_ids: list[str] = []
    # Decode before splitting so an encoded "+" still separates ids.
    for token in _SEPARATORS.split(unquote(raw_input or "")):
        if not token:
            continue
        session_id = _clean_token(token)
        if not session_id or session_id in session_ids:
            continue
        session_ids.append(session_id)
        if len(session_ids) >= max_sessions:
            break
    return session_ids


def split_session_ids(stored: str | None) -> list[str]:
    """Inverse of the ``+`` join used for the stored column."""
    if not stored:
        return []
    return [session_id for session_id in stored.split("+") if session_id]
