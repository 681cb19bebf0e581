"""Tests for matching scrim participants to telemetry players."""

from __future__ import annotations

from domain.common import Team
from domain.ratings.common import TelemetryPlayer, TelemetrySession
from domain.ratings.identity import (
    Participant,
    Resolved,
    Unresolved,
    UnresolvedReason,
    merge_sessions,
    resolve_identities,
)


def _session(session_id: str, *players: tuple[str, int, int]) -> TelemetrySession:
    return TelemetrySession(
        session_id=session_id,
        players=tuple(TelemetryPlayer(name=name, kills=kills, deaths=deaths) for name, kills, deaths in players),
    )


def test_merge_sessions_sums_stats_case_insensitively() -> None:
    merged = merge_sessions(
        [
            _session("s1", ("Frag", 10, 4), ("Other", 1, 1)),
            _session("s2", ("frag", 5, 6)),
        ]
    )
    assert merged["frag"] == TelemetryPlayer(name="Frag", kills=15, deaths=10)
    assert set(merged) == {"frag", "other"}


def test_alias_is_preferred_over_display_name() -> None:
    resolutions = resolve_identities(
        [Participant("acc-1", "WebName", Team.TEAM_A)],
        {"acc-1": ["InGame"]},
        [_session("s1", ("ingame", 12, 3), ("webname", 1, 9))],
    )
    assert resolutions == [Resolved("acc-1", Team.TEAM_A, "ingame", 12, 3)]


def test_display_name_is_the_fallback() -> None:
    resolutions = resolve_identities(
        [Participant("acc-1", "  Sniper ", Team.TEAM_B)],
        {"acc-1": ["NeverPlayed"]},
        [_session("s1", ("SNIPER", 7, 7))],
    )
    assert resolutions == [Resolved("acc-1", Team.TEAM_B, "SNIPER", 7, 7)]


def test_first_participant_in_join_order_claims_a_shared_name() -> None:
    resolutions = resolve_identities(
        [
            Participant("early", "Dupe", Team.TEAM_A),
            Participant("late", "dupe", Team.TEAM_B),
        ],
        {},
        [_session("s1", ("Dupe", 4, 4))],
    )
    assert isinstance(resolutions[0], Resolved)
    assert resolutions[1] == Unresolved("late", Team.TEAM_B, UnresolvedReason.NAME_TAKEN)


def test_unassigned_and_unknown_participants_are_unresolved() -> None:
    resolutions = resolve_identities(
        [
            Participant("bench", "Bench", None),
            Participant("ghost", "Ghost", Team.TEAM_A),
        ],
        {},
        [_session("s1", ("Bench", 3, 3))],
    )
    assert resolutions == [
        Unresolved("bench", None, UnresolvedReason.NO_TEAM),
        Unresolved("ghost", Team.TEAM_A, UnresolvedReason.NOT_IN_TELEMETRY),
    ]


def test_later_alias_is_tried_when_earlier_one_is_taken() -> None:
    resolutions = resolve_identities(
        [
            Participant("acc-1", "Alpha", Team.TEAM_A),
            Participant("acc-2", "Beta", Team.TEAM_B),
        ],
        {"acc-2": ["Alpha", "Beta2"]},
        [_session("s1", ("Alpha", 1, 0), ("Beta2", 2, 0))],
    )
    assert [resolution.game_name for resolution in resolutions] == ["Alpha", "Beta2"]
