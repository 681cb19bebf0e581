"""Match scrim participants (accounts) to telemetry players (in-game names)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from domain.common import Team
from domain.ratings.common import TelemetryPlayer, TelemetrySession


@dataclass(frozen=True)
class Participant:
    """A scrim member as seen by the resolver, in join order."""

    account_id: str
    display_name: str
    team: Team | None


class UnresolvedReason(str, Enum):
    NO_TEAM = "no_team"
    NOT_IN_TELEMETRY = "not_in_telemetry"
    NAME_TAKEN = "name_taken"


@dataclass(frozen=True)
class Resolved:
    account_id: str
    team: Team
    game_name: str
    kills: int
    deaths: int

    @property
    def game_name_lower(self) -> str:
        return self.game_name.lower()


@dataclass(frozen=True)
class Unresolved:
    account_id: str
    team: Team | None
    reason: UnresolvedReason


Resolution = Resolved | Unresolved


def merge_sessions(sessions: Sequence[TelemetrySession]) -> dict[str, TelemetryPlayer]:
    """Sum kills/deaths per lowercased name across sessions, keeping first-seen casing."""
    merged: dict[str, TelemetryPlayer] = {}
    for session in sessions:
        for player in session.players:
            name = player.name.strip()
            if not name:
                continue
            key = name.lower()
            existing = merged.get(key)
            if existing is None:
                merged[key] = TelemetryPlayer(name=name, kills=player.kills, deaths=player.deaths)
            else:
                merged[key] = TelemetryPlayer(
                    name=existing.name,
                    kills=existing.kills + player.kills,
                    deaths=existing.deaths + player.deaths,
                )
    return merged


def resolve_identities(
    participants: Sequence[Participant],
    aliases: Mapping[str, Sequence[str]],
    sessions: Sequence[TelemetrySession],
) -> list[Resolution]:
    """Resolve each participant through their aliases, then their display name.

    ``aliases`` maps account id to declared in-game names, oldest claim first.
    A telemetry name is credited to at most one participant.
    """
    telemetry = merge_sessions(sessions)
    claimed: set[str] = set()
    resolutions: list[Resolution] = []

    for participant in participants:
        if participant.team is None:
            resolutions.append(
                Unresolved(participant.account_id, None, UnresolvedReason.NO_TEAM)
            )
            continue

        candidates = [alias.strip().lower() for alias in aliases.get(participant.account_id, ())]
        candidates.append(participant.display_name.strip().lower())

        matched_key: str | None = None
        taken = False
        for candidate in candidates:
            if not candidate or candidate not in telemetry:
                continue
            if candidate in claimed:
                taken = True
                continue
            matched_key = candidate
            break

        if matched_key is None:
            reason = UnresolvedReason.NAME_TAKEN if taken else UnresolvedReason.NOT_IN_TELEMETRY
            resolutions.append(Unresolved(participant.account_id, participant.team, reason))
            continue

        claimed.add(matched_key)
        player = telemetry[matched_key]
        resolutions.append(
            Resolved(
                account_id=participant.account_id,
                team=participant.team,
                game_name=player.name,
                kills=player.kills,
                deaths=player.deaths,
            )
        )

    return resolutions


__all__ = [
    "Participant",
    "Resolution",
    "Resolved",
    "Unresolved",
    "UnresolvedReason",
    "merge_sessions",
    "resolve_identities",
]
