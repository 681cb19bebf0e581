"""Scrim lifecycle and rating domain modules."""

from domain.common import ScrimStatus, Team, TeamAssignmentMode, Winner
from domain.errors import ScrimError

__all__ = ["ScrimError", "ScrimStatus", "Team", "TeamAssignmentMode", "Winner"]
