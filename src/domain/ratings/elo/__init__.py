"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    EloParameters,
    PlayerEloEvent,
    ScrimEloCalculator,
    calculate_expected_score,
    result_for,
)
from domain.ratings.elo.config import parse_elo_parameters

__all__ = [
    "EloParameters",
    "PlayerEloEvent",
    "ScrimEloCalculator",
    "calculate_expected_score",
    "parse_elo_parameters",
    "result_for",
]
