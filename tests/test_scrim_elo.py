"""Unit tests for the scrim Elo calculator."""

from __future__ import annotations

import pytest

from domain.common import Team
from domain.ratings.common import EloResult, RatedPlayer, ScrimRatingInput
from domain.ratings.elo.calculator import (
    EloParameters,
    ScrimEloCalculator,
    allocate_total,
    calculate_expected_score,
    result_for,
)


def _player(
    name: str,
    team: Team,
    *,
    pre_elo: int = 1200,
    games_played: int = 0,
    kills: int | None = None,
) -> RatedPlayer:
    return RatedPlayer(
        game_name_lower=name.lower(),
        game_name=name,
        team=team,
        pre_elo=pre_elo,
        games_played=games_played,
        kills=kills,
        deaths=None if kills is None else 10,
    )


def _scrim(team_a_score: int, team_b_score: int, *players: RatedPlayer) -> ScrimRatingInput:
    return ScrimRatingInput(
        scrim_id=1,
        team_a_score=team_a_score,
        team_b_score=team_b_score,
        players=tuple(players),
    )


def _changes(events) -> dict[str, int]:
    return {event.game_name_lower: event.elo_change for event in events}


def test_elo_parameters_defaults_are_expected_constants() -> None:
    params = EloParameters()
    assert params.initial_elo == 1200
    assert params.scale_factor == pytest.approx(400.0)
    assert params.k_factor_tiers == ((10, 40), (30, 32), (50, 24))
    assert params.k_factor_floor == 16
    assert params.margin_divisor == pytest.approx(4.0)
    assert params.max_margin_multiplier == pytest.approx(2.0)


def test_expected_scores_sum_to_one() -> None:
    expected_a = calculate_expected_score(1300.0, 1200.0, 400.0)
    expected_b = calculate_expected_score(1200.0, 1300.0, 400.0)
    assert expected_a + expected_b == pytest.approx(1.0)
    assert calculate_expected_score(1200.0, 1200.0, 400.0) == pytest.approx(0.5)


def test_result_for_round_differential() -> None:
    assert result_for(13, 7) is EloResult.WIN
    assert result_for(7, 13) is EloResult.LOSS
    assert result_for(12, 12) is EloResult.DRAW


@pytest.mark.parametrize(
    ("games_played", "expected_k"),
    [(0, 40), (9, 40), (10, 32), (29, 32), (30, 24), (49, 24), (50, 16), (500, 16)],
)
def test_k_factor_tiers(games_played: int, expected_k: int) -> None:
    calculator = ScrimEloCalculator(EloParameters())
    assert calculator.k_factor(games_played) == expected_k


def test_margin_multiplier_grows_and_is_capped() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    assert calculator.margin_multiplier(12, 12) == pytest.approx(1.0)
    assert calculator.margin_multiplier(13, 7) > calculator.margin_multiplier(13, 11)
    assert calculator.margin_multiplier(10_000, 0) == pytest.approx(2.0)


def test_performance_multiplier_bounds() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    assert calculator.performance_multiplier(20, 20, 2) == pytest.approx(1.5)
    assert calculator.performance_multiplier(0, 20, 2) == pytest.approx(0.5)
    assert calculator.performance_multiplier(10, 20, 2) == pytest.approx(1.0)
    assert calculator.performance_multiplier(None, 20, 2) == pytest.approx(1.0)
    assert calculator.performance_multiplier(5, 0, 2) == pytest.approx(1.0)


def test_equal_teams_win_moves_everyone_by_same_amount() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    events = calculator.process_scrim(
        _scrim(
            13,
            7,
            _player("a1", Team.TEAM_A),
            _player("a2", Team.TEAM_A),
            _player("b1", Team.TEAM_B),
            _player("b2", Team.TEAM_B),
        )
    )
    changes = _changes(events)
    assert changes == {"a1": 30, "a2": 30, "b1": -30, "b2": -30}
    assert all(event.k_factor == 40 for event in events)
    assert all(event.elo_after == event.elo_before + event.elo_change for event in events)


def test_draw_between_equal_teams_changes_nothing() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    events = calculator.process_scrim(
        _scrim(12, 12, _player("a1", Team.TEAM_A), _player("b1", Team.TEAM_B))
    )
    assert _changes(events) == {"a1": 0, "b1": 0}
    assert {event.result for event in events} == {EloResult.DRAW}


def test_update_is_exactly_zero_sum() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    events = calculator.process_scrim(
        _scrim(
            16,
            9,
            _player("a1", Team.TEAM_A, pre_elo=1350, games_played=12, kills=31),
            _player("a2", Team.TEAM_A, pre_elo=1180, games_played=3, kills=8),
            _player("a3", Team.TEAM_A, pre_elo=1225, games_played=60, kills=17),
            _player("b1", Team.TEAM_B, pre_elo=1410, games_played=41, kills=22),
            _player("b2", Team.TEAM_B, pre_elo=1090, games_played=0, kills=4),
            _player("b3", Team.TEAM_B, pre_elo=1260, games_played=25, kills=13),
        )
    )
    assert sum(event.elo_change for event in events) == 0


def test_full_sixteen_player_scrim_is_exactly_zero_sum() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    players = [
        _player(
            f"p{index}",
            Team.TEAM_A if index < 8 else Team.TEAM_B,
            pre_elo=1100 + 17 * index,
            games_played=7 * index,
            kills=3 + (index * 5) % 19,
        )
        for index in range(16)
    ]
    events = calculator.process_scrim(_scrim(13, 10, *players))

    assert len(events) == 16
    assert sum(event.elo_change for event in events) == 0


def test_allocate_total_hands_leftover_units_to_largest_remainders() -> None:
    assert allocate_total(10, {"a": 1.0, "b": 1.0, "c": 1.0}) == {"a": 4, "b": 3, "c": 3}
    assert allocate_total(-7, {"a": 3.0, "b": 1.0}) == {"a": -5, "b": -2}
    assert allocate_total(0, {"a": 1.0}) == {"a": 0}
    assert allocate_total(5, {}) == {}


def test_top_fragger_gains_more_than_teammate() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    events = calculator.process_scrim(
        _scrim(
            13,
            7,
            _player("star", Team.TEAM_A, kills=20),
            _player("anchor", Team.TEAM_A, kills=5),
            _player("b1", Team.TEAM_B, kills=10),
            _player("b2", Team.TEAM_B, kills=10),
        )
    )
    changes = _changes(events)
    assert changes["star"] > changes["anchor"] > 0
    assert changes["star"] == 39
    assert changes["anchor"] == 21
    assert changes["b1"] == changes["b2"] == -30


def test_result_is_monotone_for_every_player() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    players = (
        _player("a1", Team.TEAM_A, pre_elo=1300, kills=14),
        _player("a2", Team.TEAM_A, pre_elo=1150, kills=2),
        _player("b1", Team.TEAM_B, pre_elo=1240, kills=9),
        _player("b2", Team.TEAM_B, pre_elo=1210, kills=11),
    )
    win = _changes(calculator.process_scrim(_scrim(13, 11, *players)))
    draw = _changes(calculator.process_scrim(_scrim(12, 12, *players)))
    loss = _changes(calculator.process_scrim(_scrim(11, 13, *players)))

    for name in ("a1", "a2"):
        assert win[name] >= draw[name] >= loss[name]
        assert win[name] > 0 > loss[name]
    for name in ("b1", "b2"):
        assert loss[name] >= draw[name] >= win[name]


def test_one_sided_roster_is_rated_against_initial_elo() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    events = calculator.process_scrim(_scrim(13, 3, _player("solo", Team.TEAM_A)))
    assert len(events) == 1
    assert events[0].elo_change > 0


def test_process_scrim_rejects_empty_and_duplicate_rosters() -> None:
    calculator = ScrimEloCalculator(EloParameters())
    with pytest.raises(ValueError, match="no rated players"):
        calculator.process_scrim(_scrim(13, 7))
    with pytest.raises(ValueError, match="more than once"):
        calculator.process_scrim(
            _scrim(13, 7, _player("dup", Team.TEAM_A), _player("DUP", Team.TEAM_B))
        )
