"""Player-level Elo for finalized scrims."""

from __future__ import annotations

from dataclasses import dataclass
from math import floor, log1p

from domain.common import Team
from domain.ratings.common import EloResult, RatedPlayer, ScrimRatingInput

_ACTUAL_SCORES = {
    EloResult.WIN: 1.0,
    EloResult.DRAW: 0.5,
    EloResult.LOSS: 0.0,
}


@dataclass(frozen=True)
class EloParameters:
    initial_elo: int = 1200
    scale_factor: float = 400.0
    # (games_played upper bound, k) pairs; the first bound above games_played wins.
    k_factor_tiers: tuple[tuple[int, int], ...] = ((10, 40), (30, 32), (50, 24))
    k_factor_floor: int = 16
    margin_divisor: float = 4.0
    max_margin_multiplier: float = 2.0
    performance_sensitivity: float = 0.5
    min_performance_multiplier: float = 0.5
    max_performance_multiplier: float = 1.5


@dataclass(frozen=True)
class PlayerEloEvent:
    scrim_id: int
    game_name_lower: str
    game_name: str
    team: Team
    result: EloResult
    team_score: int
    opponent_score: int
    kills: int | None
    deaths: int | None
    k_factor: int
    expected_score: float
    performance_multiplier: float
    elo_before: int
    elo_change: int
    elo_after: int


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def result_for(rounds_for: int, rounds_against: int) -> EloResult:
    if rounds_for > rounds_against:
        return EloResult.WIN
    if rounds_for < rounds_against:
        return EloResult.LOSS
    return EloResult.DRAW


def allocate_total(total: int, weights: dict[str, float]) -> dict[str, int]:
    """Split an integer total by weight so the parts sum to exactly ``total`` (largest remainder)."""
    if not weights:
        return {}
    sign = 1 if total >= 0 else -1
    amount = abs(total)
    weight_sum = sum(weights.values())
    exact = {key: amount * weight / weight_sum for key, weight in weights.items()}
    parts = {key: floor(value) for key, value in exact.items()}
    leftover = amount - sum(parts.values())
    # sorted() is stable, so ties go to the earlier key.
    for key in sorted(exact, key=lambda key: parts[key] - exact[key])[:leftover]:
        parts[key] += 1
    return {key: sign * part for key, part in parts.items()}


class ScrimEloCalculator:
    """Zero-sum, performance-weighted Elo update for one finalized scrim.

    The two teams exchange a single transfer ``T`` built from standard per-player
    Elo terms, so the sum of all changes is exactly zero when both teams are rated. Inside a team
    ``T`` is split by strictly positive weights, which keeps every member's
    change on the same side of zero as the team total and makes the update
    monotonic in the result.
    """

    def __init__(self, params: EloParameters) -> None:
        self.params = params

    def k_factor(self, games_played: int) -> int:
        for upper_bound, k_factor in self.params.k_factor_tiers:
            if games_played < upper_bound:
                return k_factor
        return self.params.k_factor_floor

    def margin_multiplier(self, rounds_for: int, rounds_against: int) -> float:
        margin = abs(rounds_for - rounds_against)
        multiplier = 1.0 + log1p(float(margin)) / self.params.margin_divisor
        return min(multiplier, self.params.max_margin_multiplier)

    def performance_multiplier(self, kills: int | None, team_total_kills: int, team_size: int) -> float:
        """Map a player's share of team kills to a bounded multiplier (1.0 = team average)."""
        if kills is None or team_total_kills <= 0 or team_size <= 0:
            return 1.0

        relative_share = (kills / float(team_total_kills)) * team_size
        multiplier = 1.0 + self.params.performance_sensitivity * (relative_share - 1.0)
        return max(
            self.params.min_performance_multiplier,
            min(multiplier, self.params.max_performance_multiplier),
        )

    def _average_rating(self, players: list[RatedPlayer]) -> float:
        if not players:
            return float(self.params.initial_elo)
        return sum(player.pre_elo for player in players) / float(len(players))

    def process_scrim(self, scrim: ScrimRatingInput) -> list[PlayerEloEvent]:
        if not scrim.players:
            raise ValueError(f"scrim_id={scrim.scrim_id} has no rated players")

        seen: set[str] = set()
        for player in scrim.players:
            if player.game_name_lower in seen:
                raise ValueError(
                    f"scrim_id={scrim.scrim_id} rates {player.game_name_lower!r} more than once"
                )
            seen.add(player.game_name_lower)

        rosters: dict[Team, list[RatedPlayer]] = {Team.TEAM_A: [], Team.TEAM_B: []}
        for player in scrim.players:
            rosters[player.team].append(player)

        averages = {team: self._average_rating(roster) for team, roster in rosters.items()}

        rounds_for_a, rounds_against_a = scrim.score_for(Team.TEAM_A)
        margin = self.margin_multiplier(rounds_for_a, rounds_against_a)

        expected: dict[str, float] = {}
        k_factors: dict[str, int] = {}
        elo_terms: dict[Team, float] = {}
        for team, roster in rosters.items():
            rounds_for, rounds_against = scrim.score_for(team)
            actual = _ACTUAL_SCORES[result_for(rounds_for, rounds_against)]
            term = 0.0
            for player in roster:
                k_factors[player.game_name_lower] = self.k_factor(player.games_played)
                expected[player.game_name_lower] = calculate_expected_score(
                    rating=float(player.pre_elo),
                    opponent_rating=averages[team.opponent],
                    scale_factor=self.params.scale_factor,
                )
                term += k_factors[player.game_name_lower] * (actual - expected[player.game_name_lower])
            elo_terms[team] = term

        transfer = margin * (elo_terms[Team.TEAM_A] - elo_terms[Team.TEAM_B]) / 2.0
        team_totals = {Team.TEAM_A: transfer, Team.TEAM_B: -transfer}

        performance: dict[str, float] = {}
        weights: dict[Team, dict[str, float]] = {}
        for team, roster in rosters.items():
            team_total_kills = sum(player.kills or 0 for player in roster)
            for player in roster:
                performance[player.game_name_lower] = self.performance_multiplier(
                    player.kills,
                    team_total_kills,
                    len(roster),
                )
            weights[team] = self._split_weights(
                roster,
                gaining=team_totals[team] >= 0.0,
                expected=expected,
                k_factors=k_factors,
                performance=performance,
            )

        # Integer team totals; the opposing team takes the exact negation.
        rounded_totals = {
            team: sum(
                int(round(team_totals[team] * weight / sum(weights[team].values())))
                for weight in weights[team].values()
            )
            for team, roster in rosters.items()
            if roster
        }
        if len(rounded_totals) == 2:
            rounded_totals[Team.TEAM_B] = -rounded_totals[Team.TEAM_A]

        events: list[PlayerEloEvent] = []
        for team, roster in rosters.items():
            if not roster:
                continue

            rounds_for, rounds_against = scrim.score_for(team)
            result = result_for(rounds_for, rounds_against)
            changes = allocate_total(rounded_totals[team], weights[team])

            for player in roster:
                key = player.game_name_lower
                elo_change = changes[key]
                events.append(
                    PlayerEloEvent(
                        scrim_id=scrim.scrim_id,
                        game_name_lower=key,
                        game_name=player.game_name,
                        team=team,
                        result=result,
                        team_score=rounds_for,
                        opponent_score=rounds_against,
                        kills=player.kills,
                        deaths=player.deaths,
                        k_factor=k_factors[key],
                        expected_score=expected[key],
                        performance_multiplier=performance[key],
                        elo_before=player.pre_elo,
                        elo_change=elo_change,
                        elo_after=player.pre_elo + elo_change,
                    )
                )

        return events

    @staticmethod
    def _split_weights(
        roster: list[RatedPlayer],
        *,
        gaining: bool,
        expected: dict[str, float],
        k_factors: dict[str, int],
        performance: dict[str, float],
    ) -> dict[str, float]:
        # Gains favour underdogs and top fraggers; losses hit favourites and low fraggers.
        weights: dict[str, float] = {}
        for player in roster:
            key = player.game_name_lower
            if gaining:
                weight = k_factors[key] * (1.0 - expected[key]) * performance[key]
            else:
                weight = k_factors[key] * expected[key] * (2.0 - performance[key])
            weights[key] = weight

        if sum(weights.values()) <= 0.0:
            return {player.game_name_lower: 1.0 for player in roster}
        return weights
