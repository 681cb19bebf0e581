"""Parse the [elo] table of the service config."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from domain.ratings.elo.calculator import EloParameters


def parse_elo_parameters(elo_raw: dict[str, Any], file_path: Path) -> EloParameters:
    """Build validated Elo parameters from a raw TOML table."""
    defaults = EloParameters()
    tiers_raw = elo_raw.get("k_factor_tiers", [list(tier) for tier in defaults.k_factor_tiers])
    try:
        k_factor_tiers = tuple((int(bound), int(k_factor)) for bound, k_factor in tiers_raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"{file_path}: [elo].k_factor_tiers must be a list of [games_played, k_factor] pairs"
        ) from exc

    parameters = EloParameters(
        initial_elo=int(elo_raw.get("initial_elo", defaults.initial_elo)),
        scale_factor=float(elo_raw.get("scale_factor", defaults.scale_factor)),
        k_factor_tiers=k_factor_tiers,
        k_factor_floor=int(elo_raw.get("k_factor_floor", defaults.k_factor_floor)),
        margin_divisor=float(elo_raw.get("margin_divisor", defaults.margin_divisor)),
        max_margin_multiplier=float(
            elo_raw.get("max_margin_multiplier", defaults.max_margin_multiplier)
        ),
        performance_sensitivity=float(
            elo_raw.get("performance_sensitivity", defaults.performance_sensitivity)
        ),
        min_performance_multiplier=float(
            elo_raw.get("min_performance_multiplier", defaults.min_performance_multiplier)
        ),
        max_performance_multiplier=float(
            elo_raw.get("max_performance_multiplier", defaults.max_performance_multiplier)
        ),
    )
    _validate_parameters(file_path=file_path, parameters=parameters)
    return parameters


def _validate_parameters(*, file_path: Path, parameters: EloParameters) -> None:
    if parameters.initial_elo <= 0:
        raise ValueError(f"{file_path}: [elo].initial_elo must be > 0")
    if parameters.scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [elo].scale_factor must be > 0")
    if parameters.k_factor_floor <= 0:
        raise ValueError(f"{file_path}: [elo].k_factor_floor must be > 0")
    bounds = [bound for bound, _ in parameters.k_factor_tiers]
    if bounds != sorted(bounds) or len(bounds) != len(set(bounds)):
        raise ValueError(f"{file_path}: [elo].k_factor_tiers bounds must be strictly increasing")
    if any(k_factor <= 0 for _, k_factor in parameters.k_factor_tiers):
        raise ValueError(f"{file_path}: [elo].k_factor_tiers k values must be > 0")
    if parameters.margin_divisor <= 0.0:
        raise ValueError(f"{file_path}: [elo].margin_divisor must be > 0")
    if parameters.max_margin_multiplier < 1.0:
        raise ValueError(f"{file_path}: [elo].max_margin_multiplier must be >= 1")
    if parameters.performance_sensitivity < 0.0:
        raise ValueError(f"{file_path}: [elo].performance_sensitivity must be >= 0")
    if parameters.min_performance_multiplier <= 0.0 or parameters.min_performance_multiplier > 1.0:
        raise ValueError(f"{file_path}: [elo].min_performance_multiplier must be in (0, 1]")
    if parameters.max_performance_multiplier < 1.0 or parameters.max_performance_multiplier >= 2.0:
        raise ValueError(f"{file_path}: [elo].max_performance_multiplier must be in [1, 2)")
