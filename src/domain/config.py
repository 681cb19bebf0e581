"""Load the scrim service configuration from TOML."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from domain.common import TeamAssignmentMode
from domain.config_base import BaseSystemConfig, load_config_file, parse_system_table
from domain.ratings.elo.calculator import EloParameters
from domain.ratings.elo.config import parse_elo_parameters

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "default.toml"


@dataclass(frozen=True)
class ScrimSettings:
    ttl_minutes: int = 20
    default_min_players_per_team: int = 1
    default_max_players_per_team: int = 8
    team_assignment: TeamAssignmentMode = TeamAssignmentMode.RANDOM
    # Empty means nobody may run admin recalculation.
    admin_account_id: str = ""


@dataclass(frozen=True)
class TelemetrySettings:
    base_url: str = "http://localhost:8080/api"
    timeout_seconds: float = 10.0
    max_sessions: int = 8


@dataclass(frozen=True)
class AppConfig(BaseSystemConfig):
    """Everything the scrim and rating services read at start-up."""

    scrim: ScrimSettings
    elo: EloParameters
    telemetry: TelemetrySettings

    def as_config_json(self) -> dict[str, Any]:
        return {
            "scrim": {
                "ttl_minutes": self.scrim.ttl_minutes,
                "default_min_players_per_team": self.scrim.default_min_players_per_team,
                "default_max_players_per_team": self.scrim.default_max_players_per_team,
                "team_assignment": self.scrim.team_assignment.value,
            },
            "elo": {
                "initial_elo": self.elo.initial_elo,
                "scale_factor": self.elo.scale_factor,
                "k_factor_tiers": [list(tier) for tier in self.elo.k_factor_tiers],
                "k_factor_floor": self.elo.k_factor_floor,
                "margin_divisor": self.elo.margin_divisor,
                "max_margin_multiplier": self.elo.max_margin_multiplier,
                "performance_sensitivity": self.elo.performance_sensitivity,
                "min_performance_multiplier": self.elo.min_performance_multiplier,
                "max_performance_multiplier": self.elo.max_performance_multiplier,
            },
            "telemetry": {
                "base_url": self.telemetry.base_url,
                "timeout_seconds": self.telemetry.timeout_seconds,
                "max_sessions": self.telemetry.max_sessions,
            },
        }


def load_app_config(file_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load and validate the service config file."""
    return load_config_file(file_path, _parse_app_config)


def _parse_app_config(raw: dict[str, Any], file_path: Path) -> AppConfig:
    name, description = parse_system_table(raw, file_path)
    return AppConfig(
        name=name,
        description=description,
        file_path=file_path,
        scrim=_parse_scrim_settings(raw.get("scrim", {}), file_path),
        elo=parse_elo_parameters(raw.get("elo", {}), file_path),
        telemetry=_parse_telemetry_settings(raw.get("telemetry", {}), file_path),
    )


def _parse_scrim_settings(scrim_raw: dict[str, Any], file_path: Path) -> ScrimSettings:
    defaults = ScrimSettings()

    assignment_value = str(scrim_raw.get("team_assignment", defaults.team_assignment.value))
    try:
        team_assignment = TeamAssignmentMode(assignment_value.strip().lower())
    except ValueError as exc:
        raise ValueError(
            f"{file_path}: [scrim].team_assignment must be 'random' or 'balanced'"
        ) from exc

    settings = ScrimSettings(
        ttl_minutes=int(scrim_raw.get("ttl_minutes", defaults.ttl_minutes)),
        default_min_players_per_team=int(
            scrim_raw.get("default_min_players_per_team", defaults.default_min_players_per_team)
        ),
        default_max_players_per_team=int(
            scrim_raw.get("default_max_players_per_team", defaults.default_max_players_per_team)
        ),
        team_assignment=team_assignment,
        admin_account_id=str(scrim_raw.get("admin_account_id", defaults.admin_account_id)).strip(),
    )

    if settings.ttl_minutes <= 0:
        raise ValueError(f"{file_path}: [scrim].ttl_minutes must be > 0")
    if settings.default_min_players_per_team < 1:
        raise ValueError(f"{file_path}: [scrim].default_min_players_per_team must be >= 1")
    if settings.default_max_players_per_team < settings.default_min_players_per_team:
        raise ValueError(
            f"{file_path}: [scrim].default_max_players_per_team must be >= "
            "default_min_players_per_team"
        )
    return settings


def _parse_telemetry_settings(telemetry_raw: dict[str, Any], file_path: Path) -> TelemetrySettings:
    defaults = TelemetrySettings()
    settings = TelemetrySettings(
        base_url=str(telemetry_raw.get("base_url", defaults.base_url)).strip().rstrip("/"),
        timeout_seconds=float(telemetry_raw.get("timeout_seconds", defaults.timeout_seconds)),
        max_sessions=int(telemetry_raw.get("max_sessions", defaults.max_sessions)),
    )

    if not settings.base_url:
        raise ValueError(f"{file_path}: [telemetry].base_url is required")
    if settings.timeout_seconds <= 0.0:
        raise ValueError(f"{file_path}: [telemetry].timeout_seconds must be > 0")
    if settings.max_sessions < 1:
        raise ValueError(f"{file_path}: [telemetry].max_sessions must be >= 1")
    return settings


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "ScrimSettings",
    "TelemetrySettings",
    "load_app_config",
]
