"""Clients for external services."""

from clients.telemetry import TelemetryClient, TelemetrySource

__all__ = ["TelemetryClient", "TelemetrySource"]
