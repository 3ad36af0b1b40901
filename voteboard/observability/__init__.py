"""Observability module for logging and metrics."""

from voteboard.observability.logging import (
    configure_from_settings,
    configure_logging,
    request_context,
)
from voteboard.observability.metrics import EngineMetrics


__all__ = [
    "EngineMetrics",
    "configure_from_settings",
    "configure_logging",
    "request_context",
]
