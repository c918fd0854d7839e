"""Reporter configuration."""

from .models import DurationUnit, GraphiteAddress, ReporterConfig
from .constants import (
    DEFAULT_FLUSH_INTERVAL_SECONDS,
    DEFAULT_GRAPHITE_PORT,
    DEFAULT_PERCENTILES,
    DEFAULT_TIMEOUT_SECONDS,
)

__all__ = [
    "DurationUnit",
    "GraphiteAddress",
    "ReporterConfig",
    "DEFAULT_FLUSH_INTERVAL_SECONDS",
    "DEFAULT_GRAPHITE_PORT",
    "DEFAULT_PERCENTILES",
    "DEFAULT_TIMEOUT_SECONDS",
]
