"""
Graphite Reporter - ship in-process metrics to Graphite.

This package periodically snapshots a metrics registry and writes each
metric's derived statistics to a Graphite (Carbon plaintext) backend:
- Counters, gauges, meters, histograms and timers
- Configurable prefix, duration unit and percentiles
- Lazy connect, per-cycle failure isolation and bounded timeouts
"""

__version__ = "0.1.0"

from .config import DurationUnit, GraphiteAddress, ReporterConfig
from .errors import (
    BackendConnectionError,
    BackendError,
    BackendWriteError,
    DuplicateMetricError,
    ReporterError,
)
from .metrics import (
    Counter,
    Gauge,
    GaugeFloat64,
    Histogram,
    Meter,
    MetricKind,
    MetricRegistry,
    Timer,
    default_registry,
    get_or_register_counter,
    get_or_register_gauge,
    get_or_register_gauge_float64,
    get_or_register_histogram,
    get_or_register_meter,
    get_or_register_timer,
)
from .reporting import (
    ConnectionState,
    FlushResult,
    FlushStatus,
    GraphiteReporter,
    graphite,
    once,
    with_config,
)

__all__ = [
    # Reporter
    "GraphiteReporter",
    "graphite",
    "once",
    "with_config",
    "FlushResult",
    "FlushStatus",
    "ConnectionState",

    # Config
    "ReporterConfig",
    "GraphiteAddress",
    "DurationUnit",

    # Metrics
    "MetricKind",
    "MetricRegistry",
    "default_registry",
    "Counter",
    "Gauge",
    "GaugeFloat64",
    "Meter",
    "Histogram",
    "Timer",
    "get_or_register_counter",
    "get_or_register_gauge",
    "get_or_register_gauge_float64",
    "get_or_register_meter",
    "get_or_register_histogram",
    "get_or_register_timer",

    # Errors
    "ReporterError",
    "BackendError",
    "BackendConnectionError",
    "BackendWriteError",
    "DuplicateMetricError",
]
