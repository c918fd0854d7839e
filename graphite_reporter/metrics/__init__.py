"""In-process metrics: counters, gauges, meters, histograms and timers.

This package is the registry the reporter reads from. Applications update
metrics from any thread; the reporter only ever takes snapshots.
"""

from .types import (
    MetricKind,
    MetricSnapshot,
    CounterSnapshot,
    GaugeSnapshot,
    GaugeFloat64Snapshot,
    MeterSnapshot,
    HistogramSnapshot,
    TimerSnapshot,
    sample_percentiles,
)
from .counter import Counter, Gauge, GaugeFloat64
from .meter import EWMA, Meter
from .sample import Sample, UniformSample, ExpDecaySample
from .histogram import Histogram, Timer
from .registry import (
    Metric,
    Registry,
    MetricRegistry,
    default_registry,
    get_or_register_counter,
    get_or_register_gauge,
    get_or_register_gauge_float64,
    get_or_register_meter,
    get_or_register_histogram,
    get_or_register_timer,
)

__all__ = [
    # Kinds and snapshots
    "MetricKind",
    "MetricSnapshot",
    "CounterSnapshot",
    "GaugeSnapshot",
    "GaugeFloat64Snapshot",
    "MeterSnapshot",
    "HistogramSnapshot",
    "TimerSnapshot",
    "sample_percentiles",

    # Metrics
    "Counter",
    "Gauge",
    "GaugeFloat64",
    "EWMA",
    "Meter",
    "Histogram",
    "Timer",

    # Samples
    "Sample",
    "UniformSample",
    "ExpDecaySample",

    # Registry
    "Metric",
    "Registry",
    "MetricRegistry",
    "default_registry",
    "get_or_register_counter",
    "get_or_register_gauge",
    "get_or_register_gauge_float64",
    "get_or_register_meter",
    "get_or_register_histogram",
    "get_or_register_timer",
]
