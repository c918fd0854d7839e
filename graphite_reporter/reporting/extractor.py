"""
Stat extractor.

Maps each metric reading to the named sub-values reported for its kind.
Timer durations are converted from nanoseconds to the configured unit here.
Non-finite values (for example the min of an empty histogram) are dropped
rather than reported as zero.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Sequence, Tuple, Union

from ..config.models import DurationUnit
from ..metrics.types import (
    CounterSnapshot,
    GaugeFloat64Snapshot,
    GaugeSnapshot,
    HistogramSnapshot,
    MeterSnapshot,
    MetricKind,
    TimerSnapshot,
)
from .snapshot import MetricReading

logger = logging.getLogger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class StatRecord:
    """One sub-value of one metric, e.g. ("requests", "count", 42)."""
    name: str
    suffix: str
    value: Number


def percentile_suffix(fraction: float) -> str:
    """
    Suffix for a percentile fraction: 0.5 -> "50-percentile",
    0.999 -> "999-percentile".
    """
    scaled = Decimal(repr(float(fraction))) * 100
    digits = format(scaled.normalize(), "f").replace(".", "", 1)
    return f"{digits}-percentile"


def _counter_stats(snapshot: CounterSnapshot, percentiles, unit) -> List[Tuple[str, Number]]:
    return [("count", snapshot.count)]


def _gauge_stats(snapshot: Union[GaugeSnapshot, GaugeFloat64Snapshot],
                 percentiles, unit) -> List[Tuple[str, Number]]:
    return [("value", snapshot.value)]


def _meter_stats(snapshot: MeterSnapshot, percentiles, unit) -> List[Tuple[str, Number]]:
    return [
        ("count", snapshot.count),
        ("one-minute", snapshot.rate1),
        ("five-minute", snapshot.rate5),
        ("fifteen-minute", snapshot.rate15),
        ("mean", snapshot.rate_mean),
    ]


def _distribution_stats(snapshot: HistogramSnapshot, percentiles: Sequence[float],
                        scale: Callable[[float], float]) -> List[Tuple[str, Number]]:
    stats: List[Tuple[str, Number]] = [
        ("count", snapshot.count),
        ("min", scale(snapshot.min)),
        ("max", scale(snapshot.max)),
        ("mean", scale(snapshot.mean)),
        ("std-dev", scale(snapshot.stddev)),
    ]
    values = snapshot.percentiles(percentiles)
    for fraction, value in zip(percentiles, values):
        stats.append((percentile_suffix(fraction), scale(value)))
    return stats


def _histogram_stats(snapshot: HistogramSnapshot, percentiles, unit) -> List[Tuple[str, Number]]:
    return _distribution_stats(snapshot, percentiles, float)


def _timer_stats(snapshot: TimerSnapshot, percentiles,
                 unit: DurationUnit) -> List[Tuple[str, Number]]:
    size = unit.nanoseconds
    stats = _distribution_stats(snapshot.histogram, percentiles, lambda ns: ns / size)
    meter = snapshot.meter
    stats.extend([
        ("one-minute", meter.rate1),
        ("five-minute", meter.rate5),
        ("fifteen-minute", meter.rate15),
        ("mean-rate", meter.rate_mean),
    ])
    return stats


_EXTRACTORS: Dict[MetricKind, Callable] = {
    MetricKind.COUNTER: _counter_stats,
    MetricKind.GAUGE: _gauge_stats,
    MetricKind.GAUGE_FLOAT64: _gauge_stats,
    MetricKind.METER: _meter_stats,
    MetricKind.HISTOGRAM: _histogram_stats,
    MetricKind.TIMER: _timer_stats,
}

_missing = set(MetricKind) - set(_EXTRACTORS)
if _missing:
    raise TypeError(f"No stat extractor for metric kinds: {sorted(k.value for k in _missing)}")


def extract_stats(reading: MetricReading, percentiles: Sequence[float],
                  duration_unit: DurationUnit) -> List[StatRecord]:
    """
    Compute the records reported for one metric.

    Args:
        reading: Metric reading from the snapshot
        percentiles: Fractions to report for histograms and timers, in order
        duration_unit: Unit timer durations are converted to

    Returns:
        Records in reporting order, non-finite values removed
    """
    extractor = _EXTRACTORS[reading.kind]
    records = []
    for suffix, value in extractor(reading.snapshot, percentiles, duration_unit):
        if isinstance(value, float) and not math.isfinite(value):
            logger.debug(f"Suppressing non-finite {reading.name}.{suffix}={value}")
            continue
        records.append(StatRecord(name=reading.name, suffix=suffix, value=value))
    return records


def extract_all(readings: Iterable[MetricReading], percentiles: Sequence[float],
                duration_unit: DurationUnit) -> List[StatRecord]:
    """Records for every reading, in reading order."""
    records = []
    for reading in readings:
        records.extend(extract_stats(reading, percentiles, duration_unit))
    return records
