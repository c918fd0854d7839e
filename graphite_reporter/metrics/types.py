"""
Metric kinds and immutable snapshot value objects.

Every metric in a registry reports exactly one ``MetricKind`` and can
produce a snapshot: a frozen copy of its current readable values. The
reporter only ever works with snapshots, never with live metrics.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple, Union


class MetricKind(str, Enum):
    """Closed set of metric kinds understood by the reporter."""
    COUNTER = "counter"
    GAUGE = "gauge"
    GAUGE_FLOAT64 = "gauge_float64"
    METER = "meter"
    HISTOGRAM = "histogram"
    TIMER = "timer"


@dataclass(frozen=True)
class CounterSnapshot:
    count: int


@dataclass(frozen=True)
class GaugeSnapshot:
    value: int


@dataclass(frozen=True)
class GaugeFloat64Snapshot:
    value: float


@dataclass(frozen=True)
class MeterSnapshot:
    """Rates are events per second."""
    count: int
    rate1: float
    rate5: float
    rate15: float
    rate_mean: float


def sample_percentiles(sorted_values: Sequence[float], fractions: Sequence[float]) -> Tuple[float, ...]:
    """
    Compute percentiles over an already sorted sample.

    Uses the ``p * (n + 1)`` position rule: positions below 1 clamp to the
    minimum, positions at or past ``n`` clamp to the maximum, anything in
    between is linearly interpolated between its neighbours.

    Args:
        sorted_values: Sample values in ascending order
        fractions: Requested fractions in [0, 1]

    Returns:
        One value per fraction, NaN for each when the sample is empty
    """
    size = len(sorted_values)
    if size == 0:
        return tuple(math.nan for _ in fractions)

    scores = []
    for fraction in fractions:
        pos = fraction * (size + 1)
        if pos < 1.0:
            scores.append(float(sorted_values[0]))
        elif pos >= size:
            scores.append(float(sorted_values[-1]))
        else:
            lower = float(sorted_values[int(pos) - 1])
            upper = float(sorted_values[int(pos)])
            scores.append(lower + (pos - math.floor(pos)) * (upper - lower))
    return tuple(scores)


@dataclass(frozen=True)
class HistogramSnapshot:
    """
    Point-in-time view of a histogram.

    ``count`` is the total number of updates ever recorded; ``values`` holds
    the retained sample (sorted), which may be smaller than ``count`` once
    the reservoir is full. Statistics over an empty sample are NaN.
    """
    count: int
    values: Tuple[float, ...]

    @property
    def min(self) -> float:
        return float(self.values[0]) if self.values else math.nan

    @property
    def max(self) -> float:
        return float(self.values[-1]) if self.values else math.nan

    @property
    def mean(self) -> float:
        if not self.values:
            return math.nan
        return math.fsum(self.values) / len(self.values)

    @property
    def stddev(self) -> float:
        # Population standard deviation of the retained sample
        if not self.values:
            return math.nan
        mean = self.mean
        variance = math.fsum((v - mean) ** 2 for v in self.values) / len(self.values)
        return math.sqrt(variance)

    def percentile(self, fraction: float) -> float:
        return sample_percentiles(self.values, (fraction,))[0]

    def percentiles(self, fractions: Sequence[float]) -> Tuple[float, ...]:
        return sample_percentiles(self.values, fractions)


@dataclass(frozen=True)
class TimerSnapshot:
    """Durations in the histogram are nanoseconds."""
    histogram: HistogramSnapshot
    meter: MeterSnapshot

    @property
    def count(self) -> int:
        return self.histogram.count


MetricSnapshot = Union[
    CounterSnapshot,
    GaugeSnapshot,
    GaugeFloat64Snapshot,
    MeterSnapshot,
    HistogramSnapshot,
    TimerSnapshot,
]
