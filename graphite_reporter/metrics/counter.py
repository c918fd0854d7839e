"""Counters and gauges."""

import threading

from .types import (
    CounterSnapshot,
    GaugeFloat64Snapshot,
    GaugeSnapshot,
    MetricKind,
)


class Counter:
    """
    Cumulative integer counter.

    Reading a counter never resets it; only ``clear()`` does.
    """

    kind = MetricKind.COUNTER

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> CounterSnapshot:
        return CounterSnapshot(count=self.count)


class Gauge:
    """Holds the last integer value it was updated with."""

    kind = MetricKind.GAUGE

    def __init__(self, value: int = 0):
        self._value = int(value)
        self._lock = threading.Lock()

    def update(self, value: int) -> None:
        with self._lock:
            self._value = int(value)

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def snapshot(self) -> GaugeSnapshot:
        return GaugeSnapshot(value=self.value)


class GaugeFloat64:
    """Holds the last float value it was updated with."""

    kind = MetricKind.GAUGE_FLOAT64

    def __init__(self, value: float = 0.0):
        self._value = float(value)
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def snapshot(self) -> GaugeFloat64Snapshot:
        return GaugeFloat64Snapshot(value=self.value)
