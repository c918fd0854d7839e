"""Histograms and timers."""

import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from .meter import Clock, Meter
from .sample import ExpDecaySample, Sample
from .types import HistogramSnapshot, MetricKind, TimerSnapshot

NANOSECONDS_PER_SECOND = 1_000_000_000


class Histogram:
    """
    Distribution of integer values backed by a reservoir sample.

    Args:
        sample: Sample implementation; defaults to an ``ExpDecaySample``
    """

    kind = MetricKind.HISTOGRAM

    def __init__(self, sample: Optional[Sample] = None):
        self.sample = sample if sample is not None else ExpDecaySample()

    def update(self, value: int) -> None:
        self.sample.update(value)

    @property
    def count(self) -> int:
        return self.sample.count

    def clear(self) -> None:
        self.sample.clear()

    def snapshot(self) -> HistogramSnapshot:
        count, values = self.sample.snapshot()
        return HistogramSnapshot(count=count, values=tuple(sorted(values)))


class Timer:
    """
    Histogram of durations in nanoseconds plus a meter of their rate.

    Example:
        timer = Timer()
        timer.update(0.25)          # seconds
        with timer.time():
            do_work()
    """

    kind = MetricKind.TIMER

    def __init__(self, sample: Optional[Sample] = None, clock: Optional[Clock] = None):
        self._histogram = Histogram(sample)
        self._meter = Meter(clock=clock)
        self._lock = threading.Lock()

    def update(self, seconds: float) -> None:
        """Record a duration given in seconds."""
        self.update_ns(int(round(seconds * NANOSECONDS_PER_SECOND)))

    def update_ns(self, nanoseconds: int) -> None:
        """Record a duration given in nanoseconds."""
        with self._lock:
            self._histogram.update(nanoseconds)
            self._meter.mark(1)

    @contextmanager
    def time(self) -> Iterator[None]:
        """Record how long the ``with`` block takes."""
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update_ns(time.perf_counter_ns() - start)

    @property
    def count(self) -> int:
        return self._histogram.count

    def snapshot(self) -> TimerSnapshot:
        # Histogram and meter are read together so their counts agree
        with self._lock:
            return TimerSnapshot(
                histogram=self._histogram.snapshot(),
                meter=self._meter.snapshot(),
            )
