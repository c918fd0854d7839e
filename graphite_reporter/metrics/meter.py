"""
Exponentially-weighted moving averages and meters.

Meters tick lazily: every ``mark()`` or read first catches up on the
5-second ticks that elapsed since the last one, so no background thread is
needed to keep the moving averages current.
"""

import math
import threading
import time
from typing import Callable, Optional

from .types import MeterSnapshot, MetricKind

TICK_INTERVAL = 5.0  # seconds

Clock = Callable[[], float]


class EWMA:
    """
    Exponentially-weighted moving average of an event rate.

    ``update()`` accumulates uncounted events; ``tick()`` folds them into
    the average and must be called every ``TICK_INTERVAL`` seconds.
    """

    def __init__(self, alpha: float):
        self.alpha = alpha
        self._rate = 0.0
        self._uncounted = 0
        self._initialized = False
        self._lock = threading.Lock()

    @classmethod
    def for_minutes(cls, minutes: float) -> "EWMA":
        """Create an EWMA averaging over the given number of minutes."""
        return cls(1.0 - math.exp(-TICK_INTERVAL / 60.0 / minutes))

    def update(self, n: int) -> None:
        with self._lock:
            self._uncounted += n

    def tick(self) -> None:
        with self._lock:
            instant_rate = self._uncounted / TICK_INTERVAL
            self._uncounted = 0
            if self._initialized:
                self._rate += self.alpha * (instant_rate - self._rate)
            else:
                # First tick seeds the average with the instantaneous rate
                self._rate = instant_rate
                self._initialized = True

    def decay(self, ticks: int) -> None:
        """Apply ``ticks`` ticks with no events in between, in one step."""
        if ticks <= 0:
            return
        with self._lock:
            if self._initialized:
                # Underflows to 0.0 for very long gaps
                self._rate *= (1.0 - self.alpha) ** ticks

    @property
    def rate(self) -> float:
        """Current rate in events per second."""
        with self._lock:
            return self._rate


class Meter:
    """
    Counts events and tracks their 1, 5 and 15 minute moving rates plus the
    mean rate since creation.

    Args:
        clock: Monotonic clock in seconds, injectable for tests
    """

    kind = MetricKind.METER

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or time.monotonic
        self._count = 0
        self._start = self._clock()
        self._last_tick = self._start
        self._m1 = EWMA.for_minutes(1)
        self._m5 = EWMA.for_minutes(5)
        self._m15 = EWMA.for_minutes(15)
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            self._tick_if_necessary()
            elapsed = self._clock() - self._start
            rate_mean = self._count / elapsed if elapsed > 0 else 0.0
            return MeterSnapshot(
                count=self._count,
                rate1=self._m1.rate,
                rate5=self._m5.rate,
                rate15=self._m15.rate,
                rate_mean=rate_mean,
            )

    def _tick_if_necessary(self) -> None:
        # Caller holds self._lock
        now = self._clock()
        age = now - self._last_tick
        if age < TICK_INTERVAL:
            return
        ticks = int(age // TICK_INTERVAL)
        self._last_tick += ticks * TICK_INTERVAL
        # Only the first tick sees uncounted events; the rest are pure decay
        for ewma in (self._m1, self._m5, self._m15):
            ewma.tick()
            ewma.decay(ticks - 1)
