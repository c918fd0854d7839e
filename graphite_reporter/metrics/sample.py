"""
Reservoir samples backing histograms and timers.

Both samples implement the same narrow interface (``update``, ``count``,
``values``, ``snapshot``, ``clear``) so histograms stay agnostic of the
reservoir algorithm behind them.
"""

import heapq
import itertools
import math
import random
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple

DEFAULT_RESERVOIR_SIZE = 1028
DEFAULT_DECAY_ALPHA = 0.015
RESCALE_THRESHOLD = 3600.0  # seconds


class Sample(Protocol):
    """Protocol for sample implementations."""

    def update(self, value: float) -> None:
        """Record one value."""
        ...

    @property
    def count(self) -> int:
        """Total number of values ever recorded."""
        ...

    def values(self) -> List[float]:
        """Copy of the currently retained values, unordered."""
        ...

    def snapshot(self) -> Tuple[int, List[float]]:
        """Count and retained values read atomically."""
        ...

    def clear(self) -> None:
        """Drop all values and reset the count."""
        ...


class UniformSample:
    """
    Uniform random sample using Vitter's algorithm R.

    Every value recorded has the same probability of being retained.
    """

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
                 rng: Optional[random.Random] = None):
        if reservoir_size <= 0:
            raise ValueError(f"reservoir_size must be positive, got {reservoir_size}")
        self.reservoir_size = reservoir_size
        self._rng = rng or random.Random()
        self._count = 0
        self._values: List[float] = []
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
            if len(self._values) < self.reservoir_size:
                self._values.append(value)
            else:
                idx = self._rng.randrange(self._count)
                if idx < self.reservoir_size:
                    self._values[idx] = value

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def values(self) -> List[float]:
        with self._lock:
            return list(self._values)

    def snapshot(self) -> Tuple[int, List[float]]:
        """Count and values read under one lock acquisition."""
        with self._lock:
            return self._count, list(self._values)

    def clear(self) -> None:
        with self._lock:
            self._count = 0
            self._values = []


class ExpDecaySample:
    """
    Exponentially-decaying random sample biased towards recent values.

    Implements forward decay: each value gets priority
    ``exp(alpha * (t - t0)) / u`` with ``u`` uniform in (0, 1], and the
    lowest-priority value is evicted once the reservoir is full. Landmark
    ``t0`` is moved forward before any update arriving more than an hour
    after it, which keeps priorities finite after long idle gaps.
    """

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
                 alpha: float = DEFAULT_DECAY_ALPHA,
                 clock: Optional[Callable[[], float]] = None,
                 rng: Optional[random.Random] = None):
        if reservoir_size <= 0:
            raise ValueError(f"reservoir_size must be positive, got {reservoir_size}")
        self.reservoir_size = reservoir_size
        self.alpha = alpha
        self._clock = clock or time.monotonic
        self._rng = rng or random.Random()
        self._count = 0
        # Min-heap of (priority, seq, value); seq breaks priority ties
        self._heap: List[Tuple[float, int, float]] = []
        self._seq = itertools.count()
        self._t0 = self._clock()
        self._t1 = self._t0 + RESCALE_THRESHOLD
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            now = self._clock()
            # Rescale first so now - t0 never exceeds one threshold
            if now > self._t1:
                self._rescale(now)
            priority = math.exp(self.alpha * (now - self._t0)) / (1.0 - self._rng.random())
            entry = (priority, next(self._seq), value)
            if len(self._heap) < self.reservoir_size:
                heapq.heappush(self._heap, entry)
            elif priority > self._heap[0][0]:
                heapq.heapreplace(self._heap, entry)
            self._count += 1

    def _rescale(self, now: float) -> None:
        # Caller holds self._lock
        old_t0 = self._t0
        self._t0 = now
        self._t1 = now + RESCALE_THRESHOLD
        factor = math.exp(-self.alpha * (self._t0 - old_t0))
        self._heap = [(priority * factor, seq, value) for priority, seq, value in self._heap]
        heapq.heapify(self._heap)

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def values(self) -> List[float]:
        with self._lock:
            return [value for _, _, value in self._heap]

    def snapshot(self) -> Tuple[int, List[float]]:
        """Count and values read under one lock acquisition."""
        with self._lock:
            return self._count, [value for _, _, value in self._heap]

    def clear(self) -> None:
        with self._lock:
            self._count = 0
            self._heap = []
            self._seq = itertools.count()
            self._t0 = self._clock()
            self._t1 = self._t0 + RESCALE_THRESHOLD
