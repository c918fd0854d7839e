"""
Thread-safe metrics registry.

The registry maps unique names to metric objects. Application code
registers and updates metrics from any thread; the reporter only calls
``items()`` to take a point-in-time listing.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, TypeVar

from ..errors import DuplicateMetricError
from .counter import Counter, Gauge, GaugeFloat64
from .histogram import Histogram, Timer
from .meter import Meter
from .types import MetricKind, MetricSnapshot


class Metric(Protocol):
    """Protocol every registered metric satisfies."""

    kind: MetricKind

    def snapshot(self) -> MetricSnapshot:
        ...


class Registry(Protocol):
    """Read-only view of a registry as consumed by the reporter."""

    def items(self) -> List[Tuple[str, Metric]]:
        ...


M = TypeVar("M")


class MetricRegistry:
    """
    Registry of named metrics.

    Example:
        registry = MetricRegistry()
        registry.get_or_register("requests", Counter).inc()
    """

    def __init__(self):
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(self, name: str, metric: Any) -> None:
        """
        Register a metric under a new name.

        Raises:
            DuplicateMetricError: If the name is already taken
            TypeError: If the object is not a metric
        """
        _check_metric(metric)
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(name, self._metrics[name].kind, metric.kind)
            self._metrics[name] = metric

    def get(self, name: str) -> Optional[Any]:
        with self._lock:
            return self._metrics.get(name)

    def get_or_register(self, name: str, factory: Callable[[], M]) -> M:
        """
        Return the metric registered under ``name``, creating it with
        ``factory`` if absent.

        When ``factory`` is a metric class and the existing metric is of a
        different kind, ``DuplicateMetricError`` is raised.
        """
        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                metric = factory()
                _check_metric(metric)
                self._metrics[name] = metric
                return metric
        expected = getattr(factory, "kind", None)
        if isinstance(expected, MetricKind) and existing.kind != expected:
            raise DuplicateMetricError(name, existing.kind, expected)
        return existing

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._metrics.clear()

    def items(self) -> List[Tuple[str, Any]]:
        """Name/metric pairs sorted by name, copied under the lock."""
        with self._lock:
            return sorted(self._metrics.items(), key=lambda item: item[0])

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics


def _check_metric(metric: Any) -> None:
    if not isinstance(getattr(metric, "kind", None), MetricKind) or not callable(
        getattr(metric, "snapshot", None)
    ):
        raise TypeError(f"{type(metric).__name__} is not a metric")


# Process-wide default registry
default_registry = MetricRegistry()


def _resolve(registry: Optional[MetricRegistry]) -> MetricRegistry:
    # An empty registry is falsy, so compare against None explicitly
    return registry if registry is not None else default_registry


def get_or_register_counter(name: str, registry: Optional[MetricRegistry] = None) -> Counter:
    return _resolve(registry).get_or_register(name, Counter)


def get_or_register_gauge(name: str, registry: Optional[MetricRegistry] = None) -> Gauge:
    return _resolve(registry).get_or_register(name, Gauge)


def get_or_register_gauge_float64(name: str, registry: Optional[MetricRegistry] = None) -> GaugeFloat64:
    return _resolve(registry).get_or_register(name, GaugeFloat64)


def get_or_register_meter(name: str, registry: Optional[MetricRegistry] = None) -> Meter:
    return _resolve(registry).get_or_register(name, Meter)


def get_or_register_histogram(name: str, registry: Optional[MetricRegistry] = None) -> Histogram:
    return _resolve(registry).get_or_register(name, Histogram)


def get_or_register_timer(name: str, registry: Optional[MetricRegistry] = None) -> Timer:
    return _resolve(registry).get_or_register(name, Timer)
