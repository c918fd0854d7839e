"""
Snapshot reader.

Turns a live registry into an ordered list of immutable readings. Each
metric is read atomically under its own lock; there is no atomicity across
metrics, and nothing is reset by reading.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from ..metrics.registry import Registry
from ..metrics.types import MetricKind, MetricSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricReading:
    """One metric's values at the start of a flush cycle."""
    name: str
    kind: MetricKind
    snapshot: MetricSnapshot


def take_snapshot(registry: Registry) -> List[MetricReading]:
    """
    Read every metric in the registry.

    Args:
        registry: Any object whose ``items()`` yields (name, metric) pairs

    Returns:
        Readings sorted by metric name. A metric whose ``snapshot()`` raises
        is logged and left out rather than failing the whole cycle.
    """
    readings = []
    for name, metric in registry.items():
        try:
            kind = MetricKind(metric.kind)
            snapshot = metric.snapshot()
        except Exception as e:
            logger.warning(f"Skipping metric {name!r}: snapshot failed: {type(e).__name__}: {e}")
            continue
        readings.append(MetricReading(name=name, kind=kind, snapshot=snapshot))

    readings.sort(key=lambda reading: reading.name)
    return readings
