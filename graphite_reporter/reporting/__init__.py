"""Reporting layer: snapshot, extract, format and flush.

One flush cycle flows through these modules in order:
- snapshot: read the registry into immutable readings
- extractor: derive the named sub-values for each metric kind
- formatter: render Graphite plaintext lines
- engine: own the connection and schedule cycles
"""

from .snapshot import MetricReading, take_snapshot
from .extractor import StatRecord, extract_all, extract_stats, percentile_suffix
from .formatter import format_key, format_line, format_records, format_value
from .results import ConnectionState, FlushResult, FlushStatus
from .engine import GraphiteReporter, graphite, once, with_config

__all__ = [
    # Snapshot
    "MetricReading",
    "take_snapshot",

    # Extraction
    "StatRecord",
    "extract_all",
    "extract_stats",
    "percentile_suffix",

    # Formatting
    "format_key",
    "format_line",
    "format_records",
    "format_value",

    # Engine
    "ConnectionState",
    "FlushResult",
    "FlushStatus",
    "GraphiteReporter",
    "graphite",
    "once",
    "with_config",
]
