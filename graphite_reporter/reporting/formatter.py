"""
Line formatter for the Graphite plaintext protocol.

Each record becomes ``<prefix.>name.suffix value timestamp\n``.
"""

import re
from decimal import Decimal
from typing import Iterable

from .extractor import Number, StatRecord

_WHITESPACE = re.compile(r"\s+")


def format_key(prefix: str, name: str, suffix: str) -> str:
    """Metric path; whitespace in names would break the line format."""
    key = f"{prefix}.{name}.{suffix}" if prefix else f"{name}.{suffix}"
    return _WHITESPACE.sub("_", key)


def format_value(value: Number) -> str:
    """
    Plain decimal rendering, never scientific notation.

    Integral values have no fractional part ("3000", not "3000.0").
    """
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def format_line(prefix: str, name: str, suffix: str, value: Number, timestamp: int) -> bytes:
    return f"{format_key(prefix, name, suffix)} {format_value(value)} {timestamp}\n".encode("utf-8")


def format_records(prefix: str, records: Iterable[StatRecord], timestamp: int) -> bytes:
    """Render a batch; every line carries the same timestamp."""
    return b"".join(
        format_line(prefix, record.name, record.suffix, record.value, timestamp)
        for record in records
    )
