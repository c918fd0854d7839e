"""Configuration models for the Graphite reporter."""

import math
import os
from datetime import timedelta
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    ADDRESS_ENV_VAR,
    DEFAULT_FLUSH_INTERVAL_SECONDS,
    DEFAULT_GRAPHITE_PORT,
    DEFAULT_PERCENTILES,
    DEFAULT_TIMEOUT_SECONDS,
    DURATION_UNIT_ENV_VAR,
    FLUSH_INTERVAL_ENV_VAR,
    PERCENTILES_ENV_VAR,
    PREFIX_ENV_VAR,
    TIMEOUT_ENV_VAR,
)


class DurationUnit(str, Enum):
    """Unit that timer durations are reported in."""
    NANOSECOND = "ns"
    MICROSECOND = "us"
    MILLISECOND = "ms"
    SECOND = "s"
    MINUTE = "m"
    HOUR = "h"

    @property
    def nanoseconds(self) -> int:
        """Size of one unit in nanoseconds."""
        return _UNIT_NANOSECONDS[self]

    @classmethod
    def parse(cls, text: str) -> "DurationUnit":
        """
        Parse a unit from its abbreviation or name.

        Accepts e.g. ``"ms"``, ``"millisecond"``, ``"milliseconds"``.
        """
        key = text.strip().lower()
        if key in _UNIT_ALIASES:
            return _UNIT_ALIASES[key]
        raise ValueError(f"Unknown duration unit: {text!r}")


_UNIT_NANOSECONDS = {
    DurationUnit.NANOSECOND: 1,
    DurationUnit.MICROSECOND: 1_000,
    DurationUnit.MILLISECOND: 1_000_000,
    DurationUnit.SECOND: 1_000_000_000,
    DurationUnit.MINUTE: 60_000_000_000,
    DurationUnit.HOUR: 3_600_000_000_000,
}

_UNIT_ALIASES = {}
for _unit in DurationUnit:
    _UNIT_ALIASES[_unit.value] = _unit
    _UNIT_ALIASES[_unit.name.lower()] = _unit
    _UNIT_ALIASES[_unit.name.lower() + "s"] = _unit
_UNIT_ALIASES["µs"] = DurationUnit.MICROSECOND


class GraphiteAddress(BaseModel):
    """Network endpoint of the Graphite (Carbon plaintext) backend."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = Field(..., min_length=1, description="Hostname or IP address")
    port: int = Field(default=DEFAULT_GRAPHITE_PORT, ge=1, le=65535, description="TCP port")

    @classmethod
    def parse(cls, text: str) -> "GraphiteAddress":
        """
        Parse ``host:port`` (or bare ``host``, using the default port).

        IPv6 literals must be bracketed: ``[::1]:2003``. An empty host, as
        in ``:2003``, means ``localhost``.
        """
        text = text.strip()
        if not text:
            raise ValueError("Invalid address: empty")
        if text.startswith("["):
            host, sep, rest = text[1:].partition("]")
            if not sep:
                raise ValueError(f"Invalid address: {text!r}")
            port = rest[1:] if rest.startswith(":") else ""
        else:
            host, _, port = text.rpartition(":") if ":" in text else (text, "", "")
        host = host or "localhost"
        if not port:
            return cls(host=host)
        try:
            return cls(host=host, port=int(port))
        except ValueError as e:
            raise ValueError(f"Invalid address: {text!r}") from e

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"


class ReporterConfig(BaseModel):
    """
    Immutable parameter bundle for a reporter.

    Invalid values fail at construction with ``pydantic.ValidationError``,
    so a misconfigured reporter never starts.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    address: GraphiteAddress = Field(..., description="Graphite backend endpoint")
    registry: Any = Field(..., description="Registry to snapshot on every flush")
    flush_interval: float = Field(
        default=DEFAULT_FLUSH_INTERVAL_SECONDS,
        gt=0,
        description="Seconds between flushes"
    )
    prefix: str = Field(default="", description="Prefix prepended to every metric path")
    duration_unit: DurationUnit = Field(
        default=DurationUnit.NANOSECOND,
        description="Unit timer durations are converted to"
    )
    percentiles: Tuple[float, ...] = Field(
        default=DEFAULT_PERCENTILES,
        description="Fractions reported for histograms and timers"
    )
    connect_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    write_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("address", mode="before")
    @classmethod
    def parse_address(cls, v):
        if isinstance(v, str):
            return GraphiteAddress.parse(v)
        if isinstance(v, tuple) and len(v) == 2:
            return GraphiteAddress(host=v[0], port=v[1])
        return v

    @field_validator("registry")
    @classmethod
    def validate_registry(cls, v):
        if not callable(getattr(v, "items", None)):
            raise ValueError(f"Registry must provide items(), got {type(v).__name__}")
        return v

    @field_validator("flush_interval", "connect_timeout", "write_timeout", mode="before")
    @classmethod
    def convert_timedelta(cls, v):
        if isinstance(v, timedelta):
            return v.total_seconds()
        return v

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v):
        if any(ch.isspace() for ch in v):
            raise ValueError(f"Prefix must not contain whitespace: {v!r}")
        return v.strip(".")

    @field_validator("duration_unit", mode="before")
    @classmethod
    def parse_duration_unit(cls, v):
        if isinstance(v, str) and not isinstance(v, DurationUnit):
            return DurationUnit.parse(v)
        return v

    @field_validator("percentiles")
    @classmethod
    def validate_percentiles(cls, v):
        for fraction in v:
            if not math.isfinite(fraction) or not 0.0 <= fraction <= 1.0:
                raise ValueError(f"Percentiles must be fractions in [0, 1], got {fraction}")
        return v

    @classmethod
    def from_env(cls, registry: Any, **overrides: Any) -> "ReporterConfig":
        """
        Build a config from ``GRAPHITE_*`` environment variables.

        Keyword overrides take precedence over the environment.

        Raises:
            ValueError: If GRAPHITE_ADDRESS is unset and no address is given
        """
        values = {}
        address = os.getenv(ADDRESS_ENV_VAR)
        if address:
            values["address"] = address
        prefix = os.getenv(PREFIX_ENV_VAR)
        if prefix is not None:
            values["prefix"] = prefix
        interval = os.getenv(FLUSH_INTERVAL_ENV_VAR)
        if interval:
            values["flush_interval"] = float(interval)
        unit = os.getenv(DURATION_UNIT_ENV_VAR)
        if unit:
            values["duration_unit"] = unit
        percentiles = _parse_percentiles(os.getenv(PERCENTILES_ENV_VAR))
        if percentiles is not None:
            values["percentiles"] = percentiles
        timeout = os.getenv(TIMEOUT_ENV_VAR)
        if timeout:
            values["connect_timeout"] = values["write_timeout"] = float(timeout)

        values.update(overrides)
        if "address" not in values:
            raise ValueError(f"{ADDRESS_ENV_VAR} is not set")
        return cls(registry=registry, **values)


def _parse_percentiles(text: Optional[str]) -> Optional[Tuple[float, ...]]:
    if not text:
        return None
    return tuple(float(part) for part in text.split(",") if part.strip())
