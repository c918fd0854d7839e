"""Typed outcome of a flush cycle."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FlushStatus(str, Enum):
    """How a flush cycle ended."""
    SUCCESS = "success"
    CONNECTION_ERROR = "connection_error"  # Backend unreachable, nothing sent
    WRITE_ERROR = "write_error"            # Connection dropped mid-cycle
    SKIPPED = "skipped"                    # Another cycle was still in flight
    ERROR = "error"                        # Unexpected failure, loop continues


class ConnectionState(str, Enum):
    """Connection lifecycle of a reporter."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FLUSHING = "flushing"


@dataclass(frozen=True)
class FlushResult:
    """Result of one flush cycle."""
    status: FlushStatus
    timestamp: int
    records: int = 0
    bytes_written: int = 0
    error: Optional[str] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == FlushStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, dropping empty fields."""
        data = {
            "status": self.status.value,
            "timestamp": self.timestamp,
            "records": self.records,
            "bytes_written": self.bytes_written,
            "error": self.error,
            "duration_ms": round(self.duration_ms, 3),
        }
        return {k: v for k, v in data.items() if v is not None}
