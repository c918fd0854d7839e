"""
Structured logging utility for the reporter.

Every log line carries the backend address so interleaved output from
several reporters in one process stays attributable.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional


class ReporterLogger:
    """Structured logger for a reporter instance."""

    def __init__(self, address: str, component: str = "reporter"):
        """
        Initialize logger for one backend.

        Args:
            address: Backend address (e.g., "carbon.internal:2003")
            component: Logger name suffix (e.g., "reporter", "transport")
        """
        self.address = address
        self.logger = logging.getLogger(f"graphite_reporter.{component}")

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with structured fields."""
        fields = [f"address={self.address}"]

        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")

        return f"[{' '.join(fields)}] {message}"

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, error: Optional[BaseException] = None, **kwargs):
        """Log warning message, with error type and text if given."""
        if error is not None:
            kwargs["error_type"] = getattr(error, "error_type", type(error).__name__)
            kwargs["error_msg"] = str(error)
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs):
        """Log error message; unexpected errors keep their traceback."""
        if error is not None:
            kwargs["error_type"] = type(error).__name__
            kwargs["error_msg"] = str(error)
        self.logger.error(
            self._format_message(message, **kwargs),
            exc_info=error is not None
        )

    @contextmanager
    def track_cycle(self, cycle: int):
        """
        Context manager timing one flush cycle.

        Yields:
            Dict the caller fills with outcome fields (status, records, ...)
        """
        start_time = time.monotonic()
        outcome: Dict[str, Any] = {"cycle": cycle}

        self.debug("Starting flush", cycle=cycle)
        try:
            yield outcome
        finally:
            outcome["duration_ms"] = int((time.monotonic() - start_time) * 1000)
            self.debug("Finished flush", **outcome)
