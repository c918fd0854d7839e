"""
Error types for the Graphite reporter.

Transport errors are raised by ``transport.connection`` and always handled
by the flush engine, which turns them into ``FlushResult`` values instead
of letting them reach the caller.
"""

from typing import Optional


class ReporterError(Exception):
    """Base class for reporter errors."""


class BackendError(ReporterError):
    """Failure talking to the Graphite backend."""

    def __init__(self, message: str, address: Optional[str] = None,
                 original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.address = address
        self.original_error = original_error

    @property
    def error_type(self) -> str:
        """Name of the underlying exception type, for logs."""
        if self.original_error is not None:
            return type(self.original_error).__name__
        return type(self).__name__


class BackendConnectionError(BackendError):
    """The backend could not be reached within the connect timeout."""


class BackendWriteError(BackendError):
    """A batch could not be written within the write timeout."""


class DuplicateMetricError(ReporterError):
    """A metric name is already registered with a different kind."""

    def __init__(self, name: str, existing_kind, requested_kind):
        super().__init__(
            f"Metric '{name}' already registered as {existing_kind.value}, "
            f"cannot register as {requested_kind.value}"
        )
        self.name = name
        self.existing_kind = existing_kind
        self.requested_kind = requested_kind
