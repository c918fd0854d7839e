"""
TCP transport to the Graphite backend.

Thin wrapper around asyncio streams that bounds every connect and write
with a timeout and converts socket failures into ``BackendError``s.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..config.models import GraphiteAddress
from ..errors import BackendConnectionError, BackendWriteError

logger = logging.getLogger(__name__)


class GraphiteConnection:
    """
    One outbound stream to a Graphite backend.

    Nothing is ever read from the backend; the reader side is only used to
    notice that the peer has closed the connection.
    """

    def __init__(self, address: GraphiteAddress,
                 reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.address = address
        self._reader = reader
        self._writer = writer
        self.bytes_written = 0

    @classmethod
    async def open(cls, address: GraphiteAddress, timeout: float) -> "GraphiteConnection":
        """
        Connect to the backend.

        Raises:
            BackendConnectionError: If the connection fails or times out
        """
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(address.host, address.port),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise BackendConnectionError(
                f"Timed out connecting to {address} after {timeout}s",
                address=str(address),
                original_error=e
            ) from e
        except OSError as e:
            raise BackendConnectionError(
                f"Could not connect to {address}: {e}",
                address=str(address),
                original_error=e
            ) from e

        logger.debug(f"Connected to {address}")
        return cls(address, reader, writer)

    @property
    def is_usable(self) -> bool:
        """False once either side has closed the stream."""
        return not (self._writer.is_closing() or self._reader.at_eof())

    async def write(self, payload: bytes, timeout: float) -> None:
        """
        Write one batch and wait until it is handed to the OS.

        Raises:
            BackendWriteError: If the write fails or does not drain in time
        """
        try:
            self._writer.write(payload)
            await asyncio.wait_for(self._writer.drain(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BackendWriteError(
                f"Timed out writing {len(payload)} bytes to {self.address} after {timeout}s",
                address=str(self.address),
                original_error=e
            ) from e
        except (OSError, RuntimeError) as e:
            # RuntimeError: write on a transport that is already closing
            raise BackendWriteError(
                f"Could not write to {self.address}: {e}",
                address=str(self.address),
                original_error=e
            ) from e
        self.bytes_written += len(payload)

    async def close(self, timeout: Optional[float] = None) -> None:
        """Close the stream; errors while closing are logged, not raised."""
        if not self._writer.is_closing():
            self._writer.close()
        try:
            await asyncio.wait_for(self._writer.wait_closed(), timeout=timeout)
        except (OSError, asyncio.TimeoutError) as e:
            logger.debug(f"Error closing connection to {self.address}: {e}")
