"""
Flush engine.

Owns the connection to the Graphite backend and runs flush cycles, either
one at a time (``flush_once``) or on a fixed period (``run``). A failed
connect or write never escapes a cycle: it is logged, reported as a
``FlushResult`` and the next tick starts over with a fresh connection.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Optional, Union

from ..config.models import GraphiteAddress, ReporterConfig
from ..errors import BackendConnectionError, BackendWriteError
from ..observability.logging import ReporterLogger
from ..transport.connection import GraphiteConnection
from .extractor import extract_all
from .formatter import format_records
from .results import ConnectionState, FlushResult, FlushStatus
from .snapshot import take_snapshot

ResultCallback = Callable[[FlushResult], None]


class GraphiteReporter:
    """
    Periodically writes a registry's metrics to Graphite.

    Example:
        reporter = GraphiteReporter(config)
        reporter.start()
        ...
        await reporter.close()

    Args:
        config: Reporter configuration
        on_result: Called with the result of every cycle
        clock: Wall clock in seconds used for line timestamps
    """

    def __init__(
        self,
        config: ReporterConfig,
        on_result: Optional[ResultCallback] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.on_result = on_result
        self._clock = clock
        self._connection: Optional[GraphiteConnection] = None
        self._state = ConnectionState.DISCONNECTED
        self._lock = asyncio.Lock()
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._cycles = 0
        self.log = ReporterLogger(str(config.address))

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def flush_once(self, wait: bool = True) -> FlushResult:
        """
        Run exactly one flush cycle.

        Connects first if needed. The connection is kept open for the next
        cycle on success and discarded on failure.

        Args:
            wait: If False and another cycle is in flight, return a
                SKIPPED result instead of waiting for it

        Returns:
            FlushResult describing the cycle
        """
        if not wait and self._lock.locked():
            result = FlushResult(status=FlushStatus.SKIPPED, timestamp=int(self._clock()))
            self.log.debug("Skipping flush, previous cycle still running")
            return self._publish(result)

        async with self._lock:
            self._cycles += 1
            with self.log.track_cycle(self._cycles) as outcome:
                result = await self._flush()
                outcome.update(status=result.status.value, records=result.records)
        return self._publish(result)

    async def _flush(self) -> FlushResult:
        # Caller holds self._lock
        timestamp = int(self._clock())
        started = time.monotonic()

        def elapsed_ms() -> float:
            return (time.monotonic() - started) * 1000

        if self._connection is not None and not self._connection.is_usable:
            self.log.debug("Backend closed the connection, reconnecting")
            await self._discard()

        if self._connection is None:
            self._state = ConnectionState.CONNECTING
            try:
                self._connection = await GraphiteConnection.open(
                    self.config.address, self.config.connect_timeout
                )
            except BackendConnectionError as e:
                self._state = ConnectionState.DISCONNECTED
                self.log.warning("Skipping flush, backend unreachable", error=e)
                return FlushResult(
                    status=FlushStatus.CONNECTION_ERROR,
                    timestamp=timestamp,
                    error=str(e),
                    duration_ms=elapsed_ms(),
                )
            self._state = ConnectionState.CONNECTED
            self.log.info("Connected to backend")

        self._state = ConnectionState.FLUSHING
        records = []
        try:
            readings = take_snapshot(self.config.registry)
            records = extract_all(readings, self.config.percentiles, self.config.duration_unit)
            payload = format_records(self.config.prefix, records, timestamp)
            if payload:
                await self._connection.write(payload, self.config.write_timeout)
        except BackendWriteError as e:
            self.log.warning("Flush failed, dropping connection", error=e, records=len(records))
            await self._discard()
            return FlushResult(
                status=FlushStatus.WRITE_ERROR,
                timestamp=timestamp,
                records=len(records),
                error=str(e),
                duration_ms=elapsed_ms(),
            )
        finally:
            if self._connection is not None:
                self._state = ConnectionState.CONNECTED

        return FlushResult(
            status=FlushStatus.SUCCESS,
            timestamp=timestamp,
            records=len(records),
            bytes_written=len(payload),
            duration_ms=elapsed_ms(),
        )

    async def run(self) -> None:
        """
        Flush every ``flush_interval`` seconds until ``stop()`` is called.

        The first flush happens one interval after start. The stop signal
        is only checked between cycles, so an in-flight write always
        completes. Ticks missed because a cycle overran are skipped.
        """
        loop = asyncio.get_running_loop()
        interval = self.config.flush_interval
        self.log.info(
            "Reporter started",
            interval=interval,
            prefix=self.config.prefix or None,
            duration_unit=self.config.duration_unit.value
        )

        next_tick = loop.time() + interval
        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(),
                        timeout=max(0.0, next_tick - loop.time())
                    )
                    break
                except asyncio.TimeoutError:
                    pass

                try:
                    await self.flush_once(wait=False)
                except Exception as e:
                    self.log.error("Unexpected error during flush", error=e)
                    self._publish(FlushResult(
                        status=FlushStatus.ERROR,
                        timestamp=int(self._clock()),
                        error=f"{type(e).__name__}: {e}",
                    ))

                next_tick += interval
                now = loop.time()
                if next_tick < now:
                    missed = int((now - next_tick) // interval) + 1
                    next_tick += missed * interval
                    self.log.warning("Flush overran interval", skipped_ticks=missed)
        finally:
            async with self._lock:
                await self._discard()
            self.log.info("Reporter stopped", cycles=self._cycles)

    def start(self) -> asyncio.Task:
        """Run the periodic loop as a background task of the current loop."""
        if self.is_running:
            raise RuntimeError("Reporter is already running")
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Signal the loop to stop and wait for the current cycle to finish."""
        self._stop_event.set()
        if self._task is not None:
            task, self._task = self._task, None
            await task

    async def close(self) -> None:
        """Stop the loop (if running) and close the connection."""
        await self.stop()
        async with self._lock:
            await self._discard()

    async def __aenter__(self) -> "GraphiteReporter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Private methods

    async def _discard(self) -> None:
        connection, self._connection = self._connection, None
        self._state = ConnectionState.DISCONNECTED
        if connection is not None:
            await connection.close(timeout=self.config.write_timeout)

    def _publish(self, result: FlushResult) -> FlushResult:
        if self.on_result is not None:
            try:
                self.on_result(result)
            except Exception as e:
                self.log.error("Result callback failed", error=e)
        return result


async def _flush_with_fresh_connection(config: ReporterConfig) -> FlushResult:
    async with GraphiteReporter(config) as reporter:
        return await reporter.flush_once()


def once(config: ReporterConfig) -> FlushResult:
    """
    Flush once over a new connection and close it afterwards.

    Synchronous; must not be called from inside a running event loop (use
    ``GraphiteReporter.flush_once`` there).
    """
    return asyncio.run(_flush_with_fresh_connection(config))


def with_config(config: ReporterConfig) -> None:
    """Flush on ``config.flush_interval`` forever. Blocks the calling thread."""
    asyncio.run(GraphiteReporter(config).run())


def graphite(registry: Any, flush_interval: float, prefix: str,
             address: Union[str, GraphiteAddress]) -> None:
    """
    Flush ``registry`` to ``address`` forever, with nanosecond durations
    and the default percentiles. Blocks the calling thread.
    """
    with_config(ReporterConfig(
        address=address,
        registry=registry,
        flush_interval=flush_interval,
        prefix=prefix,
    ))
