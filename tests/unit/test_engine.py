"""Unit tests for the flush engine."""

import asyncio

import pytest

from graphite_reporter.errors import BackendWriteError
from graphite_reporter.metrics import get_or_register_counter, get_or_register_gauge
from graphite_reporter.reporting.engine import GraphiteReporter
from graphite_reporter.reporting.results import ConnectionState, FlushStatus
from graphite_reporter.transport.connection import GraphiteConnection
from tests.conftest import TIMESTAMP
from tests.helpers.line_server import LineServer


class TestFlushOnce:
    """Test single flush cycles."""

    @pytest.mark.asyncio
    async def test_flush_writes_lines(self, line_server, make_config, registry, wall_clock):
        get_or_register_counter("foo", registry).inc(2)
        get_or_register_gauge("bar", registry).update(7)

        reporter = GraphiteReporter(make_config(line_server.address), clock=wall_clock)
        result = await reporter.flush_once()

        assert result.ok
        assert result.records == 2
        assert result.timestamp == TIMESTAMP
        assert reporter.state == ConnectionState.CONNECTED

        await reporter.close()
        assert reporter.state == ConnectionState.DISCONNECTED
        assert line_server.wait_for_disconnects(1)
        assert line_server.lines == [
            ("foobar.bar.value", 7.0, TIMESTAMP),
            ("foobar.foo.count", 2.0, TIMESTAMP),
        ]

    @pytest.mark.asyncio
    async def test_connection_is_reused(self, line_server, make_config, registry):
        get_or_register_counter("foo", registry).inc()

        async with GraphiteReporter(make_config(line_server.address)) as reporter:
            for _ in range(3):
                assert (await reporter.flush_once()).ok

        assert line_server.wait_for_disconnects(1)
        assert line_server.connections_closed == 1
        # Counts are cumulative, so three flushes of 1 sum to 3
        assert line_server.values["foobar.foo.count"] == 3.0

    @pytest.mark.asyncio
    async def test_unreachable_backend_skips_cycle(self, unused_address, make_config, registry):
        get_or_register_counter("foo", registry).inc()
        results = []

        reporter = GraphiteReporter(make_config(unused_address), on_result=results.append)
        result = await reporter.flush_once()

        assert result.status == FlushStatus.CONNECTION_ERROR
        assert result.records == 0
        assert result.error
        assert reporter.state == ConnectionState.DISCONNECTED
        assert results == [result]
        await reporter.close()

    @pytest.mark.asyncio
    async def test_recovers_when_backend_comes_up(self, unused_address, make_config, registry):
        get_or_register_counter("foo", registry).inc(2)
        reporter = GraphiteReporter(make_config(unused_address))

        first = await reporter.flush_once()
        assert first.status == FlushStatus.CONNECTION_ERROR

        port = int(unused_address.rsplit(":", 1)[1])
        server = LineServer(port=port).start()
        try:
            second = await reporter.flush_once()
            assert second.ok
            await reporter.close()
            assert server.wait_for_lines(1)
            assert server.values["foobar.foo.count"] == 2.0
        finally:
            server.stop()

    @pytest.mark.asyncio
    async def test_write_error_drops_connection(self, line_server, make_config, registry, monkeypatch):
        get_or_register_counter("foo", registry).inc()
        reporter = GraphiteReporter(make_config(line_server.address))
        assert (await reporter.flush_once()).ok

        async def failing_write(payload, timeout):
            raise BackendWriteError("Connection reset", address=line_server.address)

        monkeypatch.setattr(reporter._connection, "write", failing_write)
        result = await reporter.flush_once()

        assert result.status == FlushStatus.WRITE_ERROR
        assert result.records == 1
        assert reporter.state == ConnectionState.DISCONNECTED
        assert reporter._connection is None

        # Next cycle reconnects on its own
        assert (await reporter.flush_once()).ok
        await reporter.close()
        assert line_server.wait_for_disconnects(2)
        assert line_server.values["foobar.foo.count"] == 2.0

    @pytest.mark.asyncio
    async def test_discards_stale_connection(self, line_server, make_config, registry, monkeypatch):
        """A connection closed by the peer is replaced before writing."""
        get_or_register_counter("foo", registry).inc()
        reporter = GraphiteReporter(make_config(line_server.address))
        assert (await reporter.flush_once()).ok
        stale = reporter._connection

        monkeypatch.setattr(GraphiteConnection, "is_usable", property(lambda conn: conn is not stale))
        assert (await reporter.flush_once()).ok
        assert reporter._connection is not stale

        await reporter.close()
        assert line_server.wait_for_disconnects(2)
        assert line_server.values["foobar.foo.count"] == 2.0

    @pytest.mark.asyncio
    async def test_empty_registry(self, line_server, make_config):
        async with GraphiteReporter(make_config(line_server.address)) as reporter:
            result = await reporter.flush_once()
        assert result.ok
        assert result.records == 0
        assert result.bytes_written == 0

    @pytest.mark.asyncio
    async def test_skip_when_cycle_in_flight(self, line_server, make_config):
        reporter = GraphiteReporter(make_config(line_server.address))
        async with reporter._lock:
            result = await reporter.flush_once(wait=False)
        assert result.status == FlushStatus.SKIPPED
        await reporter.close()

    @pytest.mark.asyncio
    async def test_callback_errors_do_not_escape(self, line_server, make_config):
        def broken_callback(result):
            raise RuntimeError("callback failed")

        async with GraphiteReporter(make_config(line_server.address), on_result=broken_callback) as reporter:
            result = await reporter.flush_once()
        assert result.ok


class TestRunLoop:
    """Test the periodic scheduling loop."""

    @pytest.mark.asyncio
    async def test_periodic_flushes_until_stopped(self, line_server, make_config, registry):
        get_or_register_counter("foo", registry).inc()
        results = []

        reporter = GraphiteReporter(make_config(line_server.address, flush_interval=0.02),
                                    on_result=results.append)
        reporter.start()
        assert reporter.is_running
        await asyncio.sleep(0.2)
        await reporter.stop()

        assert not reporter.is_running
        assert len(results) >= 2
        assert all(r.ok for r in results)
        assert reporter.state == ConnectionState.DISCONNECTED
        assert line_server.wait_for_lines(len(results))

    @pytest.mark.asyncio
    async def test_loop_survives_unreachable_backend(self, unused_address, make_config, registry):
        get_or_register_counter("foo", registry).inc()
        results = []

        reporter = GraphiteReporter(make_config(unused_address, flush_interval=0.02),
                                    on_result=results.append)
        task = reporter.start()
        await asyncio.sleep(0.15)
        assert not task.done()
        await reporter.stop()

        assert len(results) >= 2
        assert all(r.status == FlushStatus.CONNECTION_ERROR for r in results)

    @pytest.mark.asyncio
    async def test_loop_survives_unexpected_errors(self, line_server, make_config, registry):
        class ExplodingRegistry:
            def items(self):
                raise RuntimeError("registry exploded")

        results = []
        config = make_config(line_server.address, flush_interval=0.02, registry=ExplodingRegistry())
        reporter = GraphiteReporter(config, on_result=results.append)
        reporter.start()
        await asyncio.sleep(0.1)
        await reporter.stop()

        assert results
        assert all(r.status == FlushStatus.ERROR for r in results)
        assert "registry exploded" in results[0].error

    @pytest.mark.asyncio
    async def test_stop_before_first_tick(self, line_server, make_config):
        results = []
        reporter = GraphiteReporter(make_config(line_server.address, flush_interval=60),
                                    on_result=results.append)
        reporter.start()
        await asyncio.sleep(0)
        await asyncio.wait_for(reporter.stop(), timeout=1)
        assert results == []

    @pytest.mark.asyncio
    async def test_start_twice_is_rejected(self, line_server, make_config):
        reporter = GraphiteReporter(make_config(line_server.address, flush_interval=60))
        reporter.start()
        with pytest.raises(RuntimeError):
            reporter.start()
        await reporter.close()
