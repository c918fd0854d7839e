"""Shared pytest fixtures for Graphite Reporter tests."""

import socket

import pytest

from graphite_reporter.config.models import ReporterConfig
from graphite_reporter.metrics.registry import MetricRegistry
from tests.helpers.clock import FakeClock
from tests.helpers.line_server import LineServer

# Fixed wall-clock second used for line timestamps
TIMESTAMP = 1_700_000_000


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests over real sockets")
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "slow: tests that wait on real timers")


@pytest.fixture
def line_server():
    """Running plaintext receiver on an ephemeral port."""
    server = LineServer().start()
    yield server
    server.stop()


@pytest.fixture
def fake_clock():
    """Monotonic clock starting at zero."""
    return FakeClock()


@pytest.fixture
def wall_clock():
    """Wall clock pinned to TIMESTAMP."""
    return FakeClock(float(TIMESTAMP))


@pytest.fixture
def registry():
    """Empty metrics registry."""
    return MetricRegistry()


@pytest.fixture
def unused_address():
    """Address with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"127.0.0.1:{port}"


@pytest.fixture
def make_config(registry):
    """Factory for configs pointing at a given address."""
    def _make(address, **overrides):
        values = dict(
            address=address,
            registry=registry,
            flush_interval=0.05,
            prefix="foobar",
            duration_unit="ms",
            percentiles=[0.5, 0.75, 0.99, 0.999],
            connect_timeout=1.0,
            write_timeout=1.0,
        )
        values.update(overrides)
        return ReporterConfig(**values)
    return _make
