"""Unit tests for reporter configuration."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from graphite_reporter.config.constants import DEFAULT_PERCENTILES
from graphite_reporter.config.models import DurationUnit, GraphiteAddress, ReporterConfig


class TestGraphiteAddress:
    """Test address parsing."""

    def test_parse_host_and_port(self):
        address = GraphiteAddress.parse("carbon.internal:2004")
        assert address.host == "carbon.internal"
        assert address.port == 2004
        assert str(address) == "carbon.internal:2004"

    def test_parse_default_port(self):
        assert GraphiteAddress.parse("localhost").port == 2003

    def test_parse_empty_host_means_localhost(self):
        address = GraphiteAddress.parse(":2003")
        assert address.host == "localhost"
        assert address.port == 2003

    def test_parse_ipv6(self):
        address = GraphiteAddress.parse("[::1]:2003")
        assert address.host == "::1"
        assert str(address) == "[::1]:2003"

    @pytest.mark.parametrize("text", ["host:notaport", "host:0", "host:70000", "", "   ", "[::1"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            GraphiteAddress.parse(text)


class TestDurationUnit:
    """Test duration units."""

    def test_sizes(self):
        assert DurationUnit.NANOSECOND.nanoseconds == 1
        assert DurationUnit.MILLISECOND.nanoseconds == 1_000_000
        assert DurationUnit.HOUR.nanoseconds == 3_600_000_000_000

    @pytest.mark.parametrize("text,unit", [
        ("ms", DurationUnit.MILLISECOND),
        ("Millisecond", DurationUnit.MILLISECOND),
        ("seconds", DurationUnit.SECOND),
        ("µs", DurationUnit.MICROSECOND),
    ])
    def test_parse(self, text, unit):
        assert DurationUnit.parse(text) is unit

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            DurationUnit.parse("fortnight")


class TestReporterConfig:
    """Test config validation."""

    def test_defaults(self, registry):
        config = ReporterConfig(address="localhost:2003", registry=registry)
        assert config.address == GraphiteAddress(host="localhost", port=2003)
        assert config.duration_unit is DurationUnit.NANOSECOND
        assert config.percentiles == DEFAULT_PERCENTILES
        assert config.prefix == ""
        assert config.registry is registry

    def test_is_immutable(self, registry):
        config = ReporterConfig(address="localhost:2003", registry=registry)
        with pytest.raises(ValidationError):
            config.prefix = "other"

    def test_accepts_timedelta_and_unit_names(self, registry):
        config = ReporterConfig(
            address=("127.0.0.1", 2003),
            registry=registry,
            flush_interval=timedelta(milliseconds=500),
            duration_unit="millisecond",
            percentiles=[0.5, 0.99],
        )
        assert config.flush_interval == 0.5
        assert config.duration_unit is DurationUnit.MILLISECOND
        assert config.percentiles == (0.5, 0.99)

    @pytest.mark.parametrize("interval", [0, -1, timedelta(0)])
    def test_rejects_non_positive_interval(self, registry, interval):
        with pytest.raises(ValidationError):
            ReporterConfig(address="localhost:2003", registry=registry, flush_interval=interval)

    @pytest.mark.parametrize("percentiles", [[1.5], [-0.1], [float("nan")]])
    def test_rejects_invalid_percentiles(self, registry, percentiles):
        with pytest.raises(ValidationError):
            ReporterConfig(address="localhost:2003", registry=registry, percentiles=percentiles)

    def test_rejects_invalid_address(self, registry):
        with pytest.raises(ValidationError):
            ReporterConfig(address="localhost:99999", registry=registry)

    def test_rejects_non_registry(self):
        with pytest.raises(ValidationError):
            ReporterConfig(address="localhost:2003", registry=object())

    def test_prefix_validation(self, registry):
        config = ReporterConfig(address="localhost", registry=registry, prefix="app.web01.")
        assert config.prefix == "app.web01"
        with pytest.raises(ValidationError):
            ReporterConfig(address="localhost", registry=registry, prefix="my app")

    def test_rejects_unknown_fields(self, registry):
        with pytest.raises(ValidationError):
            ReporterConfig(address="localhost", registry=registry, interval=5)


class TestConfigFromEnv:
    """Test environment-based configuration."""

    def test_from_env(self, registry, monkeypatch):
        monkeypatch.setenv("GRAPHITE_ADDRESS", "carbon:2004")
        monkeypatch.setenv("GRAPHITE_PREFIX", "svc")
        monkeypatch.setenv("GRAPHITE_FLUSH_INTERVAL", "10")
        monkeypatch.setenv("GRAPHITE_DURATION_UNIT", "ms")
        monkeypatch.setenv("GRAPHITE_PERCENTILES", "0.5, 0.99")
        monkeypatch.setenv("GRAPHITE_TIMEOUT", "2.5")

        config = ReporterConfig.from_env(registry)
        assert str(config.address) == "carbon:2004"
        assert config.prefix == "svc"
        assert config.flush_interval == 10.0
        assert config.duration_unit is DurationUnit.MILLISECOND
        assert config.percentiles == (0.5, 0.99)
        assert config.connect_timeout == config.write_timeout == 2.5

    def test_overrides_win(self, registry, monkeypatch):
        monkeypatch.setenv("GRAPHITE_ADDRESS", "carbon:2004")
        config = ReporterConfig.from_env(registry, address="other:2005", prefix="x")
        assert str(config.address) == "other:2005"
        assert config.prefix == "x"

    def test_missing_address(self, registry, monkeypatch):
        monkeypatch.delenv("GRAPHITE_ADDRESS", raising=False)
        with pytest.raises(ValueError, match="GRAPHITE_ADDRESS"):
            ReporterConfig.from_env(registry)
