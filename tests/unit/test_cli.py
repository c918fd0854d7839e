"""Unit tests for the command line interface."""

from graphite_reporter.cli import main


class TestCli:
    """Test the command line interface."""

    def test_check_sends_heartbeat(self, line_server, capsys):
        exit_code = main(["check", line_server.address, "--prefix", "cli"])
        assert exit_code == 0
        assert line_server.wait_for_lines(1)
        assert line_server.values["cli.heartbeat.count"] == 1.0
        assert '"status": "success"' in capsys.readouterr().out

    def test_check_unreachable(self, unused_address):
        assert main(["check", unused_address]) == 1

    def test_check_without_address(self, monkeypatch, capsys):
        monkeypatch.delenv("GRAPHITE_ADDRESS", raising=False)
        assert main(["check"]) == 2
        assert "GRAPHITE_ADDRESS" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 2
        assert "usage" in capsys.readouterr().out.lower()
