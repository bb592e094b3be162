"""
Entry Point Tests.
"""
import pytest
import structlog

from input_node import main as entry
from input_node.core.exceptions import BindError


class TestParseArgs:
    """CLI parsing tests."""

    def test_short_flags(self):
        args = entry.parse_args(
            ["-a", "hall-3", "-f", "temperature", "-t", "10.0.0.5", "-p", "15234", "-o", "6000", "-i", "6001"]
        )
        settings = entry.build_settings(args)

        assert settings.area == "hall-3"
        assert settings.flow_name == "temperature"
        assert settings.target_ip == "10.0.0.5"
        assert settings.target_port == 15234
        assert settings.outbound_port_data == 6000
        assert settings.inbound_port == 6001
        assert settings.outbound_port_acks == 0
        assert settings.interval == 1000

    def test_config_file_with_cli_override(self, tmp_path):
        path = tmp_path / "node.yaml"
        path.write_text(
            "area: hall-3\nflow_name: temperature\ntarget_ip: 10.0.0.5\n"
            "target_port: 15234\noutbound_port_data: 6000\ninbound_port: 6001\n"
        )

        settings = entry.build_settings(entry.parse_args(["-c", str(path), "--interval", "250"]))

        assert settings.interval == 250
        assert settings.area == "hall-3"


class TestMain:
    """main() exit behaviour tests."""

    def test_missing_required_arguments_exit_1(self):
        with pytest.raises(SystemExit) as exc_info:
            entry.main(["-a", "hall-3"])
        assert exc_info.value.code == 1

    def test_fatal_node_error_exit_1(self, monkeypatch):
        async def failing_serve(settings):
            raise BindError("commands", ("0.0.0.0", 6001), "Address already in use")

        monkeypatch.setattr(entry, "serve", failing_serve)

        with pytest.raises(SystemExit) as exc_info:
            entry.main(
                ["-a", "hall-3", "-f", "temperature", "-t", "127.0.0.1", "-p", "15234", "-o", "0", "-i", "0"]
            )
        assert exc_info.value.code == 1

    def test_malformed_config_file_exit_1(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("area: [unclosed\n")

        with pytest.raises(SystemExit) as exc_info:
            entry.main(["-c", str(path)])
        assert exc_info.value.code == 1

    def test_log_context_cleared_after_abort(self, monkeypatch):
        async def failing_serve(settings):
            assert structlog.contextvars.get_contextvars()["area"] == "hall-3"
            raise BindError("commands", ("0.0.0.0", 6001), "Address already in use")

        monkeypatch.setattr(entry, "serve", failing_serve)

        with pytest.raises(SystemExit):
            entry.main(
                ["-a", "hall-3", "-f", "temperature", "-t", "127.0.0.1", "-p", "15234", "-o", "0", "-i", "0"]
            )
        assert structlog.contextvars.get_contextvars() == {}
