"""
Unit tests for the command-line entry point.
"""

import socket

import pytest

from tinyhttpd import __version__
from tinyhttpd.__main__ import build_parser, config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TINYHTTPD_HOST", "TINYHTTPD_PORT", "TINYHTTPD_ROOT", "TINYHTTPD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestConfigFromArgs:
    """Tests for flag → ServerConfig translation."""

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))

        assert config.address == ("localhost", 6969)
        assert config.doc_root == "./srv"
        assert config.confine_to_root is False

    def test_flags(self):
        args = build_parser().parse_args([
            "-H", "0.0.0.0", "-p", "8000", "-r", "./public", "-l", "DEBUG", "--confine-to-root",
        ])
        config = config_from_args(args)

        assert config.host == "0.0.0.0"
        assert config.port == 8000
        assert config.doc_root == "./public"
        assert config.log_level == "DEBUG"
        assert config.confine_to_root is True

    def test_flags_override_env(self, monkeypatch):
        monkeypatch.setenv("TINYHTTPD_PORT", "7000")
        monkeypatch.setenv("TINYHTTPD_ROOT", "/from/env")

        config = config_from_args(build_parser().parse_args(["--port", "7001"]))

        assert config.port == 7001
        assert config.doc_root == "/from/env"


class TestMain:
    """Tests for main()."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_port(self, capsys):
        assert main(["--port", "70000"]) == 1
        assert "Invalid port" in capsys.readouterr().err

    def test_invalid_port_env(self, monkeypatch, capsys):
        monkeypatch.setenv("TINYHTTPD_PORT", "not-a-number")

        assert main([]) == 1

    def test_bind_error(self, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            assert main(["--host", "127.0.0.1", "--port", str(port)]) == 1

        assert "Failed to bind" in capsys.readouterr().err
