"""Tests for the availarr CLI entrypoint."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from availarr.infrastructure.config import AppConfig
from availarr.interfaces.cli import cli


class TestBuildCliOverrides:
    def test_no_flags(self) -> None:
        args = cli._parse_args([])
        assert cli.build_cli_overrides(args) == {}

    def test_log_flags(self) -> None:
        args = cli._parse_args(["--log-level", "DEBUG", "--log-format", "json"])
        assert cli.build_cli_overrides(args) == {
            "log_level": "DEBUG",
            "log_format": "json",
        }

    def test_server_flags_not_overrides(self) -> None:
        args = cli._parse_args(["--host", "127.0.0.1", "--port", "9000"])
        assert args.host == "127.0.0.1"
        assert args.port == 9000
        assert cli.build_cli_overrides(args) == {}


class TestStart:
    def test_runs_uvicorn_with_loaded_config(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("HOST", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        config = AppConfig(providers=[])

        with patch.object(cli, "load_config", return_value=config) as load:
            with patch.object(cli, "configure_logging", return_value={}) as configure:
                with patch.object(cli.uvicorn, "run") as run:
                    cli.start(["--log-level", "WARNING"])

        assert load.call_args.kwargs["cli_overrides"] == {"log_level": "WARNING"}
        assert load.call_args.kwargs["config_path"] is None
        configure.assert_called_once_with(config)
        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == cli.DEFAULT_PORT
        assert kwargs["log_config"] == {}
