"""Tests for __main__.py: config errors, exit codes, logging setup."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hookchat.cli.input_reader import InputClosedError
from hookchat.config import AppConfig, WebhookConfig


def _make_config() -> AppConfig:
    return AppConfig(webhook=WebhookConfig(url="https://hooks.example.com/chat"))


class TestMain:
    def test_missing_webhook_exits_before_loop(self, capsys: pytest.CaptureFixture[str]) -> None:
        from hookchat import __main__ as entry

        with (
            patch.object(sys, "argv", ["hookchat"]),
            patch.object(entry, "load_config", side_effect=ValueError("Webhook url is required.")),
            patch.object(entry, "_run_chat") as run_chat,
            pytest.raises(SystemExit) as exc_info,
        ):
            entry.main()

        assert exc_info.value.code == 1
        run_chat.assert_not_called()
        captured = capsys.readouterr()
        assert "Configuration error: Webhook url is required." in captured.err
        assert "WEBHOOK_URL" in captured.err

    def test_exit_code_from_session(self) -> None:
        from hookchat import __main__ as entry

        with (
            patch.object(sys, "argv", ["hookchat", "--config", "/tmp/none.yaml"]),
            patch.object(entry, "load_config", return_value=_make_config()) as load,
            patch.object(entry, "_run_chat", return_value=0),
            pytest.raises(SystemExit) as exc_info,
        ):
            entry.main()

        assert exc_info.value.code == 0
        load.assert_called_once_with(Path("/tmp/none.yaml"))

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        from hookchat import __main__ as entry
        from hookchat import __version__

        with patch.object(sys, "argv", ["hookchat", "--version"]), pytest.raises(SystemExit) as exc_info:
            entry.main()
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestRunChat:
    def test_closed_input_returns_one(self) -> None:
        from hookchat import __main__ as entry

        session = MagicMock()
        session.run.side_effect = InputClosedError("Input stream closed")
        session.turns = 0
        with (
            patch("hookchat.cli.session.ChatSession", return_value=session),
            patch("hookchat.cli.input_reader.default_line_source", return_value=MagicMock()),
            patch("hookchat.cli.renderer.render_error") as render_error,
        ):
            assert entry._run_chat(_make_config()) == 1
        render_error.assert_called_once_with("Input stream closed")

    def test_exit_returns_zero(self) -> None:
        from hookchat import __main__ as entry

        session = MagicMock()
        session.run.return_value = 0
        with (
            patch("hookchat.cli.session.ChatSession", return_value=session),
            patch("hookchat.cli.input_reader.default_line_source", return_value=MagicMock()),
        ):
            assert entry._run_chat(_make_config()) == 0


class TestLogging:
    def test_unknown_level_falls_back(self, capsys: pytest.CaptureFixture[str]) -> None:
        from hookchat.__main__ import _configure_logging

        with patch("hookchat.__main__.logging.basicConfig") as basic:
            _configure_logging("chatty")
        assert basic.call_args.kwargs["level"] == logging.WARNING
        assert "Unknown log level" in capsys.readouterr().err

    def test_env_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from hookchat.__main__ import _configure_logging

        monkeypatch.setenv("HOOKCHAT_LOG_LEVEL", "debug")
        with patch("hookchat.__main__.logging.basicConfig") as basic:
            _configure_logging(None)
        assert basic.call_args.kwargs["level"] == logging.DEBUG
