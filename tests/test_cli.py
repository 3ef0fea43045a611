"""Tests for the command-line surface"""

import logging
import sys

from rich.logging import RichHandler
from typer.testing import CliRunner

import songdl_cli.cli.app as app_module
from conftest import RecordingScreen, ScriptedKeys, type_line
from songdl_cli import __version__
from songdl_cli.cli.app import app

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_show_config(library):
    result = runner.invoke(app, ["--library", str(library), "show-config"])
    assert result.exit_code == 0
    assert "yt-dlp" in result.stdout
    assert "mp3" in result.stdout


def test_show_config_reads_environment(library):
    result = runner.invoke(
        app,
        ["show-config"],
        env={"SONGDL_LIBRARY": str(library), "SONGDL_AUDIO_FORMAT": "flac"},
    )
    assert result.exit_code == 0
    assert "flac" in result.stdout


def test_invalid_library_is_a_configuration_error(tmp_path):
    result = runner.invoke(app, ["--library", str(tmp_path / "nope"), "show-config"])
    assert result.exit_code != 0
    assert type(result.exception).__name__ == "ConfigurationError"


def test_diagnose_passes_with_available_downloader(library):
    result = runner.invoke(
        app, ["--library", str(library), "--downloader", sys.executable, "diagnose"]
    )
    assert result.exit_code == 0
    assert "Downloader found" in result.stdout


def test_diagnose_reports_missing_downloader(library):
    result = runner.invoke(
        app,
        ["--library", str(library), "--downloader", "no-such-tool-xyz", "diagnose"],
    )
    assert result.exit_code == 1
    assert "was not found on PATH" in result.stdout


class SessionKeys(ScriptedKeys):
    """Scripted keys that also note the root log handlers on every read"""

    def __init__(self, events):
        super().__init__(events)
        self.handlers_seen = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    async def next_key(self, timeout):
        self.handlers_seen.append(list(logging.getLogger().handlers))
        return await super().next_key(timeout)


class SessionScreen(RecordingScreen):
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


async def test_interactive_session_keeps_console_logging_off_screen(
    config, monkeypatch
):
    keys = SessionKeys(type_line("q"))
    monkeypatch.setattr(app_module, "TerminalKeySource", lambda: keys)
    monkeypatch.setattr(app_module, "Screen", lambda console, context: SessionScreen())
    handler = RichHandler(console=app_module.console)
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        stats = await app_module.run_interactive(config)
        assert handler in root.handlers
    finally:
        root.removeHandler(handler)

    assert keys.handlers_seen
    assert all(handler not in seen for seen in keys.handlers_seen)
    assert not stats.has_activity


async def test_interactive_session_events_skip_the_console(config, monkeypatch):
    calls = []
    original = app_module.create_structured_logger

    def recording_factory(*args, **kwargs):
        calls.append(kwargs)
        return original(*args, **kwargs)

    monkeypatch.setattr(app_module, "create_structured_logger", recording_factory)
    monkeypatch.setattr(
        app_module, "TerminalKeySource", lambda: SessionKeys(type_line("q"))
    )
    monkeypatch.setattr(app_module, "Screen", lambda console, context: SessionScreen())

    await app_module.run_interactive(config)

    assert calls == [{"enable_json": False, "enable_console": False}]
