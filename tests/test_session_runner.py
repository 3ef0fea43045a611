"""Tests for the download session runner, using a scripted fake downloader"""

import asyncio
import shlex

import pytest

from songdl_cli.core.session import SessionContext, SessionState
from songdl_cli.core.session_runner import DownloadSessionRunner, display_line
from songdl_cli.models.config import ClientConfig


@pytest.fixture
def fake_context(fake_downloader_config):
    return SessionContext(config=fake_downloader_config)


def test_display_line_collapses_progress():
    assert display_line("[download]  50%\r[download] 100%\n") == "[download] 100%"
    assert display_line("plain line\n") == "plain line"
    assert display_line("\n") == ""


class TestBuildCommand:
    def test_default_template(self, context, library):
        command = DownloadSessionRunner(context).build_command("test song")
        expected_output = shlex.quote(str(library / "%(title)s.%(ext)s"))
        assert command == (
            f"yt-dlp -x --audio-format mp3 -o {expected_output} 'ytsearch1:test song'"
        )

    def test_query_is_shell_quoted(self, context):
        command = DownloadSessionRunner(context).build_command("a'; rm -rf ~; '")
        assert shlex.split(command)[-1] == "ytsearch1:a'; rm -rf ~; '"


class TestRun:
    async def test_end_to_end_reaches_organizing(self, fake_context, library):
        state = await DownloadSessionRunner(fake_context).run("test song")

        assert state is SessionState.ORGANIZING
        assert fake_context.state.get() is SessionState.ORGANIZING
        assert fake_context.artifact == str(library / "test song.mp3")
        assert fake_context.candidates == ["Jazz", "Rock"]
        assert fake_context.output_log.snapshot() == [
            "--- Download finished ---",
            "File: test song.mp3",
            "Where do you want to move the file?",
            "1. Jazz",
            "2. Rock",
            "-----------------------------",
            "N. Create new folder",
            f"Q. Leave in {library}",
            "Enter an option and press Enter:",
        ]
        assert fake_context.stats.downloads_succeeded == 1

    async def test_transcript_is_streamed_before_menu(
        self, fake_context, monkeypatch
    ):
        seen = []
        original_replace = fake_context.output_log.replace

        def capture(lines):
            seen.extend(fake_context.output_log.snapshot())
            original_replace(lines)

        monkeypatch.setattr(fake_context.output_log, "replace", capture)
        await DownloadSessionRunner(fake_context).run("test song")

        assert seen[0].startswith("Running: ")
        assert "[download] 100.0% of 3.00MiB" in seen
        # stderr is merged into the same stream
        assert any(line.startswith("Deleting original file") for line in seen)

    async def test_missing_marker_returns_to_idle(self, fake_context):
        state = await DownloadSessionRunner(fake_context).run("no marker")

        assert state is SessionState.IDLE
        assert fake_context.artifact is None
        assert fake_context.output_log.snapshot()[-1] == (
            "--- Could not determine the downloaded file. Back to start. ---"
        )
        assert fake_context.stats.downloads_failed == 1

    async def test_marker_for_missing_file_returns_to_idle(self, fake_context):
        state = await DownloadSessionRunner(fake_context).run("no file")

        assert state is SessionState.IDLE
        assert fake_context.artifact is not None
        assert fake_context.candidates == []

    async def test_previous_artifact_is_cleared(self, fake_context, library):
        fake_context.locator.current = str(library / "old.mp3")
        await DownloadSessionRunner(fake_context).run("no marker")
        assert fake_context.artifact is None

    async def test_overlong_line_stops_the_downloader(self, fake_context):
        # The fake downloader sleeps for a minute after the oversized line.
        state = await asyncio.wait_for(
            DownloadSessionRunner(fake_context).run("long line"), timeout=30
        )

        assert state is SessionState.IDLE
        assert fake_context.output_log.snapshot()[-1].startswith(
            "Error while reading downloader output:"
        )
        assert fake_context.stats.downloads_failed == 1

    async def test_launch_failure_is_reported(self, library):
        config = ClientConfig(
            library_root=library, downloader="definitely-not-a-downloader-xyz"
        )
        context = SessionContext(config=config)

        state = await DownloadSessionRunner(context).run("test song")

        assert state is SessionState.IDLE
        assert context.output_log.snapshot()[-1].startswith(
            "Error: could not run the downloader:"
        )
        assert context.stats.downloads_failed == 1

    def test_unreadable_library_returns_to_idle(self, context, artifact):
        runner = DownloadSessionRunner(context)
        context.config.library_root.chmod(0o000)
        try:
            state = runner.enter_organizing()
        finally:
            context.config.library_root.chmod(0o755)

        if state is SessionState.ORGANIZING:
            pytest.skip("running with permissions that ignore directory modes")
        assert context.output_log.snapshot()[-1].startswith(
            "Error reading music directories:"
        )
        assert context.state.get() is SessionState.IDLE
