"""
Runs the external downloader for one query and streams its output into the
session transcript.
"""

import asyncio
import logging
import shlex
import shutil
from pathlib import Path

from songdl_cli.exceptions import DownloaderLaunchError, LibraryError

from .library import build_organize_menu, list_subdirectories
from .session import SessionContext, SessionState

log = logging.getLogger(__name__)

# yt-dlp rewrites progress lines with carriage returns, which can get long
STREAM_LIMIT = 1024 * 1024
SEARCH_PREFIX = "ytsearch1:"


def display_line(raw_line: str) -> str:
    """Collapses a carriage-return progress line to what a terminal would show."""
    segments = [s for s in raw_line.rstrip("\r\n").split("\r") if s]
    return segments[-1] if segments else ""


class DownloadSessionRunner:
    """
    Drives a single download session from query to the organize menu.

    `run` is meant to be scheduled as its own task. It never raises for
    launch, stream or filesystem problems: each one ends with a note in the
    output log and the state back at IDLE.
    """

    def __init__(self, context: SessionContext):
        self.context = context

    def build_command(self, query: str) -> str:
        """Substitutes the query into the configured command template."""
        config = self.context.config
        return config.command_template.format(
            downloader=shlex.quote(config.downloader),
            audio_format=shlex.quote(config.audio_format),
            output=shlex.quote(config.output_pattern),
            search=shlex.quote(f"{SEARCH_PREFIX}{query}"),
        )

    async def _launch(self, command: str) -> asyncio.subprocess.Process:
        config = self.context.config
        if "{downloader}" in config.command_template and not shutil.which(
            config.downloader
        ):
            raise DownloaderLaunchError(
                f"'{config.downloader}' was not found. Is it installed and on PATH?"
            )
        try:
            return await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                stdin=asyncio.subprocess.DEVNULL,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise DownloaderLaunchError(str(e)) from e

    async def run(self, query: str) -> SessionState:
        """Downloads `query` and returns the state the session ended in."""
        ctx = self.context
        ctx.state.set(SessionState.DOWNLOADING)
        ctx.locator.reset()
        ctx.stats.downloads_started += 1

        command = self.build_command(query)
        ctx.log(f"Running: {command}")
        ctx.events.download_started(query, command)

        try:
            process = await self._launch(command)
        except DownloaderLaunchError as e:
            ctx.log(f"Error: could not run the downloader: {e}")
            ctx.events.download_launch_failed(query, str(e))
            return self._fail()

        try:
            await self._stream(process)
            return_code = await process.wait()
        except (OSError, ValueError) as e:
            ctx.log(f"Error while reading downloader output: {e}")
            log.debug(f"Output stream for '{query}' failed", exc_info=True)
            await self._reap(process)
            return self._fail()

        artifact = ctx.artifact
        if not artifact or not Path(artifact).is_file():
            ctx.log("--- Could not determine the downloaded file. Back to start. ---")
            ctx.events.artifact_missing(query, artifact, return_code)
            return self._fail()

        ctx.stats.downloads_succeeded += 1
        ctx.events.download_finished(query, artifact, return_code)
        return self.enter_organizing()

    async def _stream(self, process: asyncio.subprocess.Process) -> None:
        ctx = self.context
        async for raw in process.stdout:
            line = raw.decode("utf-8", errors="replace")
            ctx.locator.feed(line)
            ctx.log(display_line(line))

    def enter_organizing(self) -> SessionState:
        """
        Replaces the transcript with the organize menu and switches to
        ORGANIZING. Candidates are stored before the state flag changes.
        """
        ctx = self.context
        try:
            candidates = list_subdirectories(ctx.config.library_root)
        except LibraryError as e:
            ctx.log(f"Error reading music directories: {e}")
            ctx.state.set(SessionState.IDLE)
            return SessionState.IDLE

        ctx.candidates = candidates
        ctx.output_log.replace(
            build_organize_menu(ctx.artifact, candidates, ctx.config.library_root)
        )
        ctx.state.set(SessionState.ORGANIZING)
        return SessionState.ORGANIZING

    async def _reap(self, process: asyncio.subprocess.Process) -> None:
        """Stops a downloader whose output can no longer be read."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    def _fail(self) -> SessionState:
        self.context.stats.downloads_failed += 1
        self.context.state.set(SessionState.IDLE)
        return SessionState.IDLE
