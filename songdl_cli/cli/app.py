"""
Defines the command-line interface for the application using Typer.
Running `songdl` without a subcommand starts the interactive client.
"""

import asyncio
import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from songdl_cli import __version__
from songdl_cli.core.session import SessionContext
from songdl_cli.core.state_machine import SessionMachine
from songdl_cli.exceptions import SongdlError
from songdl_cli.models.config import (
    AUDIO_FORMATS,
    DEFAULT_LIBRARY_ROOT,
    ClientConfig,
    load_config,
)
from songdl_cli.models.stats import SessionStats
from songdl_cli.utils.formatting import pluralize
from songdl_cli.utils.structured_logger import create_structured_logger

from .formatters import print_config, print_summary_panel
from .keys import TerminalKeySource
from .screen import Screen
from .tui import WELCOME_LINES, InputRenderLoop

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("songdl_cli")

app = typer.Typer(
    name="songdl",
    help=(
        "Type a song name, let yt-dlp fetch it, then file it into your music"
        " library. Run without a command to start the interactive client."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    library: Path = typer.Option(
        DEFAULT_LIBRARY_ROOT,
        "--library",
        "-l",
        envvar="SONGDL_LIBRARY",
        help="Music library root. Its subfolders are offered as destinations.",
    ),
    downloader: str | None = typer.Option(
        None,
        "--downloader",
        envvar="SONGDL_DOWNLOADER",
        help="Downloader executable (default: yt-dlp).",
    ),
    audio_format: str | None = typer.Option(
        None,
        "--audio-format",
        "-f",
        envvar="SONGDL_AUDIO_FORMAT",
        help=f"Audio format to extract: {', '.join(AUDIO_FORMATS)}.",
    ),
    marker: str | None = typer.Option(
        None,
        "--marker",
        envvar="SONGDL_MARKER",
        help="Text the downloader prints before the final file path.",
    ),
    command_template: str | None = typer.Option(
        None,
        "--command-template",
        envvar="SONGDL_COMMAND_TEMPLATE",
        help=(
            "Downloader command line. Placeholders: {downloader}, {audio_format},"
            " {output}, {search}."
        ),
    ),
    poll_interval: float | None = typer.Option(
        None,
        "--poll-interval",
        help="Seconds to wait for a key before redrawing (default 0.1).",
    ),
    log_dir: Path | None = typer.Option(
        None,
        "--log-dir",
        envvar="SONGDL_LOG_DIR",
        help="Write JSON Lines session logs into this directory.",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
):
    """songdl: interactive song downloader and organizer"""
    if version:
        console.print(f"[bold]songdl-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        log_level = "INFO"
    logging.getLogger("songdl_cli").setLevel(log_level)

    ctx.obj = {
        "library_root": library,
        "downloader": downloader,
        "audio_format": audio_format,
        "completion_marker": marker,
        "command_template": command_template,
        "poll_interval": poll_interval,
        "log_dir": log_dir,
    }

    if ctx.invoked_subcommand is None:
        config = load_config(ctx.obj)
        stats = asyncio.run(run_interactive(config))
        if stats.has_activity:
            print_summary_panel(stats, console)


@contextmanager
def console_logging_paused():
    """Detaches the rich console handlers while the full-screen UI is up."""
    root = logging.getLogger()
    paused = [h for h in root.handlers if isinstance(h, RichHandler)]
    for handler in paused:
        root.removeHandler(handler)
    try:
        yield
    finally:
        for handler in paused:
            root.addHandler(handler)


async def run_interactive(config: ClientConfig) -> SessionStats:
    """Runs the interactive client until the user quits from the idle state."""
    base_logger, events = create_structured_logger(
        config.log_dir, enable_json=config.log_dir is not None, enable_console=False
    )
    base_logger.set_session_context(library_root=str(config.library_root))
    context = SessionContext(config=config, events=events)
    context.output_log.extend(WELCOME_LINES)
    machine = SessionMachine(context)

    try:
        with console_logging_paused(), TerminalKeySource() as keys:
            with Screen(console, context) as screen:
                await InputRenderLoop(machine, keys, screen, config.poll_interval).run()
    finally:
        base_logger.close()
    return context.stats


@app.command(name="show-config")
def show_config(ctx: typer.Context):
    """Display the effective configuration."""
    print_config(load_config(ctx.obj), console)


@app.command()
def diagnose(ctx: typer.Context):
    """Diagnose common setup issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False
    options: dict[str, Any] = ctx.obj

    try:
        config = load_config(options)
        console.print("[green]✓[/] Configuration is valid.")
    except SongdlError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e

    try:
        folders = [p for p in config.library_root.iterdir() if p.is_dir()]
        console.print(
            f"[green]✓[/] Library root [dim]{config.library_root}[/dim] is readable"
            f" ({pluralize(len(folders), 'folder')})."
        )
    except OSError as e:
        console.print(f"[red]✗ Cannot read the library root: {e}[/red]")
        issues_found = True

    if "{downloader}" in config.command_template:
        if resolved := shutil.which(config.downloader):
            console.print(f"[green]✓[/] Downloader found at: [dim]{resolved}[/dim]")
        else:
            console.print(
                f"[red]✗ '{config.downloader}' was not found on PATH.[/red]"
                " Install it or pass [cyan]--downloader[/cyan]."
            )
            issues_found = True
    else:
        console.print(
            "[yellow]⚠️  The command template does not use {downloader};"
            " skipping the PATH check.[/yellow]"
        )

    if shutil.which("ffmpeg") is None:
        console.print(
            "[yellow]⚠️  ffmpeg was not found. yt-dlp needs it to extract audio."
            "[/yellow]"
        )

    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
