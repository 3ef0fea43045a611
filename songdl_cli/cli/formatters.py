"""
Functions for formatting and displaying data in the console using Rich.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from songdl_cli.models.config import ClientConfig
from songdl_cli.models.stats import SessionStats
from songdl_cli.utils.formatting import format_duration


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values passed with --library, --audio-format and --marker.",
            "• Environment variables (SONGDL_*) are used when options are omitted.",
            "• Run `songdl show-config` to see the effective settings.",
        ],
        "DownloaderLaunchError": [
            "• Install yt-dlp (`pip install yt-dlp`) or pass --downloader.",
            "• Run `songdl diagnose` to check your setup.",
        ],
        "LibraryError": [
            "• Make sure the library directory exists and is readable.",
            "• Point --library at another directory.",
        ],
        "SongdlError": [
            "• Run songdl from an interactive terminal.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config: ClientConfig, console: Console | None = None):
    """Displays the effective configuration."""
    console = console or Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for key, value in config.as_display_dict().items():
        table.add_row(f"{key}:", Text(value))

    console.print(
        Panel(
            table,
            title="[bold green]✓ Effective Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: SessionStats, console: Console | None = None):
    """Displays the final summary of the interactive session."""
    console = console or Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{stats.downloads_succeeded}[/bold green]"
    )
    if stats.downloads_failed > 0:
        stats_table.add_row(
            "✗ Failed:", f"[bold red]{stats.downloads_failed}[/bold red]"
        )
    if stats.cancellations > 0:
        stats_table.add_row("○ Cancelled:", f"[yellow]{stats.cancellations}[/yellow]")

    stats_table.add_row("", "")  # Spacer

    stats_table.add_row("Files Moved:", f"[cyan]{stats.files_placed}[/cyan]")
    stats_table.add_row("Files Kept:", f"[cyan]{stats.files_kept}[/cyan]")
    if stats.folders_created > 0:
        stats_table.add_row(
            "Folders Created:", f"[magenta]{stats.folders_created}[/magenta]"
        )
    if stats.placement_errors > 0:
        stats_table.add_row(
            "⚠ Move Errors:", f"[yellow]{stats.placement_errors}[/yellow]"
        )

    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(stats.elapsed)}[/blue]"
    )

    console.print()
    console.print(
        Panel(
            stats_table,
            title="🎵 [bold]Session Summary[/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
