"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ym_bot.models.track import Track
from ym_bot.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ValidationError": [
            "• Check the query or track id you passed.",
        ],
        "NotFoundError": [
            "• The track id may be wrong; find it with `ym-bot search`.",
            "• The track may be unavailable in your region.",
        ],
        "ProtocolError": [
            "• A 401/403 status usually means a missing or expired token.",
            "• Run `ym-bot init <TOKEN> --force` to store a new token.",
        ],
        "TransportError": [
            "• A network connection issue occurred.",
            "• Check your internet connection and try again.",
        ],
        "ResolutionError": [
            "• Yandex Music returned a download-info format that is not supported.",
            "• Run the command with -vv for detailed logs.",
        ],
        "ConfigurationError": [
            "• Check the configuration file and the YANDEX_TOKEN / LOG_LEVEL"
            " environment variables.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_tracks_table(tracks: Sequence[Track], offset: int = 0) -> None:
    """Displays search results."""
    console = Console()
    if not tracks:
        console.print("[yellow]No tracks found.[/yellow]")
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Artist")
    table.add_column("Title", style="bold")
    table.add_column("Album", style="dim")
    table.add_column("Time", justify="right")

    for i, track in enumerate(tracks, start=offset + 1):
        table.add_row(
            str(i),
            track.id,
            track.artists_string,
            track.title,
            track.album_title,
            format_duration(track.duration_seconds),
        )
    console.print(table)


def print_track_panel(
    track: Track, url: str | None = None, path: Path | None = None
) -> None:
    """Displays a single track with its stream URL or saved file."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column(overflow="fold")

    table.add_row("Artist:", track.artists_string or "-")
    table.add_row("Title:", track.title)
    table.add_row("Album:", track.album_title or "-")
    table.add_row("Duration:", format_duration(track.duration_seconds))
    if track.cover_url:
        table.add_row("Cover:", track.cover_url)
    if url:
        table.add_row("URL:", url)
    if path:
        table.add_row("File:", str(path))
        if path.exists():
            table.add_row("Size:", format_size(path.stat().st_size))

    console.print(Panel(table, title=f"Track {track.id}", border_style="green"))
