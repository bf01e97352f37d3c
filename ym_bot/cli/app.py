"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from ym_bot import __version__
from ym_bot.api.client import YandexMusicClient
from ym_bot.core.music_service import MusicService
from ym_bot.exceptions import StorageError, YmBotError
from ym_bot.models.config import BotConfig
from ym_bot.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_track_panel,
    print_tracks_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("ym_bot")

app = typer.Typer(
    name="ym-bot",
    help="Search Yandex Music and fetch tracks. Use 'ym-bot <command> --help' for more info.",
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "ym-bot"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(
    ctx: typer.Context, cli_options: dict[str, Any] | None = None
) -> BotConfig:
    """Loads the configuration and applies its log level unless -v was given."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config(cli_options)
    except YmBotError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    if not (ctx.obj or {}).get("verbose"):
        log.setLevel(config.log_level)
    return config


def _run(operation, config: BotConfig, **context: Any) -> None:
    """
    Runs ``operation(service)`` on a fresh event loop and maps errors to exit codes.
    """

    async def _main():
        async with YandexMusicClient(
            token=config.token, timeout=config.request_timeout
        ) as client:
            await operation(MusicService(client))

    try:
        asyncio.run(_main())
    except YmBotError as e:
        console.print(format_error_with_suggestions(e, context or None))
        log.debug("Full traceback:", exc_info=True)
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
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
    """Yandex Music search and download CLI"""
    if version:
        console.print(f"[bold]ym-bot[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    ctx.obj = {"verbose": verbose}
    if verbose:
        log.setLevel("DEBUG" if verbose >= 2 else "INFO")

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    token: str = typer.Argument(..., help="Yandex Music OAuth token."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration without asking."
    ),
):
    """Store the Yandex Music token in the configuration file."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config({"token": token.strip()})
    except YmBotError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def search(
    ctx: typer.Context,
    query: list[str] = typer.Argument(..., help="Search text."),  # noqa: B008
    limit: int | None = typer.Option(
        None, "--limit", "-l", help="Number of results (default from config, 10)."
    ),
    offset: int = typer.Option(0, "--offset", help="Skip this many results."),
):
    """Search the catalog for tracks."""
    config = _load_config(ctx)
    text = " ".join(query)
    page_size = limit or config.search_limit

    async def _search(service: MusicService):
        tracks = await service.search(text, page_size, offset)
        print_tracks_table(tracks, offset=offset)

    _run(_search, config, query=text)


@app.command()
def stream(
    ctx: typer.Context,
    track_id: str = typer.Argument(..., help="Track id."),
):
    """Print a direct audio URL for a track."""
    config = _load_config(ctx)

    async def _stream(service: MusicService):
        track, url = await service.stream_url(track_id)
        print_track_panel(track, url=url)

    _run(_stream, config, track_id=track_id)


@app.command()
def download(
    ctx: typer.Context,
    track_id: str = typer.Argument(..., help="Track id."),
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Directory to save the file into."
    ),
):
    """Download a track as an mp3 file."""
    cli_options = {"output_dir": str(output)} if output else None
    config = _load_config(ctx, cli_options)
    output_dir = Path(config.output_dir).expanduser()

    async def _download(service: MusicService):
        async with service.open_download(track_id) as (track, tmp_path):
            final_path = output_dir / tmp_path.name
            try:
                await asyncio.to_thread(output_dir.mkdir, parents=True, exist_ok=True)
                await asyncio.to_thread(shutil.move, str(tmp_path), str(final_path))
            except OSError as e:
                raise StorageError(f"cannot save to '{output_dir}': {e}") from e
        print_track_panel(track, path=final_path)

    _run(_download, config, track_id=track_id)
