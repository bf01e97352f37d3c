"""
Utilities for handling download file names and directories.
"""

from pathlib import Path

from pathvalidate import sanitize_filename

from ym_bot.models.track import Track

TRACK_EXTENSION = "mp3"


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def track_filename(track: Track) -> str:
    """
    Builds ``"{artists} - {title}.mp3"`` for a track.

    Characters that are illegal in file names (path separators included) are
    stripped so the result always stays inside its directory.
    """
    name = f"{track.artists_string} - {track.title}.{TRACK_EXTENSION}"
    return sanitize_filename(name, platform="auto") or f"{track.id}.{TRACK_EXTENSION}"
