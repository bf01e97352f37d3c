"""
Sequences metadata lookup, URL resolution and file retrieval into the
operations consumed by front ends.
"""

import asyncio
import logging
import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Protocol

from ym_bot.exceptions import StorageError, TransportError, YmBotError
from ym_bot.models.track import Track
from ym_bot.utils.path import track_filename

log = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60.0
TEMP_DIR_PREFIX = "ym-bot-"


class CatalogClient(Protocol):
    """The client operations the service relies on."""

    async def search_tracks(
        self, query: str, limit: int = ..., offset: int = ...
    ) -> list[Track]: ...

    async def get_track(self, track_id: str) -> Track: ...

    async def get_download_url(self, track_id: str) -> str: ...

    async def download_to_file(self, download_url: str, dest_path: str | Path) -> None: ...


class MusicService:
    """
    Orchestrates music search and download workflow.

    ``download_track`` hands a freshly created temporary directory to the
    caller, who must remove it (``cleanup_download``) once the file has been
    used. ``open_download`` does both steps as an async context manager.
    """

    def __init__(
        self,
        client: CatalogClient,
        download_timeout: float = DOWNLOAD_TIMEOUT,
        temp_root: Optional[str | Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            client: The catalog client.
            download_timeout: Ceiling in seconds for the file retrieval step.
            temp_root: Where temporary download directories are created;
                the system temp directory when omitted.
            logger: Logger to report to instead of the module logger.
        """
        self.client = client
        self.download_timeout = download_timeout
        self.temp_root = str(temp_root) if temp_root is not None else None
        self._log = logger or log

    async def search(self, query: str, limit: int = 10, offset: int = 0) -> list[Track]:
        """Proxies a query to the catalog with pagination support."""
        return await self.client.search_tracks(query, limit, offset)

    async def _resolve(self, track_id: str) -> tuple[Track, str]:
        try:
            meta = await self.client.get_track(track_id)
        except YmBotError as e:
            raise e.with_context("get track meta") from e

        try:
            download_url = await self.client.get_download_url(track_id)
        except YmBotError as e:
            raise e.with_context("get download url") from e

        return meta, download_url

    async def stream_url(self, track_id: str) -> tuple[Track, str]:
        """Returns track meta and a direct URL for remote playback or sending."""
        return await self._resolve(track_id)

    async def download_track(self, track_id: str) -> tuple[Track, Path]:
        """
        Downloads the audio file for ``track_id`` into a new temporary directory.

        Returns:
            Track meta and the local file path. The caller owns the file's
            parent directory and must remove it.
        """
        meta, download_url = await self._resolve(track_id)

        try:
            tmp_dir = Path(
                await asyncio.to_thread(
                    tempfile.mkdtemp, prefix=TEMP_DIR_PREFIX, dir=self.temp_root
                )
            )
        except OSError as e:
            raise StorageError(f"temp dir: {e}") from e

        dest = tmp_dir / track_filename(meta)
        try:
            await asyncio.wait_for(
                self.client.download_to_file(download_url, dest),
                timeout=self.download_timeout,
            )
        except asyncio.TimeoutError as e:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise TransportError(
                f"download: timed out after {self.download_timeout:g}s"
            ) from e
        except YmBotError as e:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise e.with_context("download") from e
        except BaseException:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise

        self._log.info(f"Downloaded [cyan]{meta.artists_string} - {meta.title}[/cyan]")
        return meta, dest

    @staticmethod
    def cleanup_download(path: str | Path) -> None:
        """Removes the temporary directory that owns a downloaded file."""
        shutil.rmtree(Path(path).parent, ignore_errors=True)

    @asynccontextmanager
    async def open_download(self, track_id: str) -> AsyncIterator[tuple[Track, Path]]:
        """
        Downloads a track and removes its temporary directory on exit.

        Usage:
            async with service.open_download("42") as (track, path):
                ...
        """
        meta, path = await self.download_track(track_id)
        try:
            yield meta, path
        finally:
            self.cleanup_download(path)
