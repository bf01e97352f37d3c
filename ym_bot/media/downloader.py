"""
Handles the low-level downloading of audio files over HTTP.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import aiofiles
import aiohttp

from ym_bot.exceptions import StorageError, TransportError, ValidationError
from ym_bot.utils.http import protocol_error
from ym_bot.utils.path import create_dir

log = logging.getLogger(__name__)

# No total limit: the caller bounds the whole retrieval. Only stalls are cut.
DOWNLOAD_TIMEOUT = aiohttp.ClientTimeout(total=None, sock_connect=15, sock_read=90)


class Downloader:
    """
    Streams a single HTTP response body into a file.

    One attempt only. A failure halfway through the body leaves whatever was
    written so far on disk; callers that care remove the destination.
    """

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        timeout: aiohttp.ClientTimeout = DOWNLOAD_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            chunk_size: Read size for the response body.
            timeout: Per-request timeout, replacing the session's own.
            logger: Logger to report to instead of the module logger.
        """
        self.chunk_size = chunk_size
        self.timeout = timeout
        self._log = logger or log

    async def download_file(
        self,
        session: aiohttp.ClientSession,
        url: str,
        destination_path: str | Path,
        headers: Optional[Mapping[str, str]] = None,
    ) -> int:
        """
        Downloads ``url`` into ``destination_path``, creating parent directories.

        Returns:
            The number of bytes written.

        Raises:
            ValidationError: If the URL is empty.
            ProtocolError: If the server does not answer 200.
            TransportError: On network failure or timeout.
            StorageError: If the destination cannot be written.
        """
        if not url:
            raise ValidationError("download url is empty")

        destination = Path(destination_path)
        bytes_written = 0
        try:
            async with session.get(
                url, headers=headers, timeout=self.timeout
            ) as response:
                if response.status != 200:
                    raise await protocol_error(response, "download")

                try:
                    await asyncio.to_thread(create_dir, destination.parent)
                    async with aiofiles.open(destination, "wb") as f:
                        async for chunk in response.content.iter_chunked(
                            self.chunk_size
                        ):
                            await f.write(chunk)
                            bytes_written += len(chunk)
                # ClientOSError and TimeoutError are OSError subclasses too.
                except (aiohttp.ClientError, asyncio.TimeoutError):
                    raise
                except OSError as e:
                    raise StorageError(
                        f"cannot write '{os.path.basename(destination)}': {e}"
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(
                f"download request failed: {str(e) or type(e).__name__}"
            ) from e

        self._log.debug(f"Downloaded {bytes_written} bytes to '{destination.name}'")
        return bytes_written
