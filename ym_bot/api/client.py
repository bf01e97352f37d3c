"""
Async client for the Yandex Music HTTP API.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import aiohttp
import pydantic

from ym_bot.exceptions import DecodeError, NotFoundError, TransportError, ValidationError
from ym_bot.media.downloader import Downloader
from ym_bot.models.track import Track
from ym_bot.utils.http import protocol_error, read_limited

from .dto import DownloadInfoResponse, SearchResponse, TrackResponse
from .resolver import IndirectionResponse, resolve_indirection, select_candidate

log = logging.getLogger(__name__)

ResponseModel = TypeVar("ResponseModel", bound=pydantic.BaseModel)

API_BASE = "https://api.music.yandex.net"
USER_AGENT = "ym-bot/0.1 (+github.com/ndrewnee/go-yandex-music compatible)"
DEFAULT_SEARCH_LIMIT = 10
INDIRECTION_BODY_LIMIT = 8 * 1024


class YandexMusicClient:
    """
    Async client for the Yandex Music JSON API.

    Every call is a single attempt: failures surface immediately as one of the
    ``ym_bot.exceptions`` classes. The client keeps no per-request state, so
    one instance can serve many concurrent tasks.
    """

    def __init__(
        self,
        token: str = "",
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = API_BASE,
        timeout: float = 20.0,
        downloader: Optional[Downloader] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initializes the API client.

        Args:
            token: OAuth token; requests are anonymous when empty.
            session: An externally owned session. When omitted the client
                creates one lazily and closes it in ``close()``.
            base_url: API root, overridable for tests.
            timeout: Total timeout of a single request in seconds.
            downloader: File retriever used by ``download_to_file``.
            logger: Logger to report to instead of the module logger.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._downloader = downloader or Downloader(logger=logger)
        self._log = logger or log

    async def __aenter__(self) -> "YandexMusicClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or (self._owns_session and self._session.closed):
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"OAuth {self.token}"
        return headers

    async def _get_model(
        self,
        url: str,
        model: Type[ResponseModel],
        operation: str,
        params: Optional[Dict[str, str]] = None,
    ) -> ResponseModel:
        """GETs a JSON endpoint and validates it into ``model``."""
        session = await self._get_session()
        try:
            async with session.get(url, params=params, headers=self._headers()) as r:
                if r.status != 200:
                    raise await protocol_error(r, operation)
                body = await r.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{operation} request failed: {e}") from e

        try:
            return model.model_validate_json(body)
        except pydantic.ValidationError as e:
            raise DecodeError(f"decode {operation} response: {e}") from e

    async def search_tracks(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT, offset: int = 0
    ) -> list[Track]:
        """
        Searches the catalog for tracks.

        The API paginates by page, so ``offset`` is turned into
        ``page = offset // limit``. Offsets that are not a multiple of
        ``limit`` therefore start at the beginning of their page.
        """
        if not query or not query.strip():
            raise ValidationError("query is empty")
        if limit <= 0:
            limit = DEFAULT_SEARCH_LIMIT
        if offset < 0:
            offset = 0

        params = {
            "text": query,
            "type": "track",
            "page": str(offset // limit),
            "nococrrect": "true",
        }
        payload = await self._get_model(
            f"{self.base_url}/search", SearchResponse, "search", params=params
        )

        tracks = []
        for dto in payload.track_dtos():
            if len(tracks) >= limit:
                break
            if not dto.id:
                self._log.debug(f"Skipping search result without id: {dto.title!r}")
                continue
            tracks.append(dto.to_track())

        self._log.debug(
            f"Search {query!r} page={params['page']} returned {len(tracks)} tracks"
        )
        return tracks

    async def get_track(self, track_id: str) -> Track:
        """Fetches metadata for a single track."""
        if not track_id:
            raise ValidationError("track id is empty")

        payload = await self._get_model(
            f"{self.base_url}/tracks/{track_id}", TrackResponse, "get track"
        )
        if not payload.result or not payload.result[0].id:
            raise NotFoundError(f"track {track_id!r} not found")
        return payload.result[0].to_track()

    async def get_download_url(self, track_id: str) -> str:
        """
        Resolves a track id to a fetchable audio URL.

        Lists the available encodings, picks one and follows its
        download-info indirection.
        """
        if not track_id:
            raise ValidationError("track id is empty")

        payload = await self._get_model(
            f"{self.base_url}/tracks/{track_id}/download-info",
            DownloadInfoResponse,
            "download-info",
        )
        candidate = select_candidate(payload.result)
        if not candidate.download_info_url:
            raise NotFoundError("download url not found")

        self._log.debug(
            f"Track {track_id}: using {candidate.codec} {candidate.bitrate_kbps}kbps"
        )
        return await self._resolve_download_info_url(
            candidate.download_info_url, track_id
        )

    async def _resolve_download_info_url(self, info_url: str, track_id: str) -> str:
        """Fetches the indirection URL once and extracts the final audio URL."""
        session = await self._get_session()
        try:
            async with session.get(info_url, headers=self._headers()) as r:
                if r.status >= 400:
                    raise await protocol_error(r, "download-info resolve")
                response = IndirectionResponse(
                    body=await read_limited(r, INDIRECTION_BODY_LIMIT),
                    location=r.headers.get("Location", ""),
                    final_url=str(r.url),
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"download-info resolve request failed: {e}") from e

        return resolve_indirection(response, track_id)

    async def download_to_file(self, download_url: str, dest_path: str | Path) -> None:
        """Streams the content at ``download_url`` into ``dest_path``."""
        if not download_url:
            raise ValidationError("download url is empty")

        session = await self._get_session()
        await self._downloader.download_file(
            session, download_url, dest_path, headers=self._headers()
        )
