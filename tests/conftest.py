"""
Shared fixtures: a fake Yandex Music catalog served over real HTTP.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from ym_bot.api.client import YandexMusicClient

AUDIO_BYTES = b"ID3" + b"\x00" * 4096

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def track_payload(track_id: Any = 42, **overrides: Any) -> dict[str, Any]:
    """A track object shaped like the API's."""
    payload = {
        "id": track_id,
        "title": "Song",
        "durationMs": 185000,
        "artists": [{"name": "Artist A"}, {"name": "Artist B"}],
        "albums": [{"title": "Album"}, {"title": "Other"}],
        "coverUri": "avatars.yandex.net/get-music-content/abc/%%",
        "realId": str(track_id),
    }
    payload.update(overrides)
    return payload


@dataclass
class FakeCatalog:
    """Route table and request log of the fake API server."""

    routes: dict[str, Handler] = field(default_factory=dict)
    requests: list[web.Request] = field(default_factory=list)
    base_url: str = ""

    def json(self, path: str, payload: Any, status: int = 200) -> None:
        async def handler(request: web.Request) -> web.StreamResponse:
            return web.json_response(payload, status=status)

        self.routes[path] = handler

    def body(
        self,
        path: str,
        body: bytes | str,
        status: int = 200,
        content_type: str = "text/plain",
        headers: dict[str, str] | None = None,
    ) -> None:
        async def handler(request: web.Request) -> web.StreamResponse:
            data = body.encode() if isinstance(body, str) else body
            return web.Response(
                body=data, status=status, content_type=content_type, headers=headers
            )

        self.routes[path] = handler

    def handler(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    def url(self, path: str) -> str:
        return self.base_url + path

    def paths(self) -> list[str]:
        return [r.path for r in self.requests]

    def serve_track(
        self, track_id: str = "42", info_body: str | None = None, **track_fields: Any
    ) -> None:
        """Wires metadata, download-info, JSON indirection and audio for one id."""
        self.json(f"/tracks/{track_id}", {"result": [track_payload(track_id, **track_fields)]})
        self.json(
            f"/tracks/{track_id}/download-info",
            {
                "result": [
                    {
                        "codec": "mp3",
                        "bitrateInKbps": 320,
                        "downloadInfoUrl": self.url(f"/info/{track_id}"),
                    }
                ]
            },
        )
        self.body(
            f"/info/{track_id}",
            info_body or json.dumps({"src": self.url(f"/audio/{track_id}.mp3")}),
            content_type="application/json",
        )
        self.body(f"/audio/{track_id}.mp3", AUDIO_BYTES, content_type="audio/mpeg")


@pytest_asyncio.fixture
async def catalog():
    """Starts the fake API and yields its route table."""
    fake = FakeCatalog()

    async def dispatch(request: web.Request) -> web.StreamResponse:
        fake.requests.append(request)
        handler = fake.routes.get(request.path)
        if handler is None:
            raise web.HTTPNotFound(text=f"no route for {request.path}")
        return await handler(request)

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", dispatch)
    server = TestServer(app)
    await server.start_server()
    fake.base_url = str(server.make_url("/")).rstrip("/")
    try:
        yield fake
    finally:
        await server.close()


@pytest_asyncio.fixture
async def client(catalog):
    """A client pointed at the fake API."""
    async with YandexMusicClient(token="secret", base_url=catalog.base_url) as c:
        yield c


@pytest.fixture
def leftover_dirs(tmp_path):
    """Lists temporary download directories still present under tmp_path."""

    def _list() -> list:
        return sorted(p for p in tmp_path.iterdir() if p.is_dir())

    return _list
