"""
Small helpers shared by the API client and the file downloader.
"""

import aiohttp

from ym_bot.exceptions import ProtocolError

ERROR_BODY_LIMIT = 4 * 1024


async def read_limited(response: aiohttp.ClientResponse, limit: int) -> bytes:
    """Reads at most ``limit`` bytes of the response body."""
    chunks = []
    remaining = limit
    while remaining > 0:
        chunk = await response.content.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


async def protocol_error(
    response: aiohttp.ClientResponse, operation: str
) -> ProtocolError:
    """Builds a ProtocolError carrying the status and a body excerpt."""
    body = (await read_limited(response, ERROR_BODY_LIMIT)).decode(
        "utf-8", errors="replace"
    )
    return ProtocolError(
        f"{operation} failed: status={response.status} body={body}",
        status=response.status,
        body=body,
    )
