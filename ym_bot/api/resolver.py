"""
Turns a download-info listing into one fetchable audio URL.

Resolution happens in two phases. First a candidate encoding is picked from the
listing (mp3 preferred). Then the candidate's indirection URL is fetched once
and its response is handed to an ordered list of attempts, each of which either
extracts the final URL or passes.
"""

import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ym_bot.exceptions import NotFoundError, ResolutionError
from ym_bot.models.track import DownloadCandidate

log = logging.getLogger(__name__)

PREFERRED_CODEC = "mp3"
XML_FIELDS = ("host", "path", "ts", "s")


@dataclass(frozen=True)
class IndirectionResponse:
    """The parts of an indirection response the attempts look at."""

    body: bytes
    location: str = ""
    final_url: str = ""


def select_candidate(candidates: Sequence[DownloadCandidate]) -> DownloadCandidate:
    """
    Picks the first mp3 candidate (case-insensitive), else the first listed one.

    Raises:
        NotFoundError: If the listing is empty.
    """
    if not candidates:
        raise NotFoundError("download url not found")
    for candidate in candidates:
        if candidate.codec.lower() == PREFERRED_CODEC:
            return candidate
    return candidates[0]


def url_from_json(response: IndirectionResponse, track_id: str) -> Optional[str]:
    """``{"src": "..."}`` payload."""
    if not response.body:
        return None
    try:
        payload = json.loads(response.body)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    src = payload.get("src")
    if isinstance(src, str) and src:
        return src
    return None


def url_from_xml(response: IndirectionResponse, track_id: str) -> Optional[str]:
    """
    ``<download-info>`` payload with host/path/ts/s children.

    The signed URL layout is fixed by the storage hosts; ``ts`` and ``s`` are
    opaque and copied verbatim.
    """
    if not response.body:
        return None
    try:
        root = ET.fromstring(response.body)
    except ET.ParseError:
        return None

    host, path, ts, s = (root.findtext(name) or "" for name in XML_FIELDS)
    if not (host and path and ts and s):
        return None

    url = f"https://{host}/get-mp3/{s}/{ts}{path}"
    if track_id:
        url += f"?track-id={track_id}"
    return url


def url_from_redirect(response: IndirectionResponse, track_id: str) -> Optional[str]:
    """Location header, else the URL the request ended up at."""
    return response.location or response.final_url or None


ResolutionAttempt = Callable[[IndirectionResponse, str], Optional[str]]

RESOLUTION_ATTEMPTS: tuple[ResolutionAttempt, ...] = (
    url_from_json,
    url_from_xml,
    url_from_redirect,
)


def resolve_indirection(
    response: IndirectionResponse,
    track_id: str,
    attempts: Sequence[ResolutionAttempt] = RESOLUTION_ATTEMPTS,
) -> str:
    """
    Runs the attempts in order over the same buffered response; first hit wins.

    Raises:
        ResolutionError: If no attempt yields a URL.
    """
    for attempt in attempts:
        url = attempt(response, track_id)
        if url:
            log.debug(f"Resolved download url for track {track_id} via {attempt.__name__}")
            return url
    raise ResolutionError(f"cannot resolve download url for track {track_id!r}")
