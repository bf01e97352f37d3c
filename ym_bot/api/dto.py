"""
Wire-format models for the Yandex Music JSON API.

The API is loosely typed: ids arrive as numbers or strings, most fields may be
missing or null. These models absorb that and map to the internal entities
right after deserialization so nothing else depends on the wire shape.
"""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from ym_bot.models.track import DownloadCandidate, Track

COVER_SIZE = "200x200"
COVER_PLACEHOLDER = "%%"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _null_as_empty(v: Any) -> Any:
    """Lists sent as null decode as empty."""
    return [] if v is None else v


class ArtistDTO(_WireModel):
    name: str | None = None


class AlbumDTO(_WireModel):
    title: str | None = None


class TrackDTO(_WireModel):
    """A track object as returned by the search and tracks endpoints."""

    id: str = ""
    title: str | None = None
    duration_ms: int | None = Field(None, alias="durationMs")
    artists: list[ArtistDTO] | None = None
    albums: list[AlbumDTO] | None = None
    cover_uri: str | None = Field(None, alias="coverUri")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Numeric ids are serialized as strings; null becomes empty."""
        if v is None:
            return ""
        if isinstance(v, bool):
            raise ValueError("Track id must be a number or a string.")
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        if isinstance(v, (int, float, str)):
            return str(v)
        raise ValueError("Track id must be a number or a string.")

    def album_title(self) -> str:
        """Title of the first listed album, or an empty string."""
        if not self.albums:
            return ""
        return self.albums[0].title or ""

    def cover_url(self) -> str | None:
        if not self.cover_uri:
            return None
        return "https://" + self.cover_uri.replace(COVER_PLACEHOLDER, COVER_SIZE)

    def to_track(self) -> Track:
        """Maps the wire object to the internal Track entity."""
        artists = tuple(a.name for a in self.artists or [] if a.name)
        return Track(
            id=self.id,
            title=self.title or "",
            artists=artists,
            duration_seconds=(self.duration_ms or 0) // 1000,
            cover_url=self.cover_url(),
            album_title=self.album_title(),
        )


TrackList = Annotated[list[TrackDTO], BeforeValidator(_null_as_empty)]


class TrackMatches(_WireModel):
    results: TrackList = Field(default_factory=list)


class SearchResult(_WireModel):
    tracks: TrackMatches | None = None


class SearchResponse(_WireModel):
    """Envelope of ``GET /search``."""

    result: SearchResult = Field(default_factory=SearchResult)

    @field_validator("result", mode="before")
    @classmethod
    def null_result(cls, v: Any) -> Any:
        return {} if v is None else v

    def track_dtos(self) -> list[TrackDTO]:
        if self.result.tracks is None:
            return []
        return self.result.tracks.results


class TrackResponse(_WireModel):
    """Envelope of ``GET /tracks/{id}``."""

    result: TrackList = Field(default_factory=list)


class DownloadInfoResponse(_WireModel):
    """Envelope of ``GET /tracks/{id}/download-info``."""

    result: Annotated[
        list[DownloadCandidate], BeforeValidator(_null_as_empty)
    ] = Field(default_factory=list)
