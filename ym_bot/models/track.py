"""
Immutable catalog entities shared by the client, the service and the CLI.
"""

from pydantic import BaseModel, ConfigDict, Field


class Track(BaseModel):
    """Catalog metadata for a single track."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str = ""
    artists: tuple[str, ...] = ()
    duration_seconds: int = 0
    cover_url: str | None = None
    album_title: str = ""

    @property
    def artists_string(self) -> str:
        """Artist names joined for display, in catalog order."""
        return ", ".join(self.artists)


class DownloadCandidate(BaseModel):
    """One encoding option listed by the download-info endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    download_info_url: str = Field("", alias="downloadInfoUrl")
    codec: str = ""
    bitrate_kbps: int = Field(0, alias="bitrateInKbps")
