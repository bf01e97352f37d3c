"""
Core application engine.

The `MusicService` is the single entry point front ends talk to: it chains
the catalog client, the download-URL resolver and the file downloader.
"""

from .music_service import MusicService

__all__ = ["MusicService"]
