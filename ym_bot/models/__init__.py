"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as tracks and configuration.
"""

from .config import BotConfig
from .track import DownloadCandidate, Track

__all__ = ["BotConfig", "DownloadCandidate", "Track"]
