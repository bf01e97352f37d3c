"""
Media Processing Layer.

This package is responsible for writing audio files to disk.
"""

from .downloader import Downloader

__all__ = ["Downloader"]
