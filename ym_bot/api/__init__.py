"""
Yandex Music API Layer.

This package handles all communication with the Yandex Music HTTP API.
"""

from .client import API_BASE, YandexMusicClient
from .resolver import resolve_indirection, select_candidate

__all__ = ["API_BASE", "YandexMusicClient", "resolve_indirection", "select_candidate"]
