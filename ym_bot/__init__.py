"""
ym-bot: search Yandex Music and fetch playable tracks.
"""

__version__ = "0.1.0"
