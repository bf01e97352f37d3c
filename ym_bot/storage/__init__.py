"""
Storage Layer.

This package handles the configuration file on disk.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
