"""Configuration management for fast_insert.

Usage:
    >>> from fast_insert.config import get_settings
    >>> settings = get_settings()
    >>> settings.batch_size
"""

from fast_insert.config.settings import MySQLSettings, Settings, get_settings

__all__ = [
    "MySQLSettings",
    "Settings",
    "get_settings",
]
