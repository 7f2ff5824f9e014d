"""
GO Similarity Configuration Module
==================================

Usage:
    from gosim.config import get_settings
    settings = get_settings()
    settings.load_from_yaml("configs/gosim.yaml")
"""

from gosim.config.settings import (
    DEFAULT_OBO_URL,
    DEFAULT_OBO_PATH,
    GoSimSettings,
    get_settings,
    reset_settings,
)


__all__ = [
    "DEFAULT_OBO_URL",
    "DEFAULT_OBO_PATH",
    "GoSimSettings",
    "get_settings",
    "reset_settings",
]
