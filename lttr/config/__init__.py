"""Configuration package."""

from lttr.config.settings import (
    Settings,
    StorageSettings,
    TrackerSettings,
    get_settings,
)

__all__ = [
    "Settings",
    "StorageSettings",
    "TrackerSettings",
    "get_settings",
]
