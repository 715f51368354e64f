"""Configuration for RUNFORGE."""

from runforge.config.settings import (
    AISettings,
    DisplaySettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "AISettings",
    "DisplaySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
