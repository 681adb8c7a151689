"""Runtime configuration."""

from .settings import (
    EmailSettings,
    Settings,
    SettingsError,
    StorageSettings,
    UpstreamSettings,
    get_settings,
    load_settings,
)

__all__ = [
    "EmailSettings",
    "Settings",
    "SettingsError",
    "StorageSettings",
    "UpstreamSettings",
    "get_settings",
    "load_settings",
]
