"""Configuration package."""

from splitledger.config.settings import (
    AppSettings,
    Settings,
    SharingSettings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "SharingSettings",
    "StorageSettings",
    "get_settings",
]
