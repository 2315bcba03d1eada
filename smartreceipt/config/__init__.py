"""Configuration package."""

from smartreceipt.config.settings import (
    AppSettings,
    GeminiSettings,
    Settings,
    StorageSettings,
    WEEKDAY_NAMES,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "Settings",
    "StorageSettings",
    "WEEKDAY_NAMES",
    "get_settings",
    "validate_all_settings",
]
