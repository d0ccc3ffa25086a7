"""Configuration package."""

from src.config.settings import (
    AppSettings,
    AuthSettings,
    GoogleSheetsSettings,
    MongoSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "GoogleSheetsSettings",
    "MongoSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
