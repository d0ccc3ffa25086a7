"""
Configuration Management for Milkman Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The two historical default rates (150 on the server, 60 in the UI) are kept
as two separate values so the choice stays an explicit configuration decision.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Shared operator credentials checked by the auth gate."""

    model_config = SettingsConfigDict(
        env_prefix="ADMIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    username: str = Field(
        default="",
        description="Operator username"
    )
    password: str = Field(
        default="",
        description="Operator password"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.username) and bool(self.password)


class MongoSettings(BaseSettings):
    """MongoDB document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    uri: str = Field(
        ...,
        description="MongoDB connection string"
    )
    database: str = Field(
        default="milkman",
        description="Database holding the ledger collections"
    )
    settings_collection: str = Field(
        default="settings",
        description="Collection for the singleton settings document"
    )
    overrides_collection: str = Field(
        default="overrides",
        description="Collection for per-date overrides"
    )
    server_selection_timeout_ms: int = Field(
        default=5000,
        ge=100,
        description="How long to wait for a reachable server"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    settings_sheet_name: str = Field(
        default="Settings",
        description="Name of the sheet for the settings row"
    )
    overrides_sheet_name: str = Field(
        default="Overrides",
        description="Name of the sheet for daily overrides"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    storage_backend: Literal["mongodb", "google_sheets", "memory"] = Field(
        default="mongodb",
        description="Which document store backs settings and overrides"
    )

    # Defaults used when no settings document exists
    server_default_rate: float = Field(
        default=150.0,
        ge=0,
        description="Rate (Rs/liter) the API answers when nothing is persisted"
    )
    client_default_rate: float = Field(
        default=60.0,
        ge=0,
        description="Rate (Rs/liter) the UI falls back to when settings can't be loaded"
    )
    default_category1: float = Field(
        default=2.0,
        ge=0,
        description="Fallback daily liters for category 1"
    )
    default_category2: float = Field(
        default=2.5,
        ge=0,
        description="Fallback daily liters for category 2"
    )

    # UI behaviour
    autosave_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Quiet period before edited settings are saved"
    )
    session_ttl_hours: float = Field(
        default=12.0,
        gt=0,
        description="How long a UI login stays valid"
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Where the UI finds the HTTP API"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for UI calls to the API"
    )

    # CORS
    cors_allow_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed origins"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def mongodb(self) -> MongoSettings:
        return MongoSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        results["auth"] = settings.auth.is_configured
        if not results["auth"]:
            results["auth_error"] = "ADMIN_USERNAME and ADMIN_PASSWORD must both be set"
    except Exception as e:
        results["auth"] = False
        results["auth_error"] = str(e)

    try:
        _ = settings.mongodb
        results["mongodb"] = True
    except Exception as e:
        results["mongodb"] = False
        results["mongodb_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
