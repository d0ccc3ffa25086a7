"""Services package."""

from src.services.auth import AuthSession, verify_credentials
from src.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsOverrideStorage,
    GoogleSheetsSettingsStorage,
    InMemoryOverrideStorage,
    InMemorySettingsStorage,
    MongoLedgerClient,
    MongoOverrideStorage,
    MongoSettingsStorage,
    OverrideStorageInterface,
    SettingsStorageInterface,
    StorageError,
    UnavailableStorage,
)

__all__ = [
    # Auth gate
    "AuthSession",
    "verify_credentials",
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsOverrideStorage",
    "GoogleSheetsSettingsStorage",
    "InMemoryOverrideStorage",
    "InMemorySettingsStorage",
    "MongoLedgerClient",
    "MongoOverrideStorage",
    "MongoSettingsStorage",
    "OverrideStorageInterface",
    "SettingsStorageInterface",
    "StorageError",
    "UnavailableStorage",
]
