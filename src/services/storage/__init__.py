"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the settings
singleton and the per-date overrides. MongoDB is the default backend;
Google Sheets and an in-memory store implement the same interfaces.
"""

from src.services.storage.interface import (
    ConnectionError,
    OverrideStorageInterface,
    SettingsStorageInterface,
    StorageError,
)
from src.services.storage.memory import (
    InMemoryOverrideStorage,
    InMemorySettingsStorage,
)
from src.services.storage.mongodb import (
    MongoLedgerClient,
    MongoOverrideStorage,
    MongoSettingsStorage,
)
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsOverrideStorage,
    GoogleSheetsSettingsStorage,
)
from src.services.storage.unavailable import UnavailableStorage

__all__ = [
    # Interfaces
    "OverrideStorageInterface",
    "SettingsStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryOverrideStorage",
    "InMemorySettingsStorage",
    # MongoDB implementation
    "MongoLedgerClient",
    "MongoOverrideStorage",
    "MongoSettingsStorage",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsOverrideStorage",
    "GoogleSheetsSettingsStorage",
    # Misconfigured backend
    "UnavailableStorage",
]
