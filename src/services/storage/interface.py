"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run against MongoDB in production and Google Sheets where that is simpler
2. Use in-memory storage for testing
3. Keep billing logic decoupled from storage implementation

The interface is intentionally tiny: one singleton document and one
date-keyed collection. Every write is a full-replace upsert. There is no
delete, no partial update and no conflict detection (last write wins).
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.models.ledger import DeliveryOverride, DeliverySettings


class SettingsStorageInterface(ABC):
    """
    Abstract interface for the settings singleton.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def get_settings(self) -> Optional[DeliverySettings]:
        """
        Retrieve the persisted settings.

        Returns:
            The settings if they were ever written, None otherwise

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def put_settings(self, settings: DeliverySettings) -> bool:
        """
        Replace the settings singleton, creating it if absent.

        The store stamps updated_at; any value on the argument is ignored.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the write fails
        """
        pass


class OverrideStorageInterface(ABC):
    """Abstract interface for per-date overrides."""

    @abstractmethod
    async def list_overrides(self, year: int, month: int) -> list[DeliveryOverride]:
        """
        List the overrides of one calendar month.

        Args:
            year: Four-digit year
            month: Month number, 1-12

        Returns:
            Overrides whose date key falls within the month (inclusive),
            ordered by date

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def put_override(self, override: DeliveryOverride) -> bool:
        """
        Replace the override for override.date, creating it if absent.

        Writing the same override twice leaves exactly one record.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
