"""
Unavailable Storage

Stands in for a backend that could not be set up (missing MONGODB_URI,
unreadable credentials...). Every call raises ConnectionError, so the API
answers 500 instead of accepting writes it cannot keep.
"""

from typing import Optional

from src.models.ledger import DeliveryOverride, DeliverySettings
from src.services.storage.interface import (
    ConnectionError,
    OverrideStorageInterface,
    SettingsStorageInterface,
)


class UnavailableStorage(SettingsStorageInterface, OverrideStorageInterface):
    """Implements both interfaces; fails every operation with the setup error."""

    def __init__(self, backend: str, reason: str):
        self.backend = backend
        self.reason = reason

    def _fail(self):
        raise ConnectionError(f"Storage backend '{self.backend}' is not available: {self.reason}")

    async def get_settings(self) -> Optional[DeliverySettings]:
        self._fail()

    async def put_settings(self, settings: DeliverySettings) -> bool:
        self._fail()

    async def list_overrides(self, year: int, month: int) -> list[DeliveryOverride]:
        self._fail()

    async def put_override(self, override: DeliveryOverride) -> bool:
        self._fail()
