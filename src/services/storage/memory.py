"""
In-Memory Storage

Dict-backed implementation of both storage interfaces. Used by the tests and
for running the app without a database (APP_STORAGE_BACKEND=memory).
Nothing survives a process restart.
"""

from datetime import datetime, timezone
from typing import Optional

from src.billing.engine import month_bounds
from src.models.ledger import DeliveryOverride, DeliverySettings
from src.services.storage.interface import (
    OverrideStorageInterface,
    SettingsStorageInterface,
)


class InMemorySettingsStorage(SettingsStorageInterface):

    def __init__(self):
        self._settings: Optional[DeliverySettings] = None

    async def get_settings(self) -> Optional[DeliverySettings]:
        if self._settings is None:
            return None
        return self._settings.model_copy()

    async def put_settings(self, settings: DeliverySettings) -> bool:
        self._settings = settings.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        return True


class InMemoryOverrideStorage(OverrideStorageInterface):

    def __init__(self):
        self._overrides: dict[str, DeliveryOverride] = {}

    async def list_overrides(self, year: int, month: int) -> list[DeliveryOverride]:
        first_key, last_key = month_bounds(year, month)
        return [
            self._overrides[key].model_copy()
            for key in sorted(self._overrides)
            if first_key <= key <= last_key
        ]

    async def put_override(self, override: DeliveryOverride) -> bool:
        self._overrides[override.date] = override.model_copy(
            update={"updated_at": datetime.now(timezone.utc)}
        )
        return True
