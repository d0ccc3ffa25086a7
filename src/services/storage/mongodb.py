"""
MongoDB Storage Implementation

The production document store. Two collections in one database:

- settings:  exactly one document, replaced wholesale on every write
- overrides: one document per "YYYY-MM-DD" date key (unique index)

Month listing is a string range query on the date key, which is correct only
because the key is fixed-width and zero-padded.

pymongo is synchronous, so each call is pushed to a worker thread to keep
the event loop free.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from tenacity import retry, stop_after_attempt, wait_exponential

from src.billing.engine import month_bounds
from src.config import MongoSettings, get_settings
from src.models.ledger import DeliveryOverride, DeliverySettings
from src.services.storage.interface import (
    ConnectionError,
    OverrideStorageInterface,
    SettingsStorageInterface,
    StorageError,
)


class MongoLedgerClient:
    """
    Low-level MongoDB client wrapper.

    Handles connection setup (with retry) and hands out the two collections.
    A database handle can be injected, which skips connecting entirely; the
    collection names then default without reading MONGODB_URI.
    """

    def __init__(
        self,
        settings: Optional[MongoSettings] = None,
        database: Optional[Database] = None,
    ):
        if settings is None and database is not None:
            settings = MongoSettings.model_construct()
        self._settings = settings
        self._client: Optional[MongoClient] = None
        self._database = database
        self._indexes_ready = False

    @property
    def settings(self) -> MongoSettings:
        if self._settings is None:
            self._settings = get_settings().mongodb
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> MongoClient:
        """
        Establish the connection and check the server answers.
        """
        if self._client is None:
            try:
                client = MongoClient(
                    self.settings.uri,
                    serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
                )
                client.admin.command("ping")
            except PyMongoError as e:
                raise ConnectionError(f"Failed to connect to MongoDB: {e}")
            self._client = client

        return self._client

    def get_database(self) -> Database:
        if self._database is None:
            self._database = self.connect()[self.settings.database]
        return self._database

    def settings_collection(self) -> Collection:
        return self.get_database()[self.settings.settings_collection]

    def overrides_collection(self) -> Collection:
        collection = self.get_database()[self.settings.overrides_collection]
        if not self._indexes_ready:
            collection.create_index([("date", ASCENDING)], unique=True)
            self._indexes_ready = True
        return collection


def _strip_id(document: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in document.items() if key != "_id"}


class MongoSettingsStorage(SettingsStorageInterface):
    """MongoDB implementation of the settings singleton."""

    def __init__(self, client: Optional[MongoLedgerClient] = None):
        self._client = client or MongoLedgerClient()

    def _find(self) -> Optional[dict]:
        return self._client.settings_collection().find_one({})

    def _replace(self, document: dict) -> None:
        # Empty filter: the singleton is whatever single document is there
        self._client.settings_collection().replace_one({}, document, upsert=True)

    async def get_settings(self) -> Optional[DeliverySettings]:
        try:
            document = await asyncio.to_thread(self._find)
        except (PyMongoError, ConnectionError) as e:
            raise StorageError(f"Failed to load settings: {e}")

        if document is None:
            return None
        try:
            return DeliverySettings.model_validate(_strip_id(document))
        except ValidationError as e:
            raise StorageError(f"Stored settings are invalid: {e}")

    async def put_settings(self, settings: DeliverySettings) -> bool:
        document = {
            "globalRate": settings.global_rate,
            "defaultCategory1": settings.default_category1,
            "defaultCategory2": settings.default_category2,
            "updatedAt": datetime.now(timezone.utc),
        }
        try:
            await asyncio.to_thread(self._replace, document)
        except (PyMongoError, ConnectionError) as e:
            raise StorageError(f"Failed to save settings: {e}")
        return True


class MongoOverrideStorage(OverrideStorageInterface):
    """MongoDB implementation of per-date overrides."""

    def __init__(self, client: Optional[MongoLedgerClient] = None):
        self._client = client or MongoLedgerClient()

    def _find_range(self, first_key: str, last_key: str) -> list[dict]:
        cursor = self._client.overrides_collection().find(
            {"date": {"$gte": first_key, "$lte": last_key}}
        )
        return list(cursor.sort("date", ASCENDING))

    def _replace(self, document: dict) -> None:
        self._client.overrides_collection().replace_one(
            {"date": document["date"]},
            document,
            upsert=True,
        )

    async def list_overrides(self, year: int, month: int) -> list[DeliveryOverride]:
        first_key, last_key = month_bounds(year, month)
        try:
            documents = await asyncio.to_thread(self._find_range, first_key, last_key)
        except (PyMongoError, ConnectionError) as e:
            raise StorageError(f"Failed to list overrides: {e}")

        overrides = []
        for document in documents:
            try:
                overrides.append(DeliveryOverride.model_validate(_strip_id(document)))
            except ValidationError:
                continue  # Skip malformed documents
        return overrides

    async def put_override(self, override: DeliveryOverride) -> bool:
        document = {
            "date": override.date,
            "category1Amount": override.category1_amount,
            "category2Amount": override.category2_amount,
            "updatedAt": datetime.now(timezone.utc),
        }
        try:
            await asyncio.to_thread(self._replace, document)
        except (PyMongoError, ConnectionError) as e:
            raise StorageError(f"Failed to save override: {e}")
        return True
