"""
Tests for the storage backends.

MongoDB and Google Sheets are exercised against mocks; no network.
"""

import pytest
from unittest.mock import MagicMock

from pymongo.errors import PyMongoError

from src.models.ledger import DeliveryOverride, DeliverySettings
from src.services.storage import (
    GoogleSheetsOverrideStorage,
    GoogleSheetsSettingsStorage,
    InMemoryOverrideStorage,
    InMemorySettingsStorage,
    MongoLedgerClient,
    MongoOverrideStorage,
    MongoSettingsStorage,
    StorageError,
)
from src.services.storage.google_sheets import OVERRIDE_COLUMNS, SETTINGS_COLUMNS


class TestInMemorySettingsStorage:
    """Tests for the dict-backed settings singleton."""

    @pytest.mark.asyncio
    async def test_empty_store_returns_none(self):
        assert await InMemorySettingsStorage().get_settings() is None

    @pytest.mark.asyncio
    async def test_put_replaces_whole_singleton(self):
        storage = InMemorySettingsStorage()
        await storage.put_settings(DeliverySettings(global_rate=60, default_category1=2))
        await storage.put_settings(DeliverySettings(global_rate=70))

        settings = await storage.get_settings()
        assert settings.global_rate == 70.0
        assert settings.default_category1 == 0.0
        assert settings.updated_at is not None


class TestInMemoryOverrideStorage:
    """Tests for the dict-backed override store."""

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self):
        """Test that writing the same date twice leaves one record."""
        storage = InMemoryOverrideStorage()
        override = DeliveryOverride(date="2024-02-05", category1_amount=1)
        await storage.put_override(override)
        await storage.put_override(override)

        assert len(await storage.list_overrides(2024, 2)) == 1

    @pytest.mark.asyncio
    async def test_upsert_replaces_both_amounts(self):
        storage = InMemoryOverrideStorage()
        await storage.put_override(DeliveryOverride(date="2024-02-05", category1_amount=1, category2_amount=2))
        await storage.put_override(DeliveryOverride(date="2024-02-05", category1_amount=3))

        [override] = await storage.list_overrides(2024, 2)
        assert override.category1_amount == 3.0
        assert override.category2_amount == 0.0

    @pytest.mark.asyncio
    async def test_list_is_bounded_to_month(self):
        """Test that neighbouring months are excluded and results are sorted."""
        storage = InMemoryOverrideStorage()
        for key in ["2024-03-01", "2024-02-29", "2024-01-31", "2024-02-01"]:
            await storage.put_override(DeliveryOverride(date=key))

        overrides = await storage.list_overrides(2024, 2)
        assert [o.date for o in overrides] == ["2024-02-01", "2024-02-29"]

    @pytest.mark.asyncio
    async def test_list_empty_month(self):
        assert await InMemoryOverrideStorage().list_overrides(2024, 2) == []


@pytest.fixture
def mongo_database():
    database = MagicMock()
    collections = {"settings": MagicMock(), "overrides": MagicMock()}
    database.__getitem__.side_effect = collections.__getitem__
    return database, collections


@pytest.fixture
def mongo_client(mongo_database):
    database, _ = mongo_database
    settings = MagicMock()
    settings.settings_collection = "settings"
    settings.overrides_collection = "overrides"
    return MongoLedgerClient(settings=settings, database=database)


class TestMongoLedgerClient:
    """Tests for the connection wrapper."""

    def test_injected_database_needs_no_uri(self, mongo_database, monkeypatch, tmp_path):
        """Test that an injected handle works without MONGODB_URI."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("MONGODB_URI", raising=False)
        database, collections = mongo_database

        client = MongoLedgerClient(database=database)

        assert client.settings_collection() is collections["settings"]
        assert client.overrides_collection() is collections["overrides"]


class TestMongoSettingsStorage:
    """Tests for the MongoDB settings singleton."""

    @pytest.mark.asyncio
    async def test_get_strips_object_id(self, mongo_client, mongo_database):
        _, collections = mongo_database
        collections["settings"].find_one.return_value = {
            "_id": "abc",
            "globalRate": 60,
            "defaultCategory1": 2,
            "defaultCategory2": 2.5,
        }

        settings = await MongoSettingsStorage(mongo_client).get_settings()
        assert settings.global_rate == 60.0
        assert settings.default_category2 == 2.5
        collections["settings"].find_one.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, mongo_client, mongo_database):
        _, collections = mongo_database
        collections["settings"].find_one.return_value = None
        assert await MongoSettingsStorage(mongo_client).get_settings() is None

    @pytest.mark.asyncio
    async def test_put_upserts_singleton(self, mongo_client, mongo_database):
        _, collections = mongo_database
        await MongoSettingsStorage(mongo_client).put_settings(
            DeliverySettings(global_rate=60, default_category1=2, default_category2=1)
        )

        filter_, document = collections["settings"].replace_one.call_args.args
        assert filter_ == {}
        assert document["globalRate"] == 60.0
        assert "updatedAt" in document
        assert collections["settings"].replace_one.call_args.kwargs == {"upsert": True}

    @pytest.mark.asyncio
    async def test_driver_errors_become_storage_errors(self, mongo_client, mongo_database):
        _, collections = mongo_database
        collections["settings"].find_one.side_effect = PyMongoError("down")

        with pytest.raises(StorageError):
            await MongoSettingsStorage(mongo_client).get_settings()

    @pytest.mark.asyncio
    async def test_invalid_stored_settings_become_storage_errors(self, mongo_client, mongo_database):
        """Test that a stored negative rate is reported as a storage failure."""
        _, collections = mongo_database
        collections["settings"].find_one.return_value = {
            "_id": "abc",
            "globalRate": -5,
            "defaultCategory1": 2,
            "defaultCategory2": 2.5,
        }

        with pytest.raises(StorageError):
            await MongoSettingsStorage(mongo_client).get_settings()


class TestMongoOverrideStorage:
    """Tests for MongoDB per-date overrides."""

    @pytest.mark.asyncio
    async def test_list_uses_date_range(self, mongo_client, mongo_database):
        """Test that a month is one inclusive string range query, sorted by date."""
        _, collections = mongo_database
        cursor = MagicMock()
        cursor.sort.return_value = [
            {"_id": 1, "date": "2024-02-05", "category1Amount": 0, "category2Amount": 0},
        ]
        collections["overrides"].find.return_value = cursor

        overrides = await MongoOverrideStorage(mongo_client).list_overrides(2024, 2)

        collections["overrides"].find.assert_called_once_with(
            {"date": {"$gte": "2024-02-01", "$lte": "2024-02-29"}}
        )
        assert [o.date for o in overrides] == ["2024-02-05"]
        assert overrides[0].is_no_delivery

    @pytest.mark.asyncio
    async def test_list_skips_malformed_documents(self, mongo_client, mongo_database):
        """Test that one bad document doesn't hide the rest of the month."""
        _, collections = mongo_database
        cursor = MagicMock()
        cursor.sort.return_value = [
            {"_id": 1, "date": "2024-02-05", "category1Amount": -1, "category2Amount": 0},
            {"_id": 2, "date": "2024-02-06", "category1Amount": 1, "category2Amount": 0},
        ]
        collections["overrides"].find.return_value = cursor

        overrides = await MongoOverrideStorage(mongo_client).list_overrides(2024, 2)

        assert [o.date for o in overrides] == ["2024-02-06"]

    @pytest.mark.asyncio
    async def test_put_upserts_by_date(self, mongo_client, mongo_database):
        _, collections = mongo_database
        await MongoOverrideStorage(mongo_client).put_override(
            DeliveryOverride(date="2024-02-05", category1_amount=1.5)
        )

        filter_, document = collections["overrides"].replace_one.call_args.args
        assert filter_ == {"date": "2024-02-05"}
        assert document["category1Amount"] == 1.5
        assert document["category2Amount"] == 0.0
        assert collections["overrides"].replace_one.call_args.kwargs == {"upsert": True}

    @pytest.mark.asyncio
    async def test_unique_index_created_once(self, mongo_client, mongo_database):
        _, collections = mongo_database
        storage = MongoOverrideStorage(mongo_client)
        await storage.put_override(DeliveryOverride(date="2024-02-05"))
        await storage.put_override(DeliveryOverride(date="2024-02-06"))

        collections["overrides"].create_index.assert_called_once()
        assert collections["overrides"].create_index.call_args.kwargs == {"unique": True}

    @pytest.mark.asyncio
    async def test_write_failure_raises(self, mongo_client, mongo_database):
        _, collections = mongo_database
        collections["overrides"].replace_one.side_effect = PyMongoError("timeout")

        with pytest.raises(StorageError):
            await MongoOverrideStorage(mongo_client).put_override(DeliveryOverride(date="2024-02-05"))


@pytest.fixture
def sheets():
    settings_sheet = MagicMock()
    overrides_sheet = MagicMock()
    client = MagicMock()
    client.get_settings_sheet.return_value = settings_sheet
    client.get_overrides_sheet.return_value = overrides_sheet
    return client, settings_sheet, overrides_sheet


class TestGoogleSheetsSettingsStorage:
    """Tests for the spreadsheet settings row."""

    @pytest.mark.asyncio
    async def test_reads_first_data_row(self, sheets):
        client, settings_sheet, _ = sheets
        settings_sheet.get_all_values.return_value = [
            SETTINGS_COLUMNS,
            ["60", "2", "", ""],
        ]

        settings = await GoogleSheetsSettingsStorage(client).get_settings()
        assert settings.global_rate == 60.0
        assert settings.default_category1 == 2.0
        assert settings.default_category2 == 0.0

    @pytest.mark.asyncio
    async def test_header_only_returns_none(self, sheets):
        client, settings_sheet, _ = sheets
        settings_sheet.get_all_values.return_value = [SETTINGS_COLUMNS]
        assert await GoogleSheetsSettingsStorage(client).get_settings() is None

    @pytest.mark.asyncio
    async def test_write_overwrites_row_two(self, sheets):
        client, settings_sheet, _ = sheets
        await GoogleSheetsSettingsStorage(client).put_settings(DeliverySettings(global_rate=60))

        kwargs = settings_sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "A2:D2"
        assert kwargs["values"][0][0] == "60.0"


class TestGoogleSheetsOverrideStorage:
    """Tests for the spreadsheet override rows."""

    @pytest.mark.asyncio
    async def test_list_filters_month(self, sheets):
        client, _, overrides_sheet = sheets
        overrides_sheet.get_all_values.return_value = [
            OVERRIDE_COLUMNS,
            ["2024-03-01", "1", "1", ""],
            ["2024-02-10", "1", "0", ""],
            ["2024-02-05", "0", "0", ""],
            ["not-a-date", "1", "1", ""],
        ]

        overrides = await GoogleSheetsOverrideStorage(client).list_overrides(2024, 2)
        assert [o.date for o in overrides] == ["2024-02-05", "2024-02-10"]

    @pytest.mark.asyncio
    async def test_upsert_updates_existing_row(self, sheets):
        client, _, overrides_sheet = sheets
        overrides_sheet.get_all_values.return_value = [
            OVERRIDE_COLUMNS,
            ["2024-02-04", "1", "1", ""],
            ["2024-02-05", "1", "1", ""],
        ]

        await GoogleSheetsOverrideStorage(client).put_override(DeliveryOverride(date="2024-02-05"))

        assert overrides_sheet.update.call_args.kwargs["range_name"] == "A3:D3"
        overrides_sheet.append_row.assert_not_called()

    @pytest.mark.asyncio
    async def test_upsert_appends_new_date(self, sheets):
        client, _, overrides_sheet = sheets
        overrides_sheet.get_all_values.return_value = [OVERRIDE_COLUMNS]

        await GoogleSheetsOverrideStorage(client).put_override(
            DeliveryOverride(date="2024-02-05", category2_amount=1)
        )

        row = overrides_sheet.append_row.call_args.args[0]
        assert row[:3] == ["2024-02-05", "0.0", "1.0"]

    @pytest.mark.asyncio
    async def test_api_errors_become_storage_errors(self, sheets):
        client, _, overrides_sheet = sheets
        overrides_sheet.get_all_values.side_effect = RuntimeError("quota")

        with pytest.raises(StorageError):
            await GoogleSheetsOverrideStorage(client).list_overrides(2024, 2)
