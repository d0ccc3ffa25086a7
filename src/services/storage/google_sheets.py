"""
Google Sheets Storage Implementation

Alternative backend for operators who want to see the ledger in a
spreadsheet. Two worksheets:

- Settings:  header row + exactly one data row (row 2)
- Overrides: header row + one row per date key

TRADEOFFS:
- Every read fetches the whole worksheet and filters in Python
  (fine: a month holds at most 31 rows)
- Upserts are read-then-write and can race; last write wins
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.billing.engine import month_bounds
from src.config import get_settings
from src.models.ledger import DeliveryOverride, DeliverySettings
from src.services.storage.interface import (
    ConnectionError,
    OverrideStorageInterface,
    SettingsStorageInterface,
    StorageError,
)


SETTINGS_COLUMNS = [
    "globalRate",
    "defaultCategory1",
    "defaultCategory2",
    "updatedAt",
]

OVERRIDE_COLUMNS = [
    "date",
    "category1Amount",
    "category2Amount",
    "updatedAt",
]


def _last_column(columns: list[str]) -> str:
    return chr(ord("A") + len(columns) - 1)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_settings_sheet(self) -> gspread.Worksheet:
        """Get or create the Settings worksheet."""
        return self._get_or_create_sheet(
            self._settings.settings_sheet_name, SETTINGS_COLUMNS, rows=10
        )

    def get_overrides_sheet(self) -> gspread.Worksheet:
        """Get or create the Overrides worksheet."""
        return self._get_or_create_sheet(
            self._settings.overrides_sheet_name, OVERRIDE_COLUMNS, rows=2000
        )


def _safe_get(row: list, index: int, default: str = "") -> str:
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


class GoogleSheetsSettingsStorage(SettingsStorageInterface):
    """
    Google Sheets implementation of the settings singleton.

    The singleton lives in row 2; writes overwrite that row in place.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _settings_to_row(settings: DeliverySettings, updated_at: datetime) -> list:
        return [
            str(settings.global_rate),
            str(settings.default_category1),
            str(settings.default_category2),
            updated_at.isoformat(),
        ]

    @staticmethod
    def _row_to_settings(row: list) -> DeliverySettings:
        # Blank or garbled cells coerce to 0 in the model
        return DeliverySettings(
            global_rate=_safe_get(row, 0),
            default_category1=_safe_get(row, 1),
            default_category2=_safe_get(row, 2),
            updated_at=_parse_timestamp(_safe_get(row, 3)),
        )

    def _read(self) -> Optional[DeliverySettings]:
        sheet = self._client.get_settings_sheet()
        rows = sheet.get_all_values()[1:]  # Skip header
        for row in rows:
            if any(cell for cell in row):
                return self._row_to_settings(row)
        return None

    def _write(self, settings: DeliverySettings) -> None:
        sheet = self._client.get_settings_sheet()
        row = self._settings_to_row(settings, datetime.now(timezone.utc))
        sheet.update(
            range_name=f"A2:{_last_column(SETTINGS_COLUMNS)}2",
            values=[row],
            value_input_option="RAW",
        )

    async def get_settings(self) -> Optional[DeliverySettings]:
        try:
            return await asyncio.to_thread(self._read)
        except Exception as e:
            raise StorageError(f"Failed to load settings: {e}")

    async def put_settings(self, settings: DeliverySettings) -> bool:
        try:
            await asyncio.to_thread(self._write, settings)
            return True
        except Exception as e:
            raise StorageError(f"Failed to save settings: {e}")


class GoogleSheetsOverrideStorage(OverrideStorageInterface):
    """
    Google Sheets implementation of per-date overrides.

    One row per date key. An upsert rewrites the matching row, or appends one.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _override_to_row(override: DeliveryOverride, updated_at: datetime) -> list:
        return [
            override.date,
            str(override.category1_amount),
            str(override.category2_amount),
            updated_at.isoformat(),
        ]

    @staticmethod
    def _row_to_override(row: list) -> DeliveryOverride:
        return DeliveryOverride(
            date=_safe_get(row, 0),
            category1_amount=_safe_get(row, 1),
            category2_amount=_safe_get(row, 2),
            updated_at=_parse_timestamp(_safe_get(row, 3)),
        )

    def _read_month(self, first_key: str, last_key: str) -> list[DeliveryOverride]:
        sheet = self._client.get_overrides_sheet()
        rows = sheet.get_all_values()[1:]  # Skip header

        overrides = {}
        for row in rows:
            key = _safe_get(row, 0)
            if not key or not (first_key <= key <= last_key):
                continue
            try:
                overrides[key] = self._row_to_override(row)
            except ValueError:
                continue  # Skip malformed rows

        return [overrides[key] for key in sorted(overrides)]

    def _write(self, override: DeliveryOverride) -> None:
        sheet = self._client.get_overrides_sheet()
        row = self._override_to_row(override, datetime.now(timezone.utc))
        all_rows = sheet.get_all_values()

        # Find the row with this date key
        for idx, existing in enumerate(all_rows[1:], start=2):  # Start from 2 (row 1 is header)
            if existing and existing[0] == override.date:
                sheet.update(
                    range_name=f"A{idx}:{_last_column(OVERRIDE_COLUMNS)}{idx}",
                    values=[row],
                    value_input_option="RAW",
                )
                return

        sheet.append_row(row, value_input_option="RAW")

    async def list_overrides(self, year: int, month: int) -> list[DeliveryOverride]:
        first_key, last_key = month_bounds(year, month)
        try:
            return await asyncio.to_thread(self._read_month, first_key, last_key)
        except Exception as e:
            raise StorageError(f"Failed to list overrides: {e}")

    async def put_override(self, override: DeliveryOverride) -> bool:
        try:
            await asyncio.to_thread(self._write, override)
            return True
        except Exception as e:
            raise StorageError(f"Failed to save override: {e}")
