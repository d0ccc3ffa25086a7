"""
Main Orchestrator for Milkman Ledger

Ties the storage backend, the billing engine and the event logger together
behind the operations the HTTP API exposes:

1. Settings   (load with defaults, save)
2. Overrides  (list a month, upsert a day)
3. Bill       (compute a month from persisted data)
4. Auth       (check the shared credentials)

Every operation logs a structured event; storage failures are logged and
re-raised as StorageError for the API layer to turn into a 500.
"""

from typing import Optional
from uuid import UUID

from src.billing.engine import calculate_bill
from src.config import AppSettings, get_settings
from src.events import EventLogger, create_correlation_id
from src.models.events import EventBuilder
from src.models.ledger import DeliveryOverride, DeliverySettings, MonthlyBill
from src.services.auth import verify_credentials
from src.services.storage import (
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


class LedgerService:
    """
    The server-side operations of the ledger.

    Holds no state of its own beyond its collaborators; every call goes to
    storage, so two callers always see the last write.
    """

    def __init__(
        self,
        settings_storage: SettingsStorageInterface,
        override_storage: OverrideStorageInterface,
        event_logger: Optional[EventLogger] = None,
        app_settings: Optional[AppSettings] = None,
        backend_name: str = "custom",
    ):
        self._settings_storage = settings_storage
        self._override_storage = override_storage
        self._events = event_logger or EventLogger()
        self._app = app_settings or get_settings().app
        self.backend_name = backend_name

    @property
    def storage_available(self) -> bool:
        """False when the configured backend could not be set up."""
        return not isinstance(self._settings_storage, UnavailableStorage)

    def default_settings(self) -> DeliverySettings:
        """What the API answers before anyone has saved settings."""
        return DeliverySettings(
            global_rate=self._app.server_default_rate,
            default_category1=self._app.default_category1,
            default_category2=self._app.default_category2,
        )

    async def load_settings(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> DeliverySettings:
        correlation_id = correlation_id or create_correlation_id()
        try:
            settings = await self._settings_storage.get_settings()
        except StorageError as e:
            self._events.log_storage_error("load_settings", str(e), correlation_id)
            raise

        if settings is None:
            settings = self.default_settings()
            self._events.log(EventBuilder.settings_defaulted(
                global_rate=settings.global_rate,
                correlation_id=correlation_id,
            ))
        else:
            self._events.log(EventBuilder.settings_loaded(
                global_rate=settings.global_rate,
                correlation_id=correlation_id,
            ))
        return settings

    async def save_settings(
        self,
        settings: DeliverySettings,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()
        try:
            saved = await self._settings_storage.put_settings(settings)
        except StorageError as e:
            self._events.log_storage_error("save_settings", str(e), correlation_id)
            raise

        self._events.log_settings_saved(
            global_rate=settings.global_rate,
            default_category1=settings.default_category1,
            default_category2=settings.default_category2,
            correlation_id=correlation_id,
        )
        return saved

    async def list_overrides(
        self,
        year: int,
        month: int,
        correlation_id: Optional[UUID] = None,
    ) -> list[DeliveryOverride]:
        correlation_id = correlation_id or create_correlation_id()
        try:
            overrides = await self._override_storage.list_overrides(year, month)
        except StorageError as e:
            self._events.log_storage_error("list_overrides", str(e), correlation_id)
            raise

        self._events.log(EventBuilder.overrides_listed(
            year=year,
            month=month,
            count=len(overrides),
            correlation_id=correlation_id,
        ))
        return overrides

    async def save_override(
        self,
        override: DeliveryOverride,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()
        try:
            saved = await self._override_storage.put_override(override)
        except StorageError as e:
            self._events.log_storage_error("save_override", str(e), correlation_id)
            raise

        self._events.log_override_saved(
            date_key=override.date,
            category1_amount=override.category1_amount,
            category2_amount=override.category2_amount,
            correlation_id=correlation_id,
        )
        return saved

    async def calculate_bill(
        self,
        year: int,
        month: int,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlyBill:
        """Bill a month from the persisted settings and overrides."""
        correlation_id = correlation_id or create_correlation_id()
        settings = await self.load_settings(correlation_id)
        overrides = await self.list_overrides(year, month, correlation_id)

        bill = calculate_bill(settings, overrides, year, month)
        self._events.log(EventBuilder.bill_calculated(
            year=year,
            month=month,
            grand_total=bill.grand_total,
            correlation_id=correlation_id,
        ))
        return bill

    def authenticate(self, username: str, password: str) -> bool:
        success = verify_credentials(username, password)
        self._events.log_auth_attempt(username, success)
        return success


def create_app_components(
    backend: Optional[str] = None,
    event_logger: Optional[EventLogger] = None,
) -> LedgerService:
    """
    Factory function to create the ledger service with its storage backend.

    Args:
        backend: "mongodb", "google_sheets" or "memory". Defaults to
                 APP_STORAGE_BACKEND. In-memory storage is only used when
                 asked for. If the chosen backend can't be set up, every
                 storage call fails, so the API answers 500 rather than
                 accepting writes it would lose.

    Returns:
        A ready LedgerService
    """
    app_settings = get_settings().app
    backend = backend or app_settings.storage_backend
    event_logger = event_logger or EventLogger()

    settings_storage: SettingsStorageInterface
    override_storage: OverrideStorageInterface

    try:
        if backend == "mongodb":
            mongo_client = MongoLedgerClient(get_settings().mongodb)
            settings_storage = MongoSettingsStorage(mongo_client)
            override_storage = MongoOverrideStorage(mongo_client)
        elif backend == "google_sheets":
            sheets_client = GoogleSheetsClient()
            settings_storage = GoogleSheetsSettingsStorage(sheets_client)
            override_storage = GoogleSheetsOverrideStorage(sheets_client)
        elif backend == "memory":
            settings_storage = InMemorySettingsStorage()
            override_storage = InMemoryOverrideStorage()
        else:
            raise ValueError(f"Unknown storage backend: {backend}")
    except Exception as e:
        # Backend not configured - start anyway so /health can say so
        event_logger.log_error(
            error_type="storage_not_configured",
            error_message=str(e),
            details={"backend": backend},
        )
        unavailable = UnavailableStorage(backend, str(e))
        settings_storage = unavailable
        override_storage = unavailable
        backend = f"{backend} (unavailable)"

    return LedgerService(
        settings_storage=settings_storage,
        override_storage=override_storage,
        event_logger=event_logger,
        app_settings=app_settings,
        backend_name=backend,
    )
