"""
Calendar State Machine

Everything the calendar page knows, independent of how it is drawn.

Phases:
    LOADING -> VIEWING          (valid AuthSession)
    LOADING -> UNAUTHENTICATED  (no session, or it expired)

On top of VIEWING three independent toggles: a selected day (edit panel),
the settings panel and the bill panel.

Persistence rules:
- Day edits are committed to local state only after the API confirms the
  write. A failed write leaves the calendar showing what is persisted and
  queues an error for the page to display.
- Settings edits apply locally at once and are saved by a debounced task
  (one write per burst of edits). If that write fails, the persisted
  settings are fetched back so the calendar does not drift from storage.
- Changing month replaces the override map; nothing carries over.
"""

import threading
from datetime import date
from enum import Enum
from typing import Optional

from src.billing.engine import (
    calculate_bill,
    day_status,
    effective_amount,
    format_date_key,
    index_overrides,
    month_grid,
    shift_month,
)
from src.client import ApiError, LedgerApiClient
from src.config import AppSettings, get_settings
from src.events import EventLogger
from src.models.ledger import (
    Category,
    DayStatus,
    DeliveryOverride,
    DeliverySettings,
    MonthlyBill,
    coerce_number,
)
from src.services.auth import AuthSession
from src.ui.debounce import DebouncedTask


SETTING_FIELDS = ("global_rate", "default_category1", "default_category2")


class Phase(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    VIEWING = "viewing"


class CalendarState:
    """
    State behind one calendar page session.

    The debounced settings save runs on a timer thread, so the fields it
    touches (settings, errors, saving flag) are guarded by a lock.
    """

    def __init__(
        self,
        client: LedgerApiClient,
        app_settings: Optional[AppSettings] = None,
        today: Optional[date] = None,
        autosave: Optional[DebouncedTask] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self._client = client
        self._app = app_settings or get_settings().app
        self._events = event_logger or EventLogger("milkman.ui")
        self._autosave = autosave or DebouncedTask(self._app.autosave_delay_seconds)
        self._lock = threading.Lock()

        today = today or date.today()
        self.year = today.year
        self.month = today.month
        self.phase = Phase.LOADING
        self.session: Optional[AuthSession] = None

        # Used only until the first successful settings fetch
        self.settings = DeliverySettings(
            global_rate=self._app.client_default_rate,
            default_category1=self._app.default_category1,
            default_category2=self._app.default_category2,
        )
        self.overrides: dict[str, DeliveryOverride] = {}

        self.selected_day: Optional[date] = None
        self.show_settings = False
        self.show_bill = False

        self._errors: list[str] = []
        self._saving_settings = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self, session: Optional[AuthSession] = None) -> Phase:
        """Fetch settings and the displayed month's overrides, then pick a phase."""
        self.phase = Phase.LOADING
        if session is not None:
            self.session = session

        try:
            settings = self._client.get_settings()
        except ApiError as e:
            self._report("settings", None, f"Could not load settings: {e}")
        else:
            with self._lock:
                self.settings = settings

        self._reload_overrides()
        self.phase = Phase.VIEWING if self.is_authenticated else Phase.UNAUTHENTICATED
        return self.phase

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.session.is_valid()

    def check_session(self) -> Phase:
        """
        Drop back to the login form once the session has expired.

        A settings edit still waiting for its autosave is saved first.
        """
        if self.phase == Phase.VIEWING and not self.is_authenticated:
            self._autosave.flush()
            self.logout()
            self._push_error("Your session has expired. Please log in again.")
        return self.phase

    def login(self, username: str, password: str) -> bool:
        try:
            ok = self._client.authenticate(username, password)
        except ApiError as e:
            self._report("auth", username, f"Login failed: {e}")
            return False

        if not ok:
            self._push_error("Invalid username or password")
            return False

        self.session = AuthSession.start(username, self._app.session_ttl_hours)
        self.phase = Phase.VIEWING
        return True

    def logout(self) -> None:
        self.teardown()
        self.session = None
        self.selected_day = None
        self.phase = Phase.UNAUTHENTICATED

    def teardown(self) -> None:
        """Cancel any pending settings save; call when the view goes away."""
        self._autosave.cancel()

    # ------------------------------------------------------------------
    # Month navigation
    # ------------------------------------------------------------------

    def change_month(self, delta: int) -> None:
        year, month = shift_month(self.year, self.month, delta)
        self.go_to(year, month)

    def go_to(self, year: int, month: int) -> None:
        self.year, self.month = year, month
        self.selected_day = None
        self._reload_overrides()

    def _reload_overrides(self) -> None:
        try:
            overrides = self._client.list_overrides(self.year, self.month)
        except ApiError as e:
            # An empty map shows defaults; keeping the old month's map would be wrong
            self.overrides = {}
            self._report(
                "override", f"{self.year:04d}-{self.month:02d}",
                f"Could not load overrides: {e}",
            )
            return
        self.overrides = index_overrides(overrides)

    # ------------------------------------------------------------------
    # Reading the month
    # ------------------------------------------------------------------

    def grid(self) -> list[list[Optional[date]]]:
        return month_grid(self.year, self.month)

    def effective(self, day: date, category: Category) -> float:
        return effective_amount(self.settings, self.overrides, day, category)

    def day_status(self, day: date) -> DayStatus:
        return day_status(self.settings, self.overrides.get(format_date_key(day)))

    def bill(self) -> MonthlyBill:
        return calculate_bill(self.settings, self.overrides.values(), self.year, self.month)

    # ------------------------------------------------------------------
    # Day edits
    # ------------------------------------------------------------------

    def select_day(self, day: date) -> None:
        self.selected_day = day

    def clear_selection(self) -> None:
        self.selected_day = None

    def toggle_settings(self) -> None:
        self.show_settings = not self.show_settings

    def toggle_bill(self) -> None:
        self.show_bill = not self.show_bill

    def edit_day(self, day: date, category: Category, raw_value) -> bool:
        """
        Set one category's liters for a day.

        Both categories are written; the other one keeps its current
        effective value. Empty or non-numeric input counts as 0.
        """
        amount = coerce_number(raw_value)
        if amount < 0:
            self._push_error("Quantities can't be negative")
            return False

        category1 = amount if category == Category.CATEGORY_1 else self.effective(day, Category.CATEGORY_1)
        category2 = amount if category == Category.CATEGORY_2 else self.effective(day, Category.CATEGORY_2)
        return self._persist_override(day, category1, category2)

    def mark_no_delivery(self, day: date) -> bool:
        return self._persist_override(day, 0.0, 0.0)

    def _persist_override(self, day: date, category1: float, category2: float) -> bool:
        date_key = format_date_key(day)
        try:
            self._client.save_override(date_key, category1, category2)
        except ApiError as e:
            self._report("override", date_key, f"Failed to save override for {date_key}: {e}")
            return False

        self.overrides[date_key] = DeliveryOverride(
            date=date_key,
            category1_amount=category1,
            category2_amount=category2,
        )
        return True

    # ------------------------------------------------------------------
    # Settings edits
    # ------------------------------------------------------------------

    @property
    def saving(self) -> bool:
        """True while a settings save is pending or in flight."""
        with self._lock:
            in_flight = self._saving_settings
        return in_flight or self._autosave.pending

    def update_setting(self, field: str, raw_value) -> bool:
        """Apply a settings edit locally and (re)start the autosave countdown."""
        if field not in SETTING_FIELDS:
            raise ValueError(f"Unknown setting: {field}")

        value = coerce_number(raw_value)
        if value < 0:
            self._push_error("Settings can't be negative")
            return False

        with self._lock:
            self.settings = self.settings.model_copy(update={field: value})
        self._autosave.schedule(self._save_settings)
        return True

    def _save_settings(self) -> None:
        with self._lock:
            snapshot = self.settings
            self._saving_settings = True
        try:
            self._client.save_settings(snapshot)
        except ApiError as e:
            self._report("settings", None, f"Failed to save settings: {e}")
            self._reconcile_settings(snapshot)
        finally:
            with self._lock:
                self._saving_settings = False

    def _reconcile_settings(self, snapshot: DeliverySettings) -> None:
        try:
            persisted = self._client.get_settings()
        except ApiError as e:
            self._events.log_ui_request_failed("settings", None, f"Reconcile failed: {e}")
            return
        with self._lock:
            # A newer edit has its own save scheduled; leave it alone
            if self.settings is snapshot:
                self.settings = persisted

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _report(self, entity_type: str, entity_key: Optional[str], message: str) -> None:
        self._events.log_ui_request_failed(entity_type, entity_key, message)
        self._push_error(message)

    def _push_error(self, message: str) -> None:
        with self._lock:
            self._errors.append(message)

    def pop_errors(self) -> list[str]:
        """Errors queued since the last call, oldest first."""
        with self._lock:
            errors, self._errors = self._errors, []
        return errors
