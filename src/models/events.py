"""
Event Models for Milkman Ledger

Every write, every login attempt and every backend failure produces a
LedgerEvent. Events go to the structured log; they are not stored, so there
is no edit history to query later.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventType(str, Enum):
    """Types of events we log."""
    # Settings
    SETTINGS_LOADED = "settings_loaded"
    SETTINGS_DEFAULTED = "settings_defaulted"
    SETTINGS_SAVED = "settings_saved"

    # Overrides
    OVERRIDES_LISTED = "overrides_listed"
    OVERRIDE_SAVED = "override_saved"

    # Billing
    BILL_CALCULATED = "bill_calculated"

    # Auth gate
    AUTH_SUCCEEDED = "auth_succeeded"
    AUTH_FAILED = "auth_failed"

    # Failures
    STORAGE_ERROR = "storage_error"
    UI_REQUEST_FAILED = "ui_request_failed"
    SYSTEM_ERROR = "system_error"


class EventSeverity(str, Enum):
    """Severity level for events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single structured log event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: EventType
    severity: EventSeverity = EventSeverity.INFO

    # What the event is about, e.g. entity_type="override", entity_key="2024-02-05"
    entity_type: Optional[str] = None
    entity_key: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together the events of one request"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_key": self.entity_key,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class EventBuilder:
    """
    Helper class to build events with common patterns.

    Usage:
        event = EventBuilder.override_saved("2024-02-05", 0.0, 0.0)
        event = EventBuilder.auth_failed("admin")
    """

    @staticmethod
    def settings_loaded(
        global_rate: float,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.SETTINGS_LOADED,
            severity=EventSeverity.DEBUG,
            entity_type="settings",
            correlation_id=correlation_id,
            description="Settings loaded from storage",
            details={"global_rate": global_rate},
        )

    @staticmethod
    def settings_defaulted(
        global_rate: float,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.SETTINGS_DEFAULTED,
            entity_type="settings",
            correlation_id=correlation_id,
            description="No settings persisted, answering with defaults",
            details={"global_rate": global_rate},
        )

    @staticmethod
    def settings_saved(
        global_rate: float,
        default_category1: float,
        default_category2: float,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.SETTINGS_SAVED,
            entity_type="settings",
            correlation_id=correlation_id,
            description=f"Settings saved: Rs{global_rate}/L",
            details={
                "global_rate": global_rate,
                "default_category1": default_category1,
                "default_category2": default_category2,
            },
        )

    @staticmethod
    def overrides_listed(
        year: int,
        month: int,
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.OVERRIDES_LISTED,
            severity=EventSeverity.DEBUG,
            entity_type="override",
            entity_key=f"{year:04d}-{month:02d}",
            correlation_id=correlation_id,
            description=f"Listed {count} overrides for {year:04d}-{month:02d}",
            details={"count": count},
        )

    @staticmethod
    def override_saved(
        date_key: str,
        category1_amount: float,
        category2_amount: float,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.OVERRIDE_SAVED,
            entity_type="override",
            entity_key=date_key,
            correlation_id=correlation_id,
            description=f"Override saved for {date_key}",
            details={
                "category1_amount": category1_amount,
                "category2_amount": category2_amount,
            },
        )

    @staticmethod
    def bill_calculated(
        year: int,
        month: int,
        grand_total: float,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.BILL_CALCULATED,
            severity=EventSeverity.DEBUG,
            entity_type="bill",
            entity_key=f"{year:04d}-{month:02d}",
            correlation_id=correlation_id,
            description=f"Bill calculated: Rs{grand_total:.2f}",
            details={"grand_total": grand_total},
        )

    @staticmethod
    def auth_succeeded(username: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.AUTH_SUCCEEDED,
            entity_type="auth",
            description="Operator authenticated",
            details={"username": username},
        )

    @staticmethod
    def auth_failed(username: str, reason: str = "invalid credentials") -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.AUTH_FAILED,
            severity=EventSeverity.WARNING,
            entity_type="auth",
            description=f"Authentication failed: {reason}",
            details={"username": username},
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.STORAGE_ERROR,
            severity=EventSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def ui_request_failed(
        entity_type: str,
        entity_key: Optional[str],
        error_message: str
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.UI_REQUEST_FAILED,
            severity=EventSeverity.ERROR,
            entity_type=entity_type,
            entity_key=entity_key,
            description=f"UI request failed for {entity_type}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=EventType.SYSTEM_ERROR,
            severity=EventSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
