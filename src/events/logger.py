"""
Event Logger

Every significant action (settings write, override write, login attempt,
backend failure) is logged as a structured event. Events are written to the
local structured log only; nothing is persisted.

The event logger:
- Never raises, so a logging problem cannot break a request or a UI rerun
- Supports correlation IDs to trace the events of one request
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.events import EventBuilder, EventSeverity, LedgerEvent


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class EventLogger:
    """Central event logging service."""

    def __init__(self, name: str = "milkman"):
        self._logger = structlog.get_logger(name)

    def log(self, event: LedgerEvent) -> LedgerEvent:
        """Log an event at the level matching its severity."""
        log_dict = event.to_log_dict()

        try:
            if event.severity == EventSeverity.ERROR:
                self._logger.error("ledger_event", **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception as e:
            # Logging must never take the caller down with it
            print(f"WARNING: Failed to write log event {event.event_id}: {e}")

        return event

    def log_settings_saved(
        self,
        global_rate: float,
        default_category1: float,
        default_category2: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EventBuilder.settings_saved(
            global_rate=global_rate,
            default_category1=default_category1,
            default_category2=default_category2,
            correlation_id=correlation_id,
        ))

    def log_override_saved(
        self,
        date_key: str,
        category1_amount: float,
        category2_amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EventBuilder.override_saved(
            date_key=date_key,
            category1_amount=category1_amount,
            category2_amount=category2_amount,
            correlation_id=correlation_id,
        ))

    def log_auth_attempt(self, username: str, success: bool) -> None:
        if success:
            self.log(EventBuilder.auth_succeeded(username))
        else:
            self.log(EventBuilder.auth_failed(username))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_ui_request_failed(
        self,
        entity_type: str,
        entity_key: Optional[str],
        error_message: str,
    ) -> None:
        self.log(EventBuilder.ui_request_failed(
            entity_type=entity_type,
            entity_key=entity_key,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(EventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a request and pass it to every log call it makes.
    """
    return uuid4()
