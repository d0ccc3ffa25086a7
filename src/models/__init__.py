"""
Data Models Package

This package contains all Pydantic models used in Milkman Ledger.
All data crossing the HTTP or storage boundary must conform to these schemas.
"""

from src.models.ledger import (
    Category,
    CategoryBill,
    DayStatus,
    DeliveryOverride,
    DeliverySettings,
    MonthlyBill,
    coerce_number,
    validate_date_key,
)
from src.models.events import (
    EventBuilder,
    EventSeverity,
    EventType,
    LedgerEvent,
)

__all__ = [
    # Ledger models
    "Category",
    "CategoryBill",
    "DayStatus",
    "DeliveryOverride",
    "DeliverySettings",
    "MonthlyBill",
    "coerce_number",
    "validate_date_key",
    # Event models
    "EventBuilder",
    "EventSeverity",
    "EventType",
    "LedgerEvent",
]
