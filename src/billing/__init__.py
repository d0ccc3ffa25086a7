"""Billing engine package: pure month arithmetic, no I/O."""

from src.billing.engine import (
    calculate_bill,
    day_status,
    days_in_month,
    effective_amount,
    format_date_key,
    format_liters,
    format_money,
    index_overrides,
    month_bounds,
    month_grid,
    shift_month,
)

__all__ = [
    "calculate_bill",
    "day_status",
    "days_in_month",
    "effective_amount",
    "format_date_key",
    "format_liters",
    "format_money",
    "index_overrides",
    "month_bounds",
    "month_grid",
    "shift_month",
]
