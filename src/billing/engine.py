"""
Billing Engine

Computes what was delivered and what it costs for one calendar month.

Rules:
- The effective amount for a (date, category) is the override value when an
  override exists for that date, otherwise the settings default.
- Liters are summed per category over days 1..days_in_month; the amount is
  liters x global rate. No proration and no rate history: changing the rate
  re-prices the whole month, because overrides store quantities only.
- Values stay unrounded floats. format_money / format_liters round for display.

Everything here is a pure function so it can be shared by the API, the UI
state machine and the tests.
"""

import calendar
from datetime import date
from typing import Iterable, Mapping, Optional

from src.models.ledger import (
    Category,
    CategoryBill,
    DayStatus,
    DeliveryOverride,
    DeliverySettings,
    MonthlyBill,
)


# Sunday-first weeks, matching the calendar grid
_GRID = calendar.Calendar(firstweekday=calendar.SUNDAY)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def format_date_key(day: date) -> str:
    """Format a date as the fixed-width "YYYY-MM-DD" override key."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def month_bounds(year: int, month: int) -> tuple[str, str]:
    """
    First and last date keys of a month, both inclusive.

    Because keys are zero-padded and fixed-width, a plain string comparison
    against these bounds selects exactly the days of the month.
    """
    first = date(year, month, 1)
    last = date(year, month, days_in_month(year, month))
    return format_date_key(first), format_date_key(last)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move a (year, month) pair by delta months, rolling over year ends."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_grid(year: int, month: int) -> list[list[Optional[date]]]:
    """
    Weeks of the month as rows of seven cells, Sunday first.

    Cells before the 1st and after the last day are None.
    """
    return [
        [day if day.month == month else None for day in week]
        for week in _GRID.monthdatescalendar(year, month)
    ]


def index_overrides(
    overrides: Iterable[DeliveryOverride],
) -> dict[str, DeliveryOverride]:
    """Key overrides by date. A later record for the same date wins."""
    return {override.date: override for override in overrides}


def effective_amount(
    settings: DeliverySettings,
    overrides_by_date: Mapping[str, DeliveryOverride],
    day: date,
    category: Category,
) -> float:
    """Liters billed for one category on one day."""
    override = overrides_by_date.get(format_date_key(day))
    if override is not None:
        return override.amount_for(category)
    return settings.default_for(category)


def day_status(
    settings: DeliverySettings,
    override: Optional[DeliveryOverride],
) -> DayStatus:
    """
    Classify a day against the current defaults.

    - no override: DEFAULT
    - override of zero in both categories: NO_DELIVERY
    - override differing from a default in either category: MODIFIED
    - override equal to both defaults: DEFAULT
    """
    if override is None:
        return DayStatus.DEFAULT
    if override.is_no_delivery:
        return DayStatus.NO_DELIVERY
    if (
        override.category1_amount != settings.default_category1
        or override.category2_amount != settings.default_category2
    ):
        return DayStatus.MODIFIED
    return DayStatus.DEFAULT


def calculate_bill(
    settings: DeliverySettings,
    overrides: Iterable[DeliveryOverride],
    year: int,
    month: int,
) -> MonthlyBill:
    """
    Aggregate a month's deliveries into a bill.

    Overrides dated outside the requested month are ignored, so callers may
    pass a superset without skewing the totals.
    """
    first_key, last_key = month_bounds(year, month)
    in_month = index_overrides(
        o for o in overrides if first_key <= o.date <= last_key
    )

    totals = {category: 0.0 for category in Category}
    active = {category: 0 for category in Category}

    for day_number in range(1, days_in_month(year, month) + 1):
        day = date(year, month, day_number)
        for category in Category:
            amount = effective_amount(settings, in_month, day, category)
            totals[category] += amount
            if amount > 0:
                active[category] += 1

    def category_bill(category: Category) -> CategoryBill:
        return CategoryBill(
            total_liters=totals[category],
            total_amount=totals[category] * settings.global_rate,
            active_days=active[category],
        )

    return MonthlyBill(
        year=year,
        month=month,
        global_rate=settings.global_rate,
        days_in_month=days_in_month(year, month),
        category1=category_bill(Category.CATEGORY_1),
        category2=category_bill(Category.CATEGORY_2),
    )


def format_money(amount: float) -> str:
    """Rs amount rounded to 2 decimals."""
    return f"{amount:.2f}"


def format_liters(liters: float) -> str:
    """Liters rounded to 1 decimal."""
    return f"{liters:.1f}"
