"""
Core Data Models for Milkman Ledger

These models define the schemas for everything that crosses a boundary:
the settings singleton, per-date overrides, and the derived monthly bill.

DESIGN DECISION: Python attributes are snake_case, but the wire format is the
camelCase JSON the calendar has always spoken (globalRate, category1Amount...).
Both spellings are accepted on input; responses are dumped by alias.

Quantities and rates are plain floats. Rounding happens only when a value is
presented (see src.billing.engine.format_money / format_liters).
"""

import math
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


DATE_KEY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def coerce_number(value: Any) -> float:
    """
    Coerce loosely-typed numeric input to a float.

    Empty strings, None, booleans and anything that doesn't parse as a finite
    number become 0. Valid numbers (including numeric strings) pass through.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def validate_date_key(value: str) -> str:
    """Check a "YYYY-MM-DD" key is fixed-width and names a real calendar day."""
    if not isinstance(value, str) or not DATE_KEY_PATTERN.match(value):
        raise ValueError(f"Date must be formatted YYYY-MM-DD, got {value!r}")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Not a calendar date: {value}")
    return value


# =============================================================================
# ENUMS
# =============================================================================

class Category(int, Enum):
    """The two independently tracked delivery lines."""
    CATEGORY_1 = 1
    CATEGORY_2 = 2


class DayStatus(str, Enum):
    """
    How a calendar day relates to the defaults.

    NO_DELIVERY wins over MODIFIED: an override of {0, 0} is a skipped day
    even if the defaults happen to be zero too.
    """
    DEFAULT = "default"
    MODIFIED = "modified"
    NO_DELIVERY = "no_delivery"


# =============================================================================
# PERSISTED MODELS
# =============================================================================

class DeliverySettings(BaseModel):
    """
    The settings singleton: one rate and the two daily defaults.

    Writes replace the whole document; there is no partial update.
    """
    model_config = ConfigDict(populate_by_name=True)

    global_rate: float = Field(
        default=0.0,
        ge=0,
        alias="globalRate",
        description="Price per liter, applied to both categories"
    )
    default_category1: float = Field(
        default=0.0,
        ge=0,
        alias="defaultCategory1",
        description="Liters of category 1 delivered on a day with no override"
    )
    default_category2: float = Field(
        default=0.0,
        ge=0,
        alias="defaultCategory2",
        description="Liters of category 2 delivered on a day with no override"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        alias="updatedAt",
        description="Set by the store on every write"
    )

    @field_validator("global_rate", "default_category1", "default_category2", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> float:
        return coerce_number(v)

    def default_for(self, category: Category) -> float:
        """Default daily liters for a category."""
        if category == Category.CATEGORY_1:
            return self.default_category1
        return self.default_category2

    def to_document(self) -> dict:
        """Serialize to the camelCase document shape used on the wire and in stores."""
        return self.model_dump(by_alias=True, mode="json")


class DeliveryOverride(BaseModel):
    """
    Replacement quantities for a single date.

    The date key is the identity: writing an override for a date that
    already has one replaces it entirely.
    """
    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(
        ...,
        description="Day key formatted YYYY-MM-DD"
    )
    category1_amount: float = Field(
        default=0.0,
        ge=0,
        alias="category1Amount",
    )
    category2_amount: float = Field(
        default=0.0,
        ge=0,
        alias="category2Amount",
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        alias="updatedAt",
    )

    @field_validator("date")
    @classmethod
    def check_date_key(cls, v: str) -> str:
        return validate_date_key(v)

    @field_validator("category1_amount", "category2_amount", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> float:
        return coerce_number(v)

    @property
    def day(self):
        """The override's date as a datetime.date."""
        return date.fromisoformat(self.date)

    def amount_for(self, category: Category) -> float:
        if category == Category.CATEGORY_1:
            return self.category1_amount
        return self.category2_amount

    @property
    def is_no_delivery(self) -> bool:
        return self.category1_amount == 0 and self.category2_amount == 0

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# DERIVED MODELS
# =============================================================================

class CategoryBill(BaseModel):
    """Monthly totals for one category."""
    model_config = ConfigDict(populate_by_name=True)

    total_liters: float = Field(default=0.0, ge=0, alias="totalLiters")
    total_amount: float = Field(default=0.0, ge=0, alias="totalAmount")
    active_days: int = Field(default=0, ge=0, alias="activeDays")


class MonthlyBill(BaseModel):
    """
    The invoice for one calendar month.

    Derived on demand from the current settings and that month's overrides.
    Never persisted: a rate change re-prices the whole month.
    """
    model_config = ConfigDict(populate_by_name=True)

    year: int = Field(..., ge=1)
    month: int = Field(..., ge=1, le=12)
    global_rate: float = Field(..., ge=0, alias="globalRate")
    days_in_month: int = Field(..., ge=28, le=31, alias="daysInMonth")
    category1: CategoryBill
    category2: CategoryBill

    @computed_field(alias="grandTotal")
    @property
    def grand_total(self) -> float:
        return self.category1.total_amount + self.category2.total_amount

    def for_category(self, category: Category) -> CategoryBill:
        if category == Category.CATEGORY_1:
            return self.category1
        return self.category2
