"""
Override endpoints - per-day quantities.

GET lists a month, POST upserts one day. There is no delete: to "clear" a
day, write the defaults (or zeros for no delivery).
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError

from src.api.dependencies import get_ledger, parse_year_month
from src.models.ledger import DeliveryOverride
from src.orchestrator import LedgerService

router = APIRouter(prefix="/api/overrides", tags=["overrides"])


@router.get("")
async def list_overrides(
    year: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None),
    ledger: LedgerService = Depends(get_ledger),
):
    """Overrides whose date falls within the month, inclusive."""
    year_number, month_number = parse_year_month(year, month)
    overrides = await ledger.list_overrides(year_number, month_number)
    return [override.to_document() for override in overrides]


@router.post("")
async def save_override(
    payload: dict[str, Any] = Body(...),
    ledger: LedgerService = Depends(get_ledger),
):
    """Upsert the override for payload["date"], replacing both quantities."""
    if not payload.get("date"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date is required",
        )

    try:
        override = DeliveryOverride.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid override: {e.errors(include_url=False)[0]['msg']}",
        )

    await ledger.save_override(override)
    return {"success": True}
