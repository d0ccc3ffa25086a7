"""
Bill endpoint - a month's invoice computed from persisted data.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_ledger, parse_year_month
from src.orchestrator import LedgerService

router = APIRouter(prefix="/api/bill", tags=["bill"])


@router.get("")
async def get_bill(
    year: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None),
    ledger: LedgerService = Depends(get_ledger),
):
    year_number, month_number = parse_year_month(year, month)
    bill = await ledger.calculate_bill(year_number, month_number)
    return bill.model_dump(by_alias=True, mode="json")
