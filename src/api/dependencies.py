"""
Shared request helpers for the API routes.
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from src.orchestrator import LedgerService


def get_ledger(request: Request) -> LedgerService:
    """Dependency - the LedgerService the app was created with."""
    return request.app.state.ledger


def parse_year_month(year: Optional[str], month: Optional[str]) -> tuple[int, int]:
    """
    Validate the ?year=YYYY&month=M query pair.

    Raises:
        HTTPException(400): if either is missing or out of range
    """
    if not year or not month:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Year and month are required",
        )
    try:
        year_number = int(year)
        month_number = int(month)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Year and month must be integers",
        )
    if not 1 <= year_number <= 9999 or not 1 <= month_number <= 12:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Year must be 1-9999 and month 1-12",
        )
    return year_number, month_number
