"""
Settings endpoints - the rate and the two category defaults.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from src.api.dependencies import get_ledger
from src.models.ledger import DeliverySettings
from src.orchestrator import LedgerService

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def get_settings(ledger: LedgerService = Depends(get_ledger)):
    """The persisted settings, or the server defaults if none were saved."""
    settings = await ledger.load_settings()
    return settings.to_document()


@router.post("")
async def save_settings(
    payload: dict[str, Any] = Body(...),
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Replace the settings singleton.

    Non-numeric values are stored as 0; negative values are rejected.
    """
    try:
        settings = DeliverySettings.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid settings: {e.errors(include_url=False)[0]['msg']}",
        )

    await ledger.save_settings(settings)
    return {"success": True}
