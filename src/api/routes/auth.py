"""
Auth endpoint - checks the shared operator credentials.

No token is issued; the caller only learns whether the pair matched.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.dependencies import get_ledger
from src.orchestrator import LedgerService

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Login form body."""
    username: Optional[str] = None
    password: Optional[str] = None


@router.post("")
def authenticate(
    credentials: LoginRequest,
    ledger: LedgerService = Depends(get_ledger),
):
    """200 {success: true} on a match, 401 {success: false} otherwise."""
    if ledger.authenticate(credentials.username or "", credentials.password or ""):
        return {"success": True, "message": "Authentication successful"}

    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"success": False, "message": "Invalid username or password"},
    )
