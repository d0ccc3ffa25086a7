"""
FastAPI application for Milkman Ledger.

Endpoints:
- POST /api/auth        shared-credential check
- GET/POST /api/settings
- GET/POST /api/overrides
- GET /api/bill         month invoice from persisted data
- GET /health

Error mapping (every error body carries an "error" key):
- HTTPException         -> its status, {"error": detail}
- request validation    -> 400
- wrong verb            -> 405
- StorageError          -> 500 with a generic message
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src import __version__
from src.api.routes.auth import router as auth_router
from src.api.routes.bill import router as bill_router
from src.api.routes.overrides import router as overrides_router
from src.api.routes.settings import router as settings_router
from src.config import get_settings
from src.events import EventLogger
from src.orchestrator import LedgerService, create_app_components
from src.services.storage import StorageError


def create_app(ledger: Optional[LedgerService] = None) -> FastAPI:
    """
    Build the API.

    Args:
        ledger: Service to serve from. Defaults to one built from
                APP_STORAGE_BACKEND.
    """
    app_settings = get_settings().app
    events = EventLogger("milkman.api")

    app = FastAPI(
        title="Milkman Ledger",
        description="Daily milk delivery calendar and monthly billing",
        version=__version__,
        debug=app_settings.debug_mode,
    )
    app.state.ledger = ledger or create_app_components(event_logger=events)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)  # /api/auth
    app.include_router(settings_router)  # /api/settings
    app.include_router(overrides_router)  # /api/overrides
    app.include_router(bill_router)  # /api/bill

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request", "details": str(exc.errors())},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        # The service already logged the failure with its correlation id
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "details": str(exc)},
        )

    @app.get("/health")
    def health():
        ledger = app.state.ledger
        if not ledger.storage_available:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unavailable", "storage": ledger.backend_name},
            )
        return {"status": "ok", "storage": ledger.backend_name}

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
