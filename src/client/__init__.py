"""HTTP client the UI uses to reach the API."""

from src.client.api_client import ApiError, LedgerApiClient

__all__ = ["ApiError", "LedgerApiClient"]
