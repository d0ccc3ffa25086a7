"""
Ledger API Client

Thin requests-based wrapper around the four endpoints the calendar uses.
Every failure (transport error, non-2xx status, unparseable body) is raised
as ApiError; nothing is retried.
"""

from typing import Any, Optional

import requests

from src.models.ledger import DeliveryOverride, DeliverySettings


class ApiError(Exception):
    """A call to the ledger API did not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LedgerApiClient:
    """Client for the ledger HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(f"Could not reach the ledger API: {e}")

        if not response.ok:
            raise ApiError(
                f"{method} {path} failed with {response.status_code}: {self._error_text(response)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise ApiError(f"{method} {path} returned a non-JSON body", response.status_code)

    @staticmethod
    def _error_text(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason or ""
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("error") or body.get("message") or body)
        return str(body)

    def authenticate(self, username: str, password: str) -> bool:
        """True on a credential match, False on 401. Other failures raise."""
        try:
            body = self._request(
                "POST", "/api/auth", json={"username": username, "password": password}
            )
        except ApiError as e:
            if e.status_code == 401:
                return False
            raise
        return bool(body.get("success"))

    def get_settings(self) -> DeliverySettings:
        return DeliverySettings.model_validate(self._request("GET", "/api/settings"))

    def save_settings(self, settings: DeliverySettings) -> None:
        self._request(
            "POST",
            "/api/settings",
            json={
                "globalRate": settings.global_rate,
                "defaultCategory1": settings.default_category1,
                "defaultCategory2": settings.default_category2,
            },
        )

    def list_overrides(self, year: int, month: int) -> list[DeliveryOverride]:
        body = self._request(
            "GET", "/api/overrides", params={"year": year, "month": month}
        )
        return [DeliveryOverride.model_validate(item) for item in body]

    def save_override(self, date_key: str, category1_amount: float, category2_amount: float) -> None:
        self._request(
            "POST",
            "/api/overrides",
            json={
                "date": date_key,
                "category1Amount": category1_amount,
                "category2Amount": category2_amount,
            },
        )
