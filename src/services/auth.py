"""
Auth Gate

A shared username/password pair, configured through ADMIN_USERNAME and
ADMIN_PASSWORD, guards the calendar UI.

This is a convenience gate, not a security boundary: there are no tokens,
and the settings/override endpoints do not check anything. The UI keeps an
AuthSession with an expiry instead of a bare "authenticated" flag.
"""

import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from src.config import AuthSettings, get_settings


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def verify_credentials(
    username: str,
    password: str,
    auth_settings: Optional[AuthSettings] = None,
) -> bool:
    """
    Check submitted credentials against the configured pair.

    Fails closed: if either secret is unset, nothing matches.
    """
    auth_settings = auth_settings or get_settings().auth
    if not auth_settings.is_configured:
        return False

    # Compare both halves even if the first fails, so timing reveals nothing
    username_ok = hmac.compare_digest(
        (username or "").encode("utf-8"),
        auth_settings.username.encode("utf-8"),
    )
    password_ok = hmac.compare_digest(
        (password or "").encode("utf-8"),
        auth_settings.password.encode("utf-8"),
    )
    return username_ok and password_ok


class AuthSession(BaseModel):
    """A logged-in UI session. Valid until expires_at, then the login form returns."""

    username: str
    authenticated_at: datetime = Field(default_factory=_utcnow)
    expires_at: datetime

    @classmethod
    def start(
        cls,
        username: str,
        ttl_hours: float,
        now: Optional[datetime] = None,
    ) -> "AuthSession":
        now = now or _utcnow()
        return cls(
            username=username,
            authenticated_at=now,
            expires_at=now + timedelta(hours=ttl_hours),
        )

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return (now or _utcnow()) < self.expires_at
