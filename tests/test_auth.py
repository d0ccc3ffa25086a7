"""
Tests for the auth gate.
"""

from datetime import datetime, timedelta, timezone

from src.config import AuthSettings
from src.services.auth import AuthSession, verify_credentials


class TestVerifyCredentials:
    """Tests for the shared credential check."""

    def test_match(self):
        auth = AuthSettings(username="admin", password="s3cret")
        assert verify_credentials("admin", "s3cret", auth) is True

    def test_wrong_password(self):
        auth = AuthSettings(username="admin", password="s3cret")
        assert verify_credentials("admin", "S3cret", auth) is False

    def test_wrong_username(self):
        auth = AuthSettings(username="admin", password="s3cret")
        assert verify_credentials("root", "s3cret", auth) is False

    def test_unconfigured_fails_closed(self):
        """Test that unset secrets never match, even an empty submission."""
        auth = AuthSettings(username="", password="")
        assert verify_credentials("", "", auth) is False

    def test_none_inputs(self):
        auth = AuthSettings(username="admin", password="s3cret")
        assert verify_credentials(None, None, auth) is False


class TestAuthSession:
    """Tests for the expiring UI session."""

    def test_start_sets_expiry(self):
        now = datetime(2024, 2, 5, 8, 0)
        session = AuthSession.start("admin", ttl_hours=12, now=now)

        assert session.authenticated_at == now
        assert session.expires_at == now + timedelta(hours=12)

    def test_valid_until_expiry(self):
        now = datetime(2024, 2, 5, 8, 0)
        session = AuthSession.start("admin", ttl_hours=1, now=now)

        assert session.is_valid(now + timedelta(minutes=59))
        assert not session.is_valid(now + timedelta(hours=1))

    def test_fresh_session_is_valid(self):
        assert AuthSession.start("admin", ttl_hours=1).is_valid()

    def test_timestamps_are_timezone_aware(self):
        session = AuthSession.start("admin", ttl_hours=1)

        assert session.authenticated_at.tzinfo is not None
        assert session.expires_at.tzinfo == timezone.utc
