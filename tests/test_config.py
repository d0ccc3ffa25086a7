"""
Tests for configuration loading.
"""

import pytest

from src.config import AppSettings, MongoSettings, validate_all_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)  # keep a developer's .env out of the way
    for name in [
        "ADMIN_USERNAME", "ADMIN_PASSWORD", "MONGODB_URI",
        "GOOGLE_SHEETS_CREDENTIALS_PATH", "GOOGLE_SHEETS_SPREADSHEET_ID",
        "APP_STORAGE_BACKEND", "APP_SERVER_DEFAULT_RATE", "APP_CLIENT_DEFAULT_RATE",
    ]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAppSettings:
    """Tests for application defaults."""

    def test_default_rates(self, clean_env):
        """Test that the server and UI fallback rates stay separate values."""
        settings = AppSettings()
        assert settings.server_default_rate == 150.0
        assert settings.client_default_rate == 60.0
        assert settings.storage_backend == "mongodb"

    def test_env_override(self, clean_env):
        clean_env.setenv("APP_SERVER_DEFAULT_RATE", "60")
        clean_env.setenv("APP_STORAGE_BACKEND", "memory")

        settings = AppSettings()
        assert settings.server_default_rate == 60.0
        assert settings.storage_backend == "memory"

    def test_unknown_backend_rejected(self, clean_env):
        clean_env.setenv("APP_STORAGE_BACKEND", "cassandra")
        with pytest.raises(ValueError):
            AppSettings()

    def test_cors_origins_list(self, clean_env):
        settings = AppSettings(cors_allow_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestMongoSettings:

    def test_uri_required(self, clean_env):
        with pytest.raises(ValueError):
            MongoSettings()

    def test_defaults(self, clean_env):
        clean_env.setenv("MONGODB_URI", "mongodb://localhost:27017")
        settings = MongoSettings()
        assert settings.database == "milkman"
        assert settings.overrides_collection == "overrides"


class TestValidateAllSettings:
    """Tests for the startup configuration check."""

    def test_reports_missing_configuration(self, clean_env):
        status = validate_all_settings()

        assert status["auth"] is False
        assert "ADMIN_USERNAME" in status["auth_error"]
        assert status["mongodb"] is False
        assert "mongodb_error" in status
        assert status["app"] is True

    def test_reports_configured_services(self, clean_env):
        clean_env.setenv("ADMIN_USERNAME", "admin")
        clean_env.setenv("ADMIN_PASSWORD", "s3cret")
        clean_env.setenv("MONGODB_URI", "mongodb://localhost:27017")

        status = validate_all_settings()
        assert status["auth"] is True
        assert status["mongodb"] is True
