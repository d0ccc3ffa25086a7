"""Shared fixtures."""

import pytest

from src.config import AppSettings
from src.orchestrator import LedgerService
from src.services.storage import InMemoryOverrideStorage, InMemorySettingsStorage


@pytest.fixture
def app_settings():
    return AppSettings(
        server_default_rate=150,
        client_default_rate=60,
        default_category1=2.0,
        default_category2=2.5,
        autosave_delay_seconds=1.0,
        session_ttl_hours=12,
    )


@pytest.fixture
def operator_credentials(monkeypatch):
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "s3cret")
    return "admin", "s3cret"


@pytest.fixture
def ledger(app_settings):
    return LedgerService(
        settings_storage=InMemorySettingsStorage(),
        override_storage=InMemoryOverrideStorage(),
        app_settings=app_settings,
        backend_name="memory",
    )
