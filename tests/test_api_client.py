"""
Tests for the requests-based API client (session mocked).
"""

import pytest
from unittest.mock import MagicMock

import requests

from src.client import ApiError, LedgerApiClient
from src.models.ledger import DeliverySettings


def make_response(status_code=200, body=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text
    response.reason = ""
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    return LedgerApiClient("http://ledger.test/", timeout=3, session=session)


class TestRequests:
    """Tests for URL building and error mapping."""

    def test_get_settings(self, api, session):
        session.request.return_value = make_response(body={
            "globalRate": 150, "defaultCategory1": 2, "defaultCategory2": 2.5, "updatedAt": None,
        })

        settings = api.get_settings()

        assert settings.global_rate == 150.0
        session.request.assert_called_once_with(
            "GET", "http://ledger.test/api/settings", timeout=3
        )

    def test_non_2xx_raises(self, api, session):
        session.request.return_value = make_response(500, {"error": "Internal server error"})

        with pytest.raises(ApiError) as exc_info:
            api.get_settings()

        assert exc_info.value.status_code == 500
        assert "Internal server error" in str(exc_info.value)

    def test_transport_error_raises(self, api, session):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ApiError) as exc_info:
            api.list_overrides(2024, 2)

        assert exc_info.value.status_code is None

    def test_non_json_body_raises(self, api, session):
        session.request.return_value = make_response(200, None, text="<html>")

        with pytest.raises(ApiError):
            api.get_settings()


class TestEndpoints:
    """Tests for each wrapped call."""

    def test_authenticate_success(self, api, session):
        session.request.return_value = make_response(body={"success": True})
        assert api.authenticate("admin", "pw") is True

        kwargs = session.request.call_args.kwargs
        assert kwargs["json"] == {"username": "admin", "password": "pw"}

    def test_authenticate_401_is_false(self, api, session):
        session.request.return_value = make_response(401, {"success": False})
        assert api.authenticate("admin", "wrong") is False

    def test_authenticate_other_failures_raise(self, api, session):
        session.request.return_value = make_response(503, None, text="down")

        with pytest.raises(ApiError):
            api.authenticate("admin", "pw")

    def test_save_settings_sends_camel_case(self, api, session):
        session.request.return_value = make_response(body={"success": True})

        api.save_settings(DeliverySettings(global_rate=60, default_category1=2, default_category2=0))

        assert session.request.call_args.kwargs["json"] == {
            "globalRate": 60.0,
            "defaultCategory1": 2.0,
            "defaultCategory2": 0.0,
        }

    def test_list_overrides(self, api, session):
        session.request.return_value = make_response(body=[
            {"date": "2024-02-05", "category1Amount": 0, "category2Amount": 0},
        ])

        overrides = api.list_overrides(2024, 2)

        assert overrides[0].is_no_delivery
        assert session.request.call_args.kwargs["params"] == {"year": 2024, "month": 2}

    def test_save_override(self, api, session):
        session.request.return_value = make_response(body={"success": True})

        api.save_override("2024-02-05", 1.0, 0.5)

        args = session.request.call_args
        assert args.args == ("POST", "http://ledger.test/api/overrides")
        assert args.kwargs["json"] == {
            "date": "2024-02-05",
            "category1Amount": 1.0,
            "category2Amount": 0.5,
        }
