"""Tests for ClientSettings and environment loading."""

from __future__ import annotations

import pytest

from meterdesk_sdk.auth import build_auth_headers
from meterdesk_sdk.config import ClientSettings, load_settings
from meterdesk_sdk.utils import clean_query, join_url, normalize_base_url


class TestClientSettings:
    def test_base_url_normalized(self) -> None:
        assert ClientSettings(base_url="  https://m.example.com///  ").base_url == "https://m.example.com"

    def test_repr_masks_token(self) -> None:
        s = ClientSettings(base_url="https://m", access_token="secret-token")
        assert "secret-token" not in repr(s)
        assert s.to_dict()["access_token"] == "configured"
        assert ClientSettings().to_dict()["access_token"] == "not set"

    def test_update_applies_in_place(self) -> None:
        s = ClientSettings()
        assert s.is_configured is False
        s.update(base_url="https://m.example.com/", user_id="3")
        assert s.base_url == "https://m.example.com"
        assert s.user_id == "3"
        assert s.is_configured is True

    def test_update_rejects_unknown_and_rolls_back(self) -> None:
        s = ClientSettings(base_url="https://a")
        with pytest.raises(ValueError):
            s.update(base_address="https://b")
        with pytest.raises(ValueError):
            s.update(base_url="https://b", log_format="xml")
        assert s.base_url == "https://a"
        assert s.log_format == "text"

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError):
            ClientSettings(timeout=0)


class TestLoadSettings:
    def test_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("METERDESK_BASE_URL", "https://env.example.com/")
        monkeypatch.setenv("METERDESK_USER_ID", "11")
        monkeypatch.setenv("METERDESK_ACCESS_TOKEN", "t")
        monkeypatch.setenv("METERDESK_TIMEOUT", "not-a-number")
        monkeypatch.setenv("METERDESK_LOG_FORMAT", "json")
        s = load_settings()
        assert s.base_url == "https://env.example.com"
        assert s.user_id == "11"
        assert s.access_token == "t"
        assert s.timeout == 30.0
        assert s.log_format == "json"

    def test_defaults_and_overrides(self, monkeypatch) -> None:
        monkeypatch.delenv("METERDESK_BASE_URL", raising=False)
        monkeypatch.delenv("METERDESK_USER_ID", raising=False)
        s = load_settings(timeout=5.0)
        assert s.base_url == ""
        assert s.user_id is None
        assert s.timeout == 5.0
        with pytest.raises(ValueError):
            load_settings(nope=1)


class TestHelpers:
    def test_join_url(self) -> None:
        assert join_url("https://m/", "/api") == "https://m/api"
        assert join_url("https://m", "api") == "https://m/api"
        assert join_url("https://m", "") == "https://m"
        assert join_url("", "/api") == "/api"

    def test_normalize_base_url(self) -> None:
        assert normalize_base_url("   ") == ""

    def test_clean_query(self) -> None:
        assert clean_query({"a": None, "b": 0, "c": False, "d": "x"}) == [("b", "0"), ("c", "false"), ("d", "x")]
        assert clean_query(None) == []

    def test_build_auth_headers(self) -> None:
        s = ClientSettings(user_id="1", access_token="t")
        assert build_auth_headers(s) == {"Identity": "1", "Authorization": "Bearer t"}
        assert build_auth_headers(s, send_identity=False, send_token=False) == {}
