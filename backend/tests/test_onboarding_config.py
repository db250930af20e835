"""
Onboarding settings: defaults and environment overrides.
"""
from __future__ import annotations

import pytest

from backend.onboarding.config import RECORDS_API_URL_DEFAULT, load_onboarding_settings


def test_defaults():
    s = load_onboarding_settings()
    assert s.records_api_url == RECORDS_API_URL_DEFAULT
    assert s.records_api_token is None
    assert s.records_api_timeout == 10.0
    assert s.probe_timeout is None
    assert s.fail_open is True
    assert (s.signin_path, s.consent_path, s.inventory_path) == ("/signin", "/consent", "/inventory")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HAVEN_RECORDS_API_URL", "https://records.example.org/api")
    monkeypatch.setenv("HAVEN_RECORDS_API_TOKEN", "tok")
    monkeypatch.setenv("HAVEN_PROBE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("HAVEN_PROBE_FAIL_OPEN", "false")
    monkeypatch.setenv("HAVEN_CONSENT_PATH", "/forms/consent")

    s = load_onboarding_settings()
    assert s.records_api_url == "https://records.example.org/api"
    assert s.records_api_token == "tok"
    assert s.probe_timeout == 2.5
    assert s.fail_open is False
    assert s.consent_path == "/forms/consent"


@pytest.mark.parametrize("raw", ["abc", "0", "-1"])
def test_invalid_timeouts_raise(monkeypatch: pytest.MonkeyPatch, raw):
    monkeypatch.setenv("HAVEN_PROBE_TIMEOUT_SECONDS", raw)
    with pytest.raises(ValueError, match="HAVEN_PROBE_TIMEOUT_SECONDS"):
        load_onboarding_settings()
    monkeypatch.delenv("HAVEN_PROBE_TIMEOUT_SECONDS")
    monkeypatch.setenv("HAVEN_RECORDS_API_TIMEOUT_SECONDS", raw)
    with pytest.raises(ValueError, match="HAVEN_RECORDS_API_TIMEOUT_SECONDS"):
        load_onboarding_settings()


def test_invalid_fail_open_flag_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HAVEN_PROBE_FAIL_OPEN", "maybe")
    with pytest.raises(ValueError):
        load_onboarding_settings()


@pytest.mark.parametrize("raw", ["consent", "//evil.example", "https://evil.example"])
def test_redirect_paths_must_be_in_app(monkeypatch: pytest.MonkeyPatch, raw):
    monkeypatch.setenv("HAVEN_INVENTORY_PATH", raw)
    with pytest.raises(ValueError):
        load_onboarding_settings()
