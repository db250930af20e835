"""
Centralized onboarding gate configuration.

Intent:
    Single source of truth for record-service endpoints, redirect targets,
    the probe timeout and the fail-open policy, with environment overrides.

Behavior:
    - HAVEN_RECORDS_API_URL: base URL of the consent/inventory record service.
    - HAVEN_RECORDS_API_TOKEN: optional bearer token for that service.
    - HAVEN_RECORDS_API_TIMEOUT_SECONDS: HTTP timeout per request (default 10).
    - HAVEN_PROBE_TIMEOUT_SECONDS: optional positive probe budget. Unset means
      a hung probe keeps its gate Pending; invalid values raise ValueError.
    - HAVEN_PROBE_FAIL_OPEN: "true" (default) treats failed checks as
      "record exists"; "false" treats them as missing.
    - HAVEN_SIGNIN_PATH / HAVEN_CONSENT_PATH / HAVEN_INVENTORY_PATH: redirect
      targets (defaults "/signin", "/consent", "/inventory").

Permissions:
    Pure configuration; no external calls or privileges required.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

RECORDS_API_URL_DEFAULT = "http://localhost:5000/api"


@dataclass(frozen=True)
class OnboardingSettings:
    records_api_url: str = RECORDS_API_URL_DEFAULT
    records_api_token: Optional[str] = None
    records_api_timeout: float = 10.0
    probe_timeout: Optional[float] = None
    fail_open: bool = True
    signin_path: str = "/signin"
    consent_path: str = "/consent"
    inventory_path: str = "/inventory"


def _parse_bool_env(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    if raw in ("1", "true", "yes"):
        return True
    if raw in ("0", "false", "no"):
        return False
    raise ValueError(f"{name} must be true or false (got {raw!r})")


def _parse_seconds_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds (got {raw!r})") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive (got {raw!r})")
    return value


def _parse_path_env(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    if not raw.startswith("/") or raw.startswith("//"):
        raise ValueError(f"{name} must be an absolute in-app path (got {raw!r})")
    return raw


def load_onboarding_settings() -> OnboardingSettings:
    return OnboardingSettings(
        records_api_url=(os.getenv("HAVEN_RECORDS_API_URL") or RECORDS_API_URL_DEFAULT).strip(),
        records_api_token=(os.getenv("HAVEN_RECORDS_API_TOKEN") or "").strip() or None,
        records_api_timeout=_parse_seconds_env("HAVEN_RECORDS_API_TIMEOUT_SECONDS", 10.0),
        probe_timeout=_parse_seconds_env("HAVEN_PROBE_TIMEOUT_SECONDS", None),
        fail_open=_parse_bool_env("HAVEN_PROBE_FAIL_OPEN", True),
        signin_path=_parse_path_env("HAVEN_SIGNIN_PATH", "/signin"),
        consent_path=_parse_path_env("HAVEN_CONSENT_PATH", "/consent"),
        inventory_path=_parse_path_env("HAVEN_INVENTORY_PATH", "/inventory"),
    )


__all__ = ["OnboardingSettings", "RECORDS_API_URL_DEFAULT", "load_onboarding_settings"]
