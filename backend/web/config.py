"""
Configuration and startup security checks for Haven.

Why: Student onboarding data is sensitive. This module provides a single
guard that enforces minimal production safety constraints without burdening
local development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Intent: Abort process startup when obviously insecure settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - Sessions must be durable (SESSIONS_BACKEND=db).
    - DATABASE_URL must not explicitly disable TLS.
    - The record service must be reached over HTTPS.
    - The record service token must not be a placeholder.
    - Onboarding settings must parse (fail-open flag, redirect paths).
    """

    env = os.getenv("HAVEN_ENV", "dev")
    if not _is_prod_like(env):
        return  # dev/test remain permissive

    # 1) Durable sessions
    backend = (os.getenv("SESSIONS_BACKEND", "memory") or "").strip().lower()
    if backend != "db":
        raise SystemExit(
            "Refusing to start: SESSIONS_BACKEND=db is mandatory in production/staging."
        )

    # 2) Postgres TLS: basic guard to avoid explicit disable
    dsn = os.getenv("DATABASE_URL", "")
    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: DATABASE_URL contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )

    # 3) Record service must use HTTPS
    records_url = (os.getenv("HAVEN_RECORDS_API_URL", "") or "").strip().lower()
    if not records_url.startswith("https://"):
        raise SystemExit(
            "Refusing to start: HAVEN_RECORDS_API_URL must be an https URL in production."
        )

    # 4) Record service token must be real when provided
    token = (os.getenv("HAVEN_RECORDS_API_TOKEN", "") or "").strip()
    if token.upper().startswith("CHANGE_ME"):
        raise SystemExit(
            "Refusing to start: HAVEN_RECORDS_API_TOKEN is a placeholder in production."
        )

    # 5) Onboarding settings must be well-formed
    try:
        from backend.onboarding.config import load_onboarding_settings

        load_onboarding_settings()
    except ValueError as exc:
        raise SystemExit(f"Refusing to start: invalid onboarding configuration ({exc}).")
