"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend (the gate core is written against
asyncio) and reset module-level singletons of the web app between tests.
"""
import sys
from pathlib import Path

import pytest

# Ensure `backend.*` is importable when running from a source checkout.
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_haven_env(monkeypatch: pytest.MonkeyPatch):
    """Clear env-driven toggles that may leak from the developer shell."""
    for var in (
        "HAVEN_ENV",
        "HAVEN_PROBE_FAIL_OPEN",
        "HAVEN_PROBE_TIMEOUT_SECONDS",
        "HAVEN_RECORDS_API_TIMEOUT_SECONDS",
        "HAVEN_RECORDS_API_URL",
        "HAVEN_RECORDS_API_TOKEN",
        "HAVEN_SIGNIN_PATH",
        "HAVEN_CONSENT_PATH",
        "HAVEN_INVENTORY_PATH",
        "SESSIONS_BACKEND",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_web_singletons(monkeypatch: pytest.MonkeyPatch):
    """Give every test a fresh session store and the default gate wiring.

    Why:
        Web tests install fake record-service boundaries and create sessions.
        Without a reset, both leak into unrelated tests in a full run.
    """
    mod = sys.modules.get("backend.web.main")
    if mod is None:
        yield
        return
    from backend.identity_access.stores import SessionStore

    monkeypatch.setattr(mod, "SESSION_STORE", SessionStore())
    mod.SETTINGS.override_environment(None)
    consent, inventory = mod._default_boundaries()
    mod.install_boundaries(consent, inventory)
    yield
