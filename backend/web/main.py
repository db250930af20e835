"Haven web app"
from __future__ import annotations

import logging
import os
from typing import Optional
from urllib.parse import urlencode

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from backend.identity_access.session import (
    SessionResolutionError,
    SessionState,
    StoreSessionOracle,
    UNINITIALIZED,
)
from backend.identity_access.stores import SessionStore
from backend.onboarding.chain import ChainOutcome, GateChain
from backend.onboarding.clients import ConsentServiceClient, InventoryServiceClient
from backend.onboarding.config import load_onboarding_settings
from backend.onboarding.ports import ConsentBoundary, InventoryBoundary
from backend.onboarding.routes import GateRouter, build_gate_router
from backend.onboarding.verdicts import Location, Pass, Redirect
from backend.web import config as _cfg
from backend.web.components import Layout, LoadingPlaceholder


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via HAVEN_ENABLE_DOTENV (default true outside pytest).
    """
    import sys
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("HAVEN_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

# --- App & Settings Setup -------------------------------------------------------

class AuthSettings:
    def __init__(self) -> None:
        self._env_override: str | None = None

    @property
    def environment(self) -> str:
        if self._env_override is not None:
            return self._env_override
        return os.getenv("HAVEN_ENV", "dev").lower()

    def override_environment(self, env: str | None) -> None:
        """Override environment for tests (e.g., "prod"), or reset with None."""
        self._env_override = env

logger = logging.getLogger("haven.web")
SETTINGS = AuthSettings()
SESSION_COOKIE_NAME = "haven_session"

app = FastAPI(title="Haven", description="Student guidance portal", version="0.1.0")

from backend.web.routes.auth import auth_router

app.include_router(auth_router)

# --- Sessions & Onboarding Wiring ----------------------------------------------

def _under_pytest() -> bool:
    import sys
    return "pytest" in sys.modules or bool(os.getenv("PYTEST_CURRENT_TEST"))

if (not _under_pytest()) and os.getenv("SESSIONS_BACKEND", "memory").lower() == "db":
    from backend.identity_access.stores_db import DBSessionStore
    SESSION_STORE = DBSessionStore()
else:
    SESSION_STORE = SessionStore()

ONBOARDING_SETTINGS = load_onboarding_settings()


def _default_boundaries() -> tuple[ConsentServiceClient, InventoryServiceClient]:
    kwargs = {
        "token": ONBOARDING_SETTINGS.records_api_token,
        "timeout": ONBOARDING_SETTINGS.records_api_timeout,
    }
    return (
        ConsentServiceClient(ONBOARDING_SETTINGS.records_api_url, **kwargs),
        InventoryServiceClient(ONBOARDING_SETTINGS.records_api_url, **kwargs),
    )


CONSENT_BOUNDARY, INVENTORY_BOUNDARY = _default_boundaries()
GATE_ROUTER: GateRouter = build_gate_router(ONBOARDING_SETTINGS, CONSENT_BOUNDARY, INVENTORY_BOUNDARY)


def install_boundaries(consent: ConsentBoundary, inventory: InventoryBoundary) -> GateRouter:
    """Rewire the gate router against other record-service boundaries.

    Used by tests and by deployments that provide their own adapters.
    """
    global CONSENT_BOUNDARY, INVENTORY_BOUNDARY, GATE_ROUTER
    CONSENT_BOUNDARY, INVENTORY_BOUNDARY = consent, inventory
    GATE_ROUTER = build_gate_router(ONBOARDING_SETTINGS, consent, inventory)
    return GATE_ROUTER


# --- Gate Enforcement Middleware ------------------------------------------------

_NO_STORE = "private, no-store"


def _resolve_session(request: Request) -> SessionState:
    oracle = StoreSessionOracle(SESSION_STORE, request.cookies.get(SESSION_COOKIE_NAME))
    try:
        return oracle.resolve()
    except SessionResolutionError as exc:
        logger.warning("Session resolution failed: %s", exc)
        return UNINITIALIZED


def _redirect_url(verdict: Redirect) -> str:
    """Redirect target; a carried return location travels as `?next=<path?query>`."""
    if verdict.return_to is None:
        return verdict.target
    return f"{verdict.target}?{urlencode({'next': verdict.return_to.url})}"


def _pending_response(request: Request, chain: GateChain, outcome: ChainOutcome) -> Response:
    gate = chain.gate(outcome.gate or "")
    message = gate.placeholder if gate is not None else "Loading..."
    placeholder = LoadingPlaceholder(message=message, gate=outcome.gate or "")
    headers = {"Cache-Control": _NO_STORE, "Refresh": "1"}
    if "HX-Request" in request.headers:
        return HTMLResponse(placeholder.render(), headers=headers)
    page = Layout(title="Loading", content=placeholder.render(), current_path=request.url.path)
    return HTMLResponse(page.render(), headers=headers)


def _verdict_response(request: Request, chain: GateChain, outcome: ChainOutcome) -> Response:
    verdict = outcome.verdict
    if isinstance(verdict, Redirect):
        url = _redirect_url(verdict)
        if "HX-Request" in request.headers:
            # HTMX swaps must not embed the target page; let the client navigate.
            return Response(status_code=200, headers={"HX-Redirect": url, "Cache-Control": _NO_STORE})
        resp = RedirectResponse(url=url, status_code=302)
        resp.headers["Cache-Control"] = _NO_STORE
        return resp
    return _pending_response(request, chain, outcome)


@app.middleware("http")
async def onboarding_gate(request: Request, call_next):
    chain = GATE_ROUTER.match(request.url.path)
    if chain is None:
        return await call_next(request)

    state = _resolve_session(request)
    location = Location(path=request.url.path, query=request.url.query)
    outcome = await chain.evaluate(state, location)
    if not isinstance(outcome.verdict, Pass):
        return _verdict_response(request, chain, outcome)

    # Expose minimal, read-only user context for downstream handlers.
    identity = state.identity
    request.state.user = (
        {"sub": identity.id, "role": identity.role, "student_id": identity.student_id} if identity else None
    )
    return await call_next(request)

# --- Security Headers Middleware ----------------------------------------------

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    if SETTINGS.environment == "prod":
        csp = (
            "default-src 'self'; script-src 'self'; style-src 'self'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
        )
    else:
        # Developer experience: allow inline for local SSR components.
        csp = (
            "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    if SETTINGS.environment == "prod":
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response

# --- Pages ------------------------------------------------------------------------

PAGE_TITLES = {
    "/home": "Home",
    "/consent": "Consent form",
    "/consent/results": "Mental health results",
    "/inventory": "Individual inventory",
    "/profile": "Profile",
    "/notifications": "Notifications",
    "/resources": "Resources",
    "/history": "History",
    "/messages": "Messages",
    "/appointments": "Appointments",
    "/help-support": "Help & support",
    "/activities": "Activities",
    "/dashboard": "Dashboard",
    "/reports": "Reports",
    "/students": "Students",
    "/consent-records": "Consent records",
    "/inventory-records": "Inventory records",
    "/accounts": "Accounts",
    "/aid-function": "Aid function",
}


def _render_page(request: Request, title: str) -> HTMLResponse:
    user: Optional[dict] = getattr(request.state, "user", None)
    content = f'<h1>{Layout.escape(title)}</h1>'
    page = Layout(title=title, content=content, user=user, current_path=request.url.path)
    return HTMLResponse(page.render(), headers={"Cache-Control": _NO_STORE})


def _page_handler(title: str):
    async def handler(request: Request):
        return _render_page(request, title)

    return handler


for _path, _title in PAGE_TITLES.items():
    app.add_api_route(_path, _page_handler(_title), methods=["GET"], response_class=HTMLResponse, include_in_schema=False)


@app.get("/insights/{kind}", response_class=HTMLResponse, include_in_schema=False)
async def insights_page(request: Request, kind: str):
    return _render_page(request, f"Insights: {kind}")


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url=ONBOARDING_SETTINGS.signin_path, status_code=302)


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "healthy"}
