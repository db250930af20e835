"""
Authentication-related FastAPI routes (router-only module).

Why:
    Keep the public sign-in/sign-up pages and logout in a dedicated router.
    Token issuance happens in the external identity service; this module only
    renders the entry pages and ends server-side sessions.

Notes:
    - `/signin` and `/signup` are protected by the public-route gate in the
      middleware: signed-in users are redirected to their default route before
      these handlers run.
    - This module imports `main` inside functions to reuse the shared session
      store, cookie name and settings.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
import logging
import re
from typing import Optional

from backend.web.auth_utils import session_cookie_kwargs
from backend.web.components import Layout


auth_router = APIRouter(tags=["Auth"])  # explicit paths, no prefix
logger = logging.getLogger("haven.web.auth")

# Single source of truth for allowed in-app redirect paths
# Disallow double slashes and path traversal (".."), allow dots in names
INAPP_PATH_PATTERN = re.compile(r"^(?!.*//)(?!.*\.\.)/[A-Za-z0-9._\-/]*$")
# Query part of a return location: plain key=value pairs, percent-encoded
INAPP_QUERY_PATTERN = re.compile(r"^[A-Za-z0-9._\-~%+=&]*$")
MAX_INAPP_REDIRECT_LEN = 256


def _is_inapp_path(value: str) -> bool:
    """Return True if value is an absolute in-app location, e.g., "/resources?tab=2".

    Why:
        The sign-in page carries the page the user originally asked for,
        including its query. Only internal paths without scheme/host or
        fragment are accepted, to avoid open redirects.
    Examples (accepted):
        "/", "/resources", "/insights/anxiety", "/resources?tab=2&q=a%20b"
    Examples (rejected):
        "resources" (not absolute), "https://evil.com", "/a#b", "/..",
        "/a?next=//evil.com"
    """
    if not value or not isinstance(value, str):
        return False
    if len(value) > MAX_INAPP_REDIRECT_LEN:
        return False
    path, sep, query = value.partition("?")
    if not INAPP_PATH_PATTERN.match(path):
        return False
    return not sep or bool(INAPP_QUERY_PATTERN.match(query))


def _private_html(content: str, *, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(content=content, status_code=status_code, headers={"Cache-Control": "private, no-store"})


@auth_router.get("/signin", response_class=HTMLResponse)
async def signin_page(request: Request, next: Optional[str] = None):
    """Render the sign-in entry page.

    The optional `next` parameter is echoed back only when it is a safe in-app
    path; anything else is dropped silently.
    """
    safe_next = next if (next and _is_inapp_path(next)) else ""
    body = Layout(
        title="Sign in",
        current_path="/signin",
        content=(
            '<section class="auth-card">'
            "<h1>Sign in</h1>"
            f'<p data-next="{Layout.escape(safe_next)}">Use your school account to continue.</p>'
            '<p>New here? <a href="/signup">Create an account</a>.</p>'
            "</section>"
        ),
    ).render()
    return _private_html(body)


@auth_router.get("/signup", response_class=HTMLResponse)
async def signup_page(request: Request):
    body = Layout(
        title="Sign up",
        current_path="/signup",
        content=(
            '<section class="auth-card">'
            "<h1>Create your account</h1>"
            '<p>Already registered? <a href="/signin">Sign in</a>.</p>'
            "</section>"
        ),
    ).render()
    return _private_html(body)


@auth_router.post("/auth/logout")
async def auth_logout(request: Request):
    """End the server-side session and return to the sign-in page.

    Best-effort: store failures are logged, the cookie is cleared regardless.
    """
    from backend.web import main as mod

    sid = request.cookies.get(mod.SESSION_COOKIE_NAME)
    if sid:
        try:
            mod.SESSION_STORE.delete(sid)
        except Exception as exc:
            logger.warning("Session delete failed during logout: %s", exc.__class__.__name__)

    resp = RedirectResponse(url=mod.ONBOARDING_SETTINGS.signin_path, status_code=303)
    resp.headers["Cache-Control"] = "private, no-store"
    resp.set_cookie(
        key=mod.SESSION_COOKIE_NAME,
        value="",
        expires=0,
        max_age=0,
        **session_cookie_kwargs(mod.SETTINGS.environment),
    )
    return resp
