"""
Session cookie policy shared by the gate middleware and the auth router.

The cookie only ever carries the opaque session id. Flags are identical in dev
and prod so that local runs exercise the same browser behavior.
"""

from __future__ import annotations


def session_cookie_kwargs(environment: str) -> dict:
    """Keyword arguments for `Response.set_cookie` of the session cookie.

    `samesite="lax"` so the cookie survives the top-level redirect back from
    the identity provider; `secure` and `httponly` are unconditional.
    """
    return {"httponly": True, "secure": True, "samesite": "lax", "path": "/"}
