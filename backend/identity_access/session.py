"""
Session state as seen by the onboarding gates.

Intent:
    Gates only ever *read* session state. The process-wide value lives in a
    `SessionContext` that hands out a read-only view (resolve + subscribe);
    its single writer is the `AuthBoundary`, which is driven by the external
    login/logout/refresh flows. The web adapter uses `StoreSessionOracle`
    instead, which resolves the caller from the session store per request.

Invariant:
    `initialized` stays False until the backing store was read at least once,
    even when the result is "no session". Gates answer Pending in that state.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, List, Optional, Protocol

from .domain import Identity, ROLE_STUDENT, primary_role


logger = logging.getLogger("haven.identity_access")


@dataclass(frozen=True)
class SessionState:
    identity: Optional[Identity] = None
    initialized: bool = False
    authenticating: bool = False

    @property
    def ready(self) -> bool:
        return self.initialized and not self.authenticating


UNINITIALIZED = SessionState()
ANONYMOUS = SessionState(identity=None, initialized=True)

SessionListener = Callable[[SessionState], None]


class SessionResolutionError(Exception):
    """Session state could not be resolved; gates treat this as Pending."""


class SessionOracle(Protocol):
    def resolve(self) -> SessionState:
        ...


class SessionView(Protocol):
    """Read-only handle on the process-wide session value."""

    def resolve(self) -> SessionState:
        ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        ...


class SessionContext:
    """Observable session value with a single writer (see `AuthBoundary`)."""

    def __init__(self, initial: SessionState = UNINITIALIZED) -> None:
        self._state = initial
        self._listeners: List[SessionListener] = []

    def resolve(self) -> SessionState:
        return self._state

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, state: SessionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)


class AuthBoundary:
    """Sole writer of a `SessionContext`.

    Parameters:
        context: the observable value gates read from.
        loader: reads the durable local store and returns the persisted
            identity (or None). Called by `rehydrate()`.
    """

    def __init__(self, context: SessionContext, loader: Callable[[], Optional[Identity]] | None = None) -> None:
        self._context = context
        self._loader = loader

    @property
    def view(self) -> SessionView:
        return self._context

    def rehydrate(self) -> SessionState:
        """Read the backing store once and publish the result.

        On failure the state stays uninitialized (gates keep answering
        Pending); the error is logged, not raised.
        """
        try:
            identity = self._loader() if self._loader else None
        except Exception as exc:
            logger.warning("Session rehydration failed: %s", exc.__class__.__name__)
            return self._context.resolve()
        self._context._publish(SessionState(identity=identity, initialized=True))
        return self._context.resolve()

    def begin_authentication(self) -> None:
        current = self._context.resolve()
        self._context._publish(SessionState(identity=current.identity, initialized=True, authenticating=True))

    def sign_in(self, identity: Identity) -> None:
        self._context._publish(SessionState(identity=identity, initialized=True))

    def sign_out(self) -> None:
        self._context._publish(ANONYMOUS)

    def get_current_session(self) -> SessionState:
        return self._context.resolve()

    def is_authenticated(self) -> bool:
        state = self._context.resolve()
        return state.ready and state.identity is not None


def identity_from_record(rec) -> Identity:
    """Build an Identity from a session record (`SessionRecord` shape).

    Raises ValueError when the record violates the identity invariants, e.g.
    a student session without a student record id.
    """
    role = primary_role(getattr(rec, "roles", None) or [])
    student_id = getattr(rec, "student_id", None) if role == ROLE_STUDENT else None
    return Identity(id=str(rec.sub), role=role, student_id=student_id)


class StoreSessionOracle:
    """Per-request oracle backed by the session store and an opaque cookie."""

    def __init__(self, store, session_id: Optional[str]) -> None:
        self._store = store
        self._session_id = session_id

    def resolve(self) -> SessionState:
        if not self._session_id:
            return ANONYMOUS
        try:
            rec = self._store.get(self._session_id)
        except Exception as exc:
            raise SessionResolutionError(f"session_store_failed: {exc.__class__.__name__}") from exc
        if not rec:
            return ANONYMOUS
        try:
            identity = identity_from_record(rec)
        except ValueError as exc:
            raise SessionResolutionError(f"invalid_session_record: {exc}") from exc
        return SessionState(identity=identity, initialized=True)


__all__ = [
    "ANONYMOUS",
    "AuthBoundary",
    "SessionContext",
    "SessionOracle",
    "SessionResolutionError",
    "SessionState",
    "SessionView",
    "StoreSessionOracle",
    "UNINITIALIZED",
    "identity_from_record",
]
