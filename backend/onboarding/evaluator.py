"""
Pure gate evaluation: session state and probe results in, Verdict out.

No I/O happens here. The same `evaluate_completion` serves the single
Consent/Inventory gates and the joint ComprehensiveGate, so the
consent-before-inventory precedence is encoded exactly once: requirements are
checked in declaration order, and only after every probe has resolved.

Decision tables:

    sign-in     not initialized / authenticating  -> Pending
                anonymous                         -> Redirect(sign-in, return_to)
                signed in                         -> Pass

    public      not ready                         -> Pending
                anonymous                         -> Pass
                signed in                         -> Redirect(default route for role)

    completion  not initialized                   -> Pending
                authenticating / anonymous        -> Pass (sign-in gate governs)
                non-student                       -> Pass
                any probe unresolved              -> Pending
                first requirement not satisfied   -> Redirect(its target)
                otherwise                         -> Pass
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from backend.identity_access.domain import default_route_for
from backend.identity_access.session import SessionState

from .ports import ProbeResult
from .verdicts import Location, PASS, PENDING, Redirect, Verdict


SIGNIN_PATH = "/signin"


@dataclass(frozen=True)
class Requirement:
    """A completion record a student must have, and where to complete it."""

    kind: str
    target: str


def evaluate_sign_in(session: SessionState, location: Location, *, signin_path: str = SIGNIN_PATH) -> Verdict:
    if not session.ready:
        return PENDING
    if session.identity is None:
        return Redirect(signin_path, replace_history=True, return_to=location)
    return PASS


def evaluate_public(session: SessionState) -> Verdict:
    if not session.ready:
        return PENDING
    if session.identity is None:
        return PASS
    return Redirect(default_route_for(session.identity.role), replace_history=True)


def needs_probes(session: SessionState) -> bool:
    """True when a completion gate has to ask the record services."""
    return session.ready and session.identity is not None and session.identity.is_student


def is_satisfied(result: ProbeResult, *, fail_open: bool = True) -> bool:
    if result.failed:
        return fail_open
    return result.exists


def evaluate_completion(
    session: SessionState,
    requirements: Sequence[Requirement],
    results: Mapping[str, Optional[ProbeResult]],
    *,
    fail_open: bool = True,
) -> Verdict:
    if not session.initialized:
        return PENDING
    if not needs_probes(session):
        return PASS
    resolved = [results.get(req.kind) for req in requirements]
    if any(result is None for result in resolved):
        return PENDING
    for req, result in zip(requirements, resolved):
        if not is_satisfied(result, fail_open=fail_open):
            return Redirect(req.target, replace_history=True)
    return PASS


__all__ = [
    "Requirement",
    "SIGNIN_PATH",
    "evaluate_completion",
    "evaluate_public",
    "evaluate_sign_in",
    "is_satisfied",
    "needs_probes",
]
