"""
Route gates: one decision unit each, evaluated for a single navigation.

A gate reads the session state it is given (never writes it), dispatches the
probes it needs, and maps everything to a Verdict via the pure evaluator.

`precedence` fixes where a gate may sit inside a GateChain:
sign-in (0) < consent / comprehensive (10) < inventory (20).
"""
from __future__ import annotations

import asyncio
import logging
from typing import Sequence, Tuple

from backend.identity_access.session import SessionState

from .evaluator import (
    Requirement,
    SIGNIN_PATH,
    evaluate_completion,
    evaluate_public,
    evaluate_sign_in,
    needs_probes,
)
from .probes import CONSENT, INVENTORY, ExistenceProbe
from .verdicts import Location, Verdict


logger = logging.getLogger("haven.onboarding")

CONSENT_PATH = "/consent"
INVENTORY_PATH = "/inventory"


class RouteGate:
    name = "gate"
    precedence = 0
    placeholder = "Loading..."

    async def evaluate(self, session: SessionState, location: Location) -> Verdict:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


class SignInGate(RouteGate):
    name = "signin"
    precedence = 0
    placeholder = "Checking your session..."

    def __init__(self, *, signin_path: str = SIGNIN_PATH) -> None:
        self.signin_path = signin_path

    async def evaluate(self, session: SessionState, location: Location) -> Verdict:
        return evaluate_sign_in(session, location, signin_path=self.signin_path)


class PublicRouteGate(RouteGate):
    """Inverse gate for sign-in/sign-up pages: signed-in users move on."""

    name = "public"
    precedence = 0
    placeholder = "Checking your session..."

    async def evaluate(self, session: SessionState, location: Location) -> Verdict:
        return evaluate_public(session)


class CompletionGate(RouteGate):
    """Requires one or more completion records for student identities.

    All probes are dispatched together and awaited jointly; partial results
    never drive a decision. Non-students and anonymous callers never trigger
    a probe.
    """

    def __init__(
        self,
        name: str,
        requirements: Sequence[Tuple[Requirement, ExistenceProbe]],
        *,
        precedence: int = 10,
        fail_open: bool = True,
    ) -> None:
        if not requirements:
            raise ValueError("completion gate needs at least one requirement")
        self.name = name
        self.precedence = precedence
        self.fail_open = fail_open
        self._requirements = tuple(requirements)

    @property
    def requirements(self) -> Tuple[Requirement, ...]:
        return tuple(req for req, _ in self._requirements)

    async def evaluate(self, session: SessionState, location: Location) -> Verdict:
        reqs = self.requirements
        if not needs_probes(session):
            return evaluate_completion(session, reqs, {}, fail_open=self.fail_open)
        identity = session.identity
        results = await asyncio.gather(*(probe.check(identity) for _, probe in self._requirements))
        verdict = evaluate_completion(
            session,
            reqs,
            {req.kind: result for req, result in zip(reqs, results)},
            fail_open=self.fail_open,
        )
        logger.debug("gate=%s identity=%s verdict=%s", self.name, identity.id[-6:], verdict)
        return verdict


class ConsentGate(CompletionGate):
    placeholder = "Checking your consent form..."

    def __init__(self, probe: ExistenceProbe, *, target: str = CONSENT_PATH, fail_open: bool = True) -> None:
        super().__init__(
            "consent",
            [(Requirement(CONSENT, target), probe)],
            precedence=10,
            fail_open=fail_open,
        )


class InventoryGate(CompletionGate):
    placeholder = "Checking your inventory..."

    def __init__(self, probe: ExistenceProbe, *, target: str = INVENTORY_PATH, fail_open: bool = True) -> None:
        super().__init__(
            "inventory",
            [(Requirement(INVENTORY, target), probe)],
            precedence=20,
            fail_open=fail_open,
        )


class ComprehensiveGate(CompletionGate):
    """Consent and inventory in one gate; consent wins when both are missing."""

    placeholder = "Checking your onboarding status..."

    def __init__(
        self,
        consent: ExistenceProbe,
        inventory: ExistenceProbe,
        *,
        consent_target: str = CONSENT_PATH,
        inventory_target: str = INVENTORY_PATH,
        fail_open: bool = True,
    ) -> None:
        super().__init__(
            "comprehensive",
            [
                (Requirement(CONSENT, consent_target), consent),
                (Requirement(INVENTORY, inventory_target), inventory),
            ],
            precedence=10,
            fail_open=fail_open,
        )


__all__ = [
    "CONSENT_PATH",
    "INVENTORY_PATH",
    "ComprehensiveGate",
    "CompletionGate",
    "ConsentGate",
    "InventoryGate",
    "PublicRouteGate",
    "RouteGate",
    "SignInGate",
]
