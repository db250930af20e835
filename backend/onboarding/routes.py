"""
Route table: which gate chain protects which page subtree.

Matching is segment aware ("/consent" covers "/consent/results" but not
"/consent-records") and the longest registered prefix wins. Paths without a
chain are not gated.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from .chain import GateChain
from .config import OnboardingSettings
from .gates import ComprehensiveGate, ConsentGate, InventoryGate, PublicRouteGate, SignInGate
from .ports import ConsentBoundary, InventoryBoundary
from .probes import consent_probe, inventory_probe


PUBLIC_PATHS = ("/signin", "/signup")
SIGNED_IN_PATHS = ("/home", "/consent", "/inventory", "/profile", "/notifications")
STUDENT_AREA_PATHS = ("/resources", "/history", "/messages", "/appointments", "/help-support", "/activities")
SHARED_AREA_PATHS = (
    "/dashboard",
    "/reports",
    "/students",
    "/consent-records",
    "/inventory-records",
    "/accounts",
    "/aid-function",
    "/insights",
)


def _normalize(path: str) -> str:
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


class GateRouter:
    def __init__(self) -> None:
        self._chains: Dict[str, GateChain] = {}

    def register(self, prefixes: Iterable[str], chain: GateChain) -> None:
        for prefix in prefixes:
            key = _normalize(prefix)
            if key in self._chains:
                raise ValueError(f"route already gated: {key}")
            self._chains[key] = chain

    def match(self, path: str) -> Optional[GateChain]:
        path = _normalize(path)
        best: Tuple[int, Optional[GateChain]] = (-1, None)
        for prefix, chain in self._chains.items():
            if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
                if len(prefix) > best[0]:
                    best = (len(prefix), chain)
        return best[1]

    def prefixes(self) -> Tuple[str, ...]:
        return tuple(self._chains)


def build_gate_router(
    settings: OnboardingSettings,
    consent: ConsentBoundary,
    inventory: InventoryBoundary,
) -> GateRouter:
    """Wire the route table from settings and record-service boundaries."""
    c_probe = consent_probe(consent, timeout=settings.probe_timeout)
    i_probe = inventory_probe(inventory, timeout=settings.probe_timeout)
    sign_in = SignInGate(signin_path=settings.signin_path)

    router = GateRouter()
    router.register(PUBLIC_PATHS, GateChain([PublicRouteGate()], name="public"))
    router.register(SIGNED_IN_PATHS, GateChain([sign_in], name="signed-in"))
    router.register(
        STUDENT_AREA_PATHS,
        GateChain(
            [
                sign_in,
                ConsentGate(c_probe, target=settings.consent_path, fail_open=settings.fail_open),
                InventoryGate(i_probe, target=settings.inventory_path, fail_open=settings.fail_open),
            ],
            name="student-area",
        ),
    )
    router.register(
        SHARED_AREA_PATHS,
        GateChain(
            [
                sign_in,
                ComprehensiveGate(
                    c_probe,
                    i_probe,
                    consent_target=settings.consent_path,
                    inventory_target=settings.inventory_path,
                    fail_open=settings.fail_open,
                ),
            ],
            name="shared-area",
        ),
    )
    return router


__all__ = [
    "GateRouter",
    "PUBLIC_PATHS",
    "SHARED_AREA_PATHS",
    "SIGNED_IN_PATHS",
    "STUDENT_AREA_PATHS",
    "build_gate_router",
]
