"""
GateChain: fixed-order, short-circuiting composition of route gates.

Gates run strictly left to right. The first verdict other than Pass ends the
evaluation; its gate name travels with it so the caller can render that gate's
placeholder. A downstream gate (and its probes) only runs after every upstream
gate passed.

Composition rules are checked once, at construction:
- gates appear in precedence order and at most once;
- a completion record kind is required by at most one gate, so the joint
  ComprehensiveGate is never stacked on the Consent/Inventory pair;
- a public-route gate stands alone.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional, Sequence, Tuple

from backend.identity_access.session import SessionState

from .gates import CompletionGate, PublicRouteGate, RouteGate
from .verdicts import Location, PASS, Pass, Verdict


logger = logging.getLogger("haven.onboarding")


@dataclass(frozen=True)
class ChainOutcome:
    verdict: Verdict
    gate: Optional[str] = None

    @property
    def rendered(self) -> bool:
        return isinstance(self.verdict, Pass)


def _validate(gates: Sequence[RouteGate]) -> None:
    if not gates:
        raise ValueError("gate chain needs at least one gate")
    if any(isinstance(g, PublicRouteGate) for g in gates) and len(gates) > 1:
        raise ValueError("public route gate cannot be combined with other gates")
    names = [g.name for g in gates]
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate gates in chain: {names}")
    for upstream, downstream in zip(gates, gates[1:]):
        if downstream.precedence < upstream.precedence:
            raise ValueError(f"gate {downstream.name!r} must not run after {upstream.name!r}")
    seen_kinds: set[str] = set()
    for gate in gates:
        if not isinstance(gate, CompletionGate):
            continue
        kinds = {req.kind for req in gate.requirements}
        overlap = seen_kinds & kinds
        if overlap:
            raise ValueError(f"redundant completion gates for {sorted(overlap)}")
        seen_kinds |= kinds


class GateChain:
    def __init__(self, gates: Sequence[RouteGate], *, name: str = "") -> None:
        _validate(gates)
        self._gates: Tuple[RouteGate, ...] = tuple(gates)
        self.name = name or "+".join(g.name for g in self._gates)

    @property
    def gates(self) -> Tuple[RouteGate, ...]:
        return self._gates

    def gate(self, name: str) -> Optional[RouteGate]:
        for gate in self._gates:
            if gate.name == name:
                return gate
        return None

    async def evaluate(
        self,
        session: SessionState,
        location: Location,
        *,
        on_gate: Callable[[RouteGate], None] | None = None,
    ) -> ChainOutcome:
        """Run the gates in order; `on_gate` is told which gate is being awaited."""
        for gate in self._gates:
            if on_gate is not None:
                on_gate(gate)
            verdict = await gate.evaluate(session, location)
            if not isinstance(verdict, Pass):
                logger.debug("chain=%s path=%s stopped at gate=%s", self.name, location.path, gate.name)
                return ChainOutcome(verdict=verdict, gate=gate.name)
        return ChainOutcome(verdict=PASS)

    def __repr__(self) -> str:
        return f"<GateChain {self.name}>"


__all__ = ["ChainOutcome", "GateChain"]
