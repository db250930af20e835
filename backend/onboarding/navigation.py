"""
Navigation controller: runs a GateChain for the current navigation and keeps
the applied outcome in sync with the session.

Intent:
    Mirrors what a client-side router does on every navigation. While the
    chain is being evaluated the outcome is Pending (with the gate currently
    awaited). Every evaluation is keyed by (generation, identity id, location).
    When the identity or the navigation target changes while a probe is in
    flight, the late result no longer matches the key and is dropped.

Concurrency:
    Single event loop. Session changes re-run the active navigation as a new
    task; superseded tasks are left to finish and their results discarded.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Optional, Tuple, Union

from backend.identity_access.session import SessionState, SessionView

from .chain import GateChain
from .gates import RouteGate
from .verdicts import Location, PENDING, Verdict


logger = logging.getLogger("haven.onboarding")


@dataclass(frozen=True)
class NavigationOutcome:
    location: Location
    verdict: Verdict
    gate: Optional[str] = None


def _identity_key(state: SessionState) -> Optional[str]:
    return state.identity.id if state.identity is not None else None


class NavigationController:
    def __init__(self, chain: GateChain, session: SessionView) -> None:
        self._chain = chain
        self._session = session
        self._generation = 0
        self._ticket: Optional[Tuple[int, Optional[str], Location]] = None
        self._location: Optional[Location] = None
        self._outcome: Optional[NavigationOutcome] = None
        self._task: Optional[asyncio.Task] = None
        self._dirty = False
        self._last_state = session.resolve()
        self._unsubscribe = session.subscribe(self._on_session_change)

    @property
    def outcome(self) -> Optional[NavigationOutcome]:
        return self._outcome

    @property
    def location(self) -> Optional[Location]:
        return self._location

    async def navigate(self, location: Union[str, Location]) -> Optional[NavigationOutcome]:
        """Evaluate the chain for `location`.

        Returns the applied outcome, or None when a newer navigation or an
        identity change superseded this one before it resolved.
        """
        if isinstance(location, str):
            location = Location.parse(location)
        self._location = location
        return await self._start(location)

    async def settle(self) -> Optional[NavigationOutcome]:
        """Wait until the most recent evaluation finished; return the outcome.

        A session change that arrived outside the event loop is evaluated here.
        """
        if self._dirty and self._location is not None:
            self._start(self._location)
        while self._task is not None:
            task = self._task
            await task
            if task is self._task:
                break
        return self._outcome

    def close(self) -> None:
        self._unsubscribe()

    def _start(self, location: Location) -> "asyncio.Task":
        self._generation += 1
        self._dirty = False
        state = self._session.resolve()
        ticket = (self._generation, _identity_key(state), location)
        self._ticket = ticket
        self._outcome = NavigationOutcome(location=location, verdict=PENDING)
        self._task = asyncio.get_running_loop().create_task(self._run(ticket, state, location))
        return self._task

    async def _run(self, ticket, state: SessionState, location: Location) -> Optional[NavigationOutcome]:
        def _progress(gate: RouteGate) -> None:
            if ticket == self._ticket:
                self._outcome = NavigationOutcome(location=location, verdict=PENDING, gate=gate.name)

        result = await self._chain.evaluate(state, location, on_gate=_progress)
        if ticket != self._ticket or ticket[1] != _identity_key(self._session.resolve()):
            logger.info(
                "Discarding stale gate result chain=%s path=%s gate=%s",
                self._chain.name,
                location.path,
                result.gate,
            )
            return None
        outcome = NavigationOutcome(location=location, verdict=result.verdict, gate=result.gate)
        self._outcome = outcome
        return outcome

    def _on_session_change(self, state: SessionState) -> None:
        if state == self._last_state:
            return
        self._last_state = state
        if self._location is None:
            return
        # Invalidate whatever is in flight before re-running.
        self._generation += 1
        self._ticket = None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop to run on; the next settle() or navigate() re-evaluates.
            self._dirty = True
            self._outcome = NavigationOutcome(location=self._location, verdict=PENDING)
            return
        self._start(self._location)


__all__ = ["NavigationController", "NavigationOutcome"]
