"""
In-memory consent/inventory record services for gate tests.

Counts every call per record kind, can be told to fail, and can hold a
student's answers on an asyncio.Event to simulate a slow service.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

from backend.onboarding.ports import ProbeTransportError


class FakeRecordService:
    def __init__(
        self,
        *,
        consent: Iterable[str] = (),
        inventory: Iterable[str] = (),
        failing: Iterable[str] = (),
    ) -> None:
        self.consent = set(consent)
        self.inventory = set(inventory)
        self.failing = set(failing)
        self.calls: Dict[str, List[str]] = {"consent": [], "inventory": []}
        self.holds: Dict[Tuple[str, Optional[str]], asyncio.Event] = {}

    def hold(self, student_id: str, kind: Optional[str] = None) -> asyncio.Event:
        """Block answers for `student_id` until the returned event is set.

        With `kind` only that record kind is held; otherwise both are.
        """
        event = asyncio.Event()
        self.holds[(student_id, kind)] = event
        return event

    async def has_consent(self, student_id: str) -> bool:
        return await self._answer("consent", student_id, self.consent)

    async def has_inventory(self, student_id: str) -> bool:
        return await self._answer("inventory", student_id, self.inventory)

    async def _answer(self, kind: str, student_id: str, records: set) -> bool:
        self.calls[kind].append(student_id)
        event: Optional[asyncio.Event] = self.holds.get((student_id, kind)) or self.holds.get((student_id, None))
        if event is not None:
            await event.wait()
        if kind in self.failing:
            raise ProbeTransportError(f"{kind} service down")
        return student_id in records

    def count(self, kind: str) -> int:
        return len(self.calls[kind])


__all__ = ["FakeRecordService"]
