"""
Existence probes: "does record T exist for this student?"

Each navigation creates fresh results; nothing is cached here. A probe never
raises for a failed check. It returns `ProbeResult.failure(...)` and logs a
warning, and the evaluator then applies the fail-open policy.

Probes are only dispatched for student identities. The gates guarantee that;
calling a probe for anybody else is a programming error.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from backend.identity_access.domain import Identity

from .ports import ConsentBoundary, InventoryBoundary, ProbeResult


logger = logging.getLogger("haven.onboarding")

CONSENT = "consent"
INVENTORY = "inventory"


class ExistenceProbe:
    """Async, idempotent, uncached existence check for one record kind.

    Parameters:
        kind: record kind label used in logs ("consent", "inventory").
        check: coroutine function `student_id -> bool` of the boundary.
        timeout: optional budget in seconds; None waits indefinitely.
    """

    def __init__(
        self,
        kind: str,
        check: Callable[[str], Awaitable[bool]],
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.kind = kind
        self._check = check
        self._timeout = timeout

    async def check(self, identity: Identity) -> ProbeResult:
        if not identity.is_student:
            raise ValueError(f"{self.kind} probe requires a student identity")
        student_id = identity.student_id or ""
        try:
            if self._timeout is None:
                exists = await self._check(student_id)
            else:
                exists = await asyncio.wait_for(self._check(student_id), self._timeout)
        except Exception as exc:
            logger.warning(
                "%s probe failed (fail-open) student_tail=%s err=%s",
                self.kind,
                student_id[-4:],
                exc.__class__.__name__,
            )
            return ProbeResult.failure(exc)
        return ProbeResult.found(exists)


def consent_probe(boundary: ConsentBoundary, *, timeout: Optional[float] = None) -> ExistenceProbe:
    return ExistenceProbe(CONSENT, boundary.has_consent, timeout=timeout)


def inventory_probe(boundary: InventoryBoundary, *, timeout: Optional[float] = None) -> ExistenceProbe:
    return ExistenceProbe(INVENTORY, boundary.has_inventory, timeout=timeout)


__all__ = ["CONSENT", "INVENTORY", "ExistenceProbe", "consent_probe", "inventory_probe"]
