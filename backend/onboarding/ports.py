"""
Ports for the onboarding gates: probe results, boundary protocols, errors.

Intent:
    Provide framework-agnostic contracts between the gates and the record
    services (HTTP client, test fakes). Keeping these definitions in a
    dedicated module avoids circular imports between probes and clients.

Design:
    - Result dataclass: ProbeResult
    - Protocols: ConsentBoundary, InventoryBoundary
    - Error taxonomy: ProbeTransportError (always converted to fail-open)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


# ----------------------------- Result types ---------------------------------


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one existence check.

    Parameters:
        exists: whether the record exists (meaningless when `failed`).
        failed: the check could not be completed.
        cause: the exception that made the check fail, for operators.
    """

    exists: bool = False
    failed: bool = False
    cause: Optional[BaseException] = None

    @classmethod
    def found(cls, exists: bool) -> "ProbeResult":
        return cls(exists=bool(exists))

    @classmethod
    def failure(cls, cause: BaseException) -> "ProbeResult":
        return cls(exists=False, failed=True, cause=cause)


# ----------------------------- Protocols ------------------------------------


class ConsentBoundary(Protocol):
    """Answers whether a student has submitted the consent form."""

    async def has_consent(self, student_id: str) -> bool:
        ...


class InventoryBoundary(Protocol):
    """Answers whether a student has submitted the individual inventory."""

    async def has_inventory(self, student_id: str) -> bool:
        ...


# ------------------------------ Errors --------------------------------------


class ProbeTransportError(Exception):
    """Record service unreachable or answered unexpectedly."""


__all__ = [
    "ConsentBoundary",
    "InventoryBoundary",
    "ProbeResult",
    "ProbeTransportError",
]
