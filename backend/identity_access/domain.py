"""
Identity domain constants and simple helpers.

Why:
- Centralize allowed roles to avoid drift between the gate core and web layer.
- Keep the "student needs a student record id" rule in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

ROLE_STUDENT = "student"
ROLE_STAFF = "staff"

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({ROLE_STUDENT, ROLE_STAFF})

# Session roles that collapse into the staff role. Guidance counselors and
# admins share the same navigation rules.
STAFF_LIKE_ROLES = frozenset({ROLE_STAFF, "guidance", "admin", "teacher"})

STUDENT_DEFAULT_ROUTE = "/resources"
STAFF_DEFAULT_ROUTE = "/home"


@dataclass(frozen=True)
class Identity:
    """Signed-in caller as seen by the onboarding gates.

    Invariant: `student_id` is present iff `role == "student"`.
    """

    id: str
    role: str
    student_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("identity_id_required")
        if self.role not in ALLOWED_ROLES:
            raise ValueError(f"unknown_role: {self.role}")
        if self.role == ROLE_STUDENT and not self.student_id:
            raise ValueError("student_id_required")
        if self.role != ROLE_STUDENT and self.student_id is not None:
            raise ValueError("student_id_forbidden")

    @property
    def is_student(self) -> bool:
        return self.role == ROLE_STUDENT


def primary_role(roles: Iterable[str]) -> str:
    """Collapse session roles into one of ALLOWED_ROLES.

    Staff-like roles win over `student`; sessions without any known role are
    treated as staff so they never trigger student onboarding probes.
    """
    lowered = [r.lower() for r in roles if isinstance(r, str)]
    if any(r in STAFF_LIKE_ROLES for r in lowered):
        return ROLE_STAFF
    if ROLE_STUDENT in lowered:
        return ROLE_STUDENT
    return ROLE_STAFF


def default_route_for(role: str) -> str:
    return STUDENT_DEFAULT_ROUTE if role == ROLE_STUDENT else STAFF_DEFAULT_ROUTE


__all__ = [
    "ALLOWED_ROLES",
    "Identity",
    "ROLE_STAFF",
    "ROLE_STUDENT",
    "STAFF_LIKE_ROLES",
    "default_route_for",
    "primary_role",
]
