"""
Identity invariants and role collapsing.
"""
from __future__ import annotations

import pytest

from backend.identity_access.domain import (
    Identity,
    ROLE_STAFF,
    ROLE_STUDENT,
    default_route_for,
    primary_role,
)


def test_student_identity_requires_student_id():
    with pytest.raises(ValueError, match="student_id_required"):
        Identity(id="u1", role=ROLE_STUDENT)


def test_staff_identity_rejects_student_id():
    with pytest.raises(ValueError, match="student_id_forbidden"):
        Identity(id="u1", role=ROLE_STAFF, student_id="s1")


def test_identity_rejects_unknown_role_and_empty_id():
    with pytest.raises(ValueError, match="unknown_role"):
        Identity(id="u1", role="parent")
    with pytest.raises(ValueError, match="identity_id_required"):
        Identity(id="", role=ROLE_STAFF)


def test_is_student_flag():
    assert Identity(id="u1", role=ROLE_STUDENT, student_id="s1").is_student
    assert not Identity(id="u2", role=ROLE_STAFF).is_student


@pytest.mark.parametrize(
    "roles,expected",
    [
        (["student"], ROLE_STUDENT),
        (["Student"], ROLE_STUDENT),
        (["staff"], ROLE_STAFF),
        (["guidance"], ROLE_STAFF),
        (["student", "admin"], ROLE_STAFF),
        ([], ROLE_STAFF),
        (["unknown"], ROLE_STAFF),
    ],
)
def test_primary_role(roles, expected):
    assert primary_role(roles) == expected


def test_default_route_for_role():
    assert default_route_for(ROLE_STUDENT) == "/resources"
    assert default_route_for(ROLE_STAFF) == "/home"
