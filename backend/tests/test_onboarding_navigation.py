"""
NavigationController: in-flight results never apply to a different identity
or a newer navigation.
"""
from __future__ import annotations

import asyncio

import pytest

from backend.identity_access.domain import Identity
from backend.identity_access.session import AuthBoundary, SessionContext
from backend.onboarding.chain import GateChain
from backend.onboarding.gates import ConsentGate, InventoryGate, SignInGate
from backend.onboarding.navigation import NavigationController
from backend.onboarding.probes import consent_probe, inventory_probe
from backend.onboarding.verdicts import Location, PASS, PENDING, Redirect
from backend.tests.utils.fake_records import FakeRecordService


pytestmark = pytest.mark.anyio("asyncio")

ALICE = Identity(id="user-a", role="student", student_id="stu-a")
BOB = Identity(id="user-b", role="student", student_id="stu-b")


def _setup(svc: FakeRecordService):
    ctx = SessionContext()
    auth = AuthBoundary(ctx)
    chain = GateChain([SignInGate(), ConsentGate(consent_probe(svc)), InventoryGate(inventory_probe(svc))])
    return auth, NavigationController(chain, auth.view)


async def _until(predicate, attempts: int = 100) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.mark.anyio
async def test_outcome_is_pending_on_awaited_gate_while_probe_in_flight():
    svc = FakeRecordService(consent={"stu-a"}, inventory={"stu-a"})
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)
    release = svc.hold("stu-a")

    task = asyncio.create_task(nav.navigate("/resources"))
    await _until(lambda: svc.count("consent") == 1)

    assert nav.outcome.verdict == PENDING
    assert nav.outcome.gate == "consent"

    release.set()
    outcome = await task
    assert outcome.verdict == PASS
    assert nav.outcome == outcome


@pytest.mark.anyio
async def test_identity_switch_discards_late_result():
    svc = FakeRecordService(consent={"stu-b"}, inventory={"stu-b"})
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)
    release = svc.hold("stu-a")

    first = asyncio.create_task(nav.navigate("/resources"))
    await _until(lambda: svc.count("consent") == 1)

    auth.sign_in(BOB)
    settled = await nav.settle()
    assert settled.verdict == PASS

    # Alice's probe finally answers "no consent"; it must not be applied.
    release.set()
    assert await first is None
    assert nav.outcome.verdict == PASS
    assert nav.outcome.location == Location("/resources")


@pytest.mark.anyio
async def test_sign_out_mid_flight_redirects_to_sign_in():
    svc = FakeRecordService()
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)
    release = svc.hold("stu-a")

    first = asyncio.create_task(nav.navigate("/resources?tab=1"))
    await _until(lambda: svc.count("consent") == 1)

    auth.sign_out()
    settled = await nav.settle()
    release.set()
    assert await first is None

    assert settled.verdict == Redirect("/signin", return_to=Location("/resources", "tab=1"))
    assert nav.outcome == settled


@pytest.mark.anyio
async def test_newer_navigation_supersedes_older_one():
    svc = FakeRecordService(consent={"stu-a"})
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)
    release = svc.hold("stu-a")

    first = asyncio.create_task(nav.navigate("/resources"))
    await _until(lambda: svc.count("consent") == 1)

    svc.holds.clear()
    second = await nav.navigate("/history")
    release.set()

    assert await first is None
    assert second.location == Location("/history")
    assert second.verdict == Redirect("/inventory")
    assert nav.outcome == second


@pytest.mark.anyio
async def test_unchanged_session_does_not_restart_navigation():
    svc = FakeRecordService(consent={"stu-a"}, inventory={"stu-a"})
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)

    await nav.navigate("/resources")
    auth.sign_in(ALICE)
    await nav.settle()

    assert svc.count("consent") == 1


@pytest.mark.anyio
async def test_closed_controller_ignores_session_changes():
    svc = FakeRecordService(consent={"stu-a"}, inventory={"stu-a"})
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)
    outcome = await nav.navigate("/resources")

    nav.close()
    auth.sign_out()

    assert nav.outcome == outcome
    assert nav.location == Location("/resources")


@pytest.mark.anyio
async def test_session_change_outside_the_loop_is_evaluated_on_settle():
    svc = FakeRecordService(consent={"stu-a"}, inventory={"stu-a"})
    auth, nav = _setup(svc)
    auth.sign_in(ALICE)
    await nav.navigate("/resources")

    # Sign-out from a worker thread, where no event loop is running.
    await asyncio.to_thread(auth.sign_out)
    assert nav.outcome.verdict == PENDING

    settled = await nav.settle()
    assert settled.verdict == Redirect("/signin", return_to=Location("/resources"))
    assert nav.outcome == settled
