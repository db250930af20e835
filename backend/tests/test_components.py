"""
SSR components: escaping and placeholder markup.
"""
from __future__ import annotations

from backend.web.components import Component, Layout, LoadingPlaceholder


def test_attributes_helper():
    assert Component.attributes(class_="x", aria_busy=True, hidden=False, data_gate=None) == 'class="x" aria-busy'


def test_layout_escapes_title_and_shows_signout_only_for_users():
    anon = Layout(title="<b>Hi</b>", content="<p>body</p>").render()
    assert "&lt;b&gt;Hi&lt;/b&gt; - Haven" in anon
    assert "<p>body</p>" in anon
    assert "/auth/logout" not in anon

    signed_in = Layout(title="Home", content="", user={"sub": "u1"}).render()
    assert 'action="/auth/logout"' in signed_in


def test_layout_nav_follows_role_and_marks_active_link():
    student = Layout(title="R", content="", user={"role": "student"}, current_path="/resources").render()
    staff = Layout(title="D", content="", user={"role": "staff"}, current_path="/dashboard").render()

    assert 'href="/resources" aria-current="page"' in student
    assert 'href="/dashboard"' not in student
    assert 'href="/dashboard" aria-current="page"' in staff
    assert 'href="/resources"' not in staff


def test_placeholder_is_announced_and_tagged():
    html = LoadingPlaceholder(message="Checking <consent>", gate="consent").render()
    assert 'role="status"' in html
    assert 'aria-live="polite"' in html
    assert "aria-busy" in html
    assert 'data-gate="consent"' in html
    assert "Checking &lt;consent&gt;" in html
