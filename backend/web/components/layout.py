"""
Page shell for Haven.

Renders the document skeleton, a role-aware navigation bar for signed-in
users, and the sign-out form. Content is passed in pre-rendered.
"""

from typing import Any, Dict, List, Optional, Tuple
from .base import Component


STUDENT_NAV: List[Tuple[str, str]] = [
    ("/resources", "Resources"),
    ("/appointments", "Appointments"),
    ("/messages", "Messages"),
    ("/activities", "Activities"),
    ("/help-support", "Help"),
]
STAFF_NAV: List[Tuple[str, str]] = [
    ("/dashboard", "Dashboard"),
    ("/students", "Students"),
    ("/consent-records", "Consent records"),
    ("/inventory-records", "Inventory records"),
    ("/reports", "Reports"),
]


class Layout(Component):
    def __init__(
        self,
        title: str,
        content: str,
        user: Optional[Dict[str, Any]] = None,
        current_path: str = "/",
    ):
        """
        Args:
            title: Page title, escaped on render
            content: Pre-rendered main content HTML
            user: Request user context (`sub`, `role`, ...) or None when anonymous
            current_path: Path of the page, used to mark the active nav link
        """
        self.title = title
        self.content = content
        self.user = user
        self.current_path = current_path

    def _nav(self) -> str:
        if not self.user:
            return ""
        links = STUDENT_NAV if self.user.get("role") == "student" else STAFF_NAV
        items = []
        for href, label in links:
            active = self.current_path == href or self.current_path.startswith(href + "/")
            attrs = self.attributes(href=href, aria_current="page" if active else None)
            items.append(f"<li><a {attrs}>{self.escape(label)}</a></li>")
        return (
            '<nav class="app-nav" aria-label="Main"><ul>'
            + "".join(items)
            + '</ul><form method="post" action="/auth/logout" class="signout">'
            '<button type="submit">Sign out</button></form></nav>'
        )

    def render(self) -> str:
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self.escape(self.title)} - Haven</title>
</head>
<body data-path="{self.escape(self.current_path)}">
    <a class="skip-link" href="#main-content">Skip to content</a>
    <header class="app-header">{self._nav()}</header>
    <main id="main-content" class="main-content" role="main">
        {self.content}
    </main>
</body>
</html>"""
