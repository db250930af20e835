"""
Loading placeholder shown while a gate is Pending.
"""

from .base import Component


class LoadingPlaceholder(Component):
    """Spinner plus a short status line, announced to screen readers."""

    def __init__(self, message: str = "Loading...", gate: str = ""):
        self.message = message
        self.gate = gate

    def render(self) -> str:
        attrs = self.attributes(
            class_="gate-pending",
            role="status",
            aria_live="polite",
            aria_busy=True,
            data_gate=self.gate or None,
        )
        return f"""
        <div {attrs}>
            <div class="spinner" aria-hidden="true"></div>
            <p>{self.escape(self.message)}</p>
        </div>
        """
