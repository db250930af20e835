"""
Base Component Class for Haven UI Components

Pure Python HTML generation with automatic escaping; no template engine.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components in Haven"""

    def render(self) -> str:
        """Render the component as an HTML string"""
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[str]) -> str:
        """Escape HTML entities; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build HTML attributes from keyword arguments

        Example:
            >>> Component.attributes(class_="spinner", aria_busy=True)
            'class="spinner" aria-busy'
        """
        result = []
        for key, value in attrs.items():
            # class_ -> class, data_value -> data-value
            if key.endswith("_"):
                key = key[:-1]
            else:
                key = key.replace("_", "-")

            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')

        return " ".join(result)
