# Haven Component System
# Pure Python Components for type-safe HTML generation

from .base import Component
from .layout import Layout
from .placeholder import LoadingPlaceholder

__all__ = [
    "Component",
    "Layout",
    "LoadingPlaceholder",
]
