"""
Verdicts produced by the gates for one navigation.

A verdict is one of:
    Pass     - the page may render.
    Redirect - navigate elsewhere (optionally remembering where we came from).
    Pending  - not decidable yet; render the gate's loading placeholder.

A redirect is expected control flow, never an error.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Location:
    path: str
    query: str = ""

    @classmethod
    def parse(cls, value: str) -> "Location":
        path, _, query = value.partition("?")
        return cls(path=path or "/", query=query)

    @property
    def url(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path


@dataclass(frozen=True)
class Pass:
    pass


@dataclass(frozen=True)
class Redirect:
    target: str
    replace_history: bool = True
    return_to: Optional[Location] = None


@dataclass(frozen=True)
class Pending:
    pass


Verdict = Union[Pass, Redirect, Pending]

PASS = Pass()
PENDING = Pending()


__all__ = ["Location", "PASS", "PENDING", "Pass", "Pending", "Redirect", "Verdict"]
