"""Storage contracts the reconciler is written against.

CsvRuleStore and SQLiteCookieStore implement these; tests swap in in-memory
fakes. Nothing here knows about CSV, SQLite or Chrome.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from core.models import Decision


class RuleStorePort(Protocol):
    """Rule storage operations required by the reconciler."""

    def load(self) -> dict[str, Decision]:
        ...

    def append_hosts(self, hosts: Sequence[str]) -> None:
        ...


class CookieStorePort(Protocol):
    """Cookie backend operations required by the reconciler."""

    def distinct_hosts(self) -> set[str]:
        ...

    def delete_by_host(self, host: str) -> int:
        ...
