"""Core domain models.

These types are shared across the core and adapters to avoid tight coupling
to CSV or SQLite specifics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Decision(str, Enum):
    """Operator decision stored in the rule file for a host."""

    KEEP = "keep"
    DELETE = "delete"
    UNDECIDED = "undecided"

    @classmethod
    def from_token(cls, token: str) -> Optional["Decision"]:
        """Return the decision for a rule file token, ignoring case.

        Returns None for tokens that are not a known decision so callers can
        pick their own fallback.
        """

        normalized = token.strip().lower()
        for decision in cls:
            if decision.value == normalized:
                return decision
        return None


class Classification(str, Enum):
    """Outcome of comparing one observed host against the rules."""

    NEW = "new"
    UNDECIDED = "undecided"
    KEEP = "keep"
    DELETE = "delete"


@dataclass(frozen=True)
class HostFailure:
    """A per-host error collected during reconciliation."""

    host: str
    error: str


@dataclass
class ReconciliationResult:
    """Everything one reconciliation run observed and did.

    Buckets keep the order in which hosts were processed. A fresh result is
    built for every run.
    """

    new_hosts: list[str] = field(default_factory=list)
    undecided_hosts: list[str] = field(default_factory=list)
    keep_hosts: list[str] = field(default_factory=list)
    deleted: dict[str, int] = field(default_factory=dict)
    failures: list[HostFailure] = field(default_factory=list)
    append_error: Optional[str] = None
    rules_loaded: int = 0
    hosts_observed: int = 0
    dry_run: bool = False

    @property
    def rows_deleted(self) -> int:
        return sum(self.deleted.values())
