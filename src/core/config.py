"""Run options handed to the reconciler.

settings.py and the CLI flags decide the values; the core only sees this
frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReconcileConfig:
    """Run options for the reconciler."""

    dry_run: bool = False
