"""End-of-run summary formatting.

Keeping formatting here keeps the CLI output consistent and lets tests check
the text without running a whole reconciliation.
"""

from __future__ import annotations

from typing import Iterable

from core.models import ReconciliationResult

DIVIDER = "──────────────"


def _host_list(hosts: Iterable[str]) -> str:
    return "[" + ", ".join(hosts) + "]"


def format_summary(result: ReconciliationResult) -> str:
    """Return a human-readable summary of one reconciliation run."""

    title = "Reconciliation summary (dry run)" if result.dry_run else "Reconciliation summary"
    deleted_label = "Would delete" if result.dry_run else "Deleted"

    lines: list[str] = [
        title,
        DIVIDER,
        f"Rules loaded:   {result.rules_loaded}",
        f"Hosts observed: {result.hosts_observed}",
        f"New:            {len(result.new_hosts)}",
        f"Undecided:      {len(result.undecided_hosts)}",
        f"Keep:           {len(result.keep_hosts)}",
    ]
    if result.dry_run:
        lines.append(f"{deleted_label}:   {len(result.deleted)} hosts")
    else:
        lines.append(f"{deleted_label}:        {len(result.deleted)} hosts ({result.rows_deleted} cookies)")
    lines.append(f"Failed deletes: {len(result.failures)}")

    if result.new_hosts:
        verb = "would be appended" if result.dry_run else "appended"
        lines.extend(["", f"WARNING: New host_keys found ({verb} to the rule file):", _host_list(result.new_hosts)])

    if result.undecided_hosts:
        lines.extend(["", "WARNING: Undecided host_keys with no action:", _host_list(result.undecided_hosts)])

    if result.deleted:
        lines.extend(["", f"{deleted_label}:"])
        for host, count in result.deleted.items():
            lines.append(f"  {host}" if result.dry_run else f"  {host} ({count})")

    if result.failures:
        lines.extend(["", "ERROR: Failed deletes:"])
        for failure in result.failures:
            lines.append(f"  {failure.host}: {failure.error}")

    if result.append_error:
        lines.extend(["", "ERROR: New hosts were not written to the rule file:", result.append_error])

    lines.append(DIVIDER)
    return "\n".join(lines)
