"""Cookie reconciliation against operator rules.

This module is storage-agnostic. It only relies on ports for the rule file
and the cookie backend. A run follows a strict order:
1) Load the rule mapping once
2) Load the distinct host set once
3) Classify every host, deleting immediately where the rule says so
4) Append newly discovered hosts to the rule file
"""

from __future__ import annotations

import logging
from typing import Mapping

from core.config import ReconcileConfig
from core.errors import InvalidHostError, RuleStoreError, StorageError
from core.models import Classification, Decision, HostFailure, ReconciliationResult
from core.ports import CookieStorePort, RuleStorePort

LOGGER = logging.getLogger(__name__)


def classify(host: str, rules: Mapping[str, Decision]) -> Classification:
    """Return the classification for one observed host."""

    decision = rules.get(host)
    if decision is None:
        return Classification.NEW
    if decision is Decision.UNDECIDED:
        return Classification.UNDECIDED
    if decision is Decision.KEEP:
        return Classification.KEEP
    if decision is Decision.DELETE:
        return Classification.DELETE
    raise ValueError(f"Unsupported decision for {host}: {decision!r}")


class Reconciler:
    """Applies the rule file to the cookie backend for one run."""

    def __init__(
        self,
        rule_store: RuleStorePort,
        cookie_store: CookieStorePort,
        config: ReconcileConfig = ReconcileConfig(),
    ) -> None:
        self._rule_store = rule_store
        self._cookie_store = cookie_store
        self._config = config

    def run(self) -> ReconciliationResult:
        """Reconcile once and return what happened.

        NotFoundError, RuleStoreError from loading and StorageConnectionError
        propagate: without rules or hosts there is nothing to reconcile.
        Deletion errors end up in ``result.failures`` and a failed append in
        ``result.append_error``.
        """

        result = ReconciliationResult(dry_run=self._config.dry_run)

        rules = self._rule_store.load()
        result.rules_loaded = len(rules)

        hosts = self._cookie_store.distinct_hosts()
        result.hosts_observed = len(hosts)
        LOGGER.info("Found %s distinct hosts in the cookie store", len(hosts))

        for host in hosts:
            self._observe(host, classify(host, rules), result)

        if result.new_hosts:
            if self._config.dry_run:
                LOGGER.info("Dry run: not appending %s new hosts", len(result.new_hosts))
            else:
                self._append_new_hosts(result)

        return result

    def _append_new_hosts(self, result: ReconciliationResult) -> None:
        # Deletions are already durable here; a failed append is reported, not raised.
        try:
            self._rule_store.append_hosts(result.new_hosts)
        except RuleStoreError as exc:
            LOGGER.error("Could not record %s new hosts: %s", len(result.new_hosts), exc)
            result.append_error = str(exc)
            return
        LOGGER.info("Appended %s new hosts to the rule file", len(result.new_hosts))

    def _observe(self, host: str, classification: Classification, result: ReconciliationResult) -> None:
        if classification is Classification.NEW:
            result.new_hosts.append(host)
        elif classification is Classification.UNDECIDED:
            result.undecided_hosts.append(host)
        elif classification is Classification.KEEP:
            LOGGER.debug("Keep %s", host)
            result.keep_hosts.append(host)
        elif classification is Classification.DELETE:
            self._delete(host, result)
        else:
            raise ValueError(f"Unsupported classification: {classification!r}")

    def _delete(self, host: str, result: ReconciliationResult) -> None:
        if self._config.dry_run:
            LOGGER.info("Dry run: would delete cookies for %s", host)
            result.deleted[host] = 0
            return

        try:
            removed = self._cookie_store.delete_by_host(host)
        except (InvalidHostError, StorageError) as exc:
            # One bad host must not leave the rest of the run unprocessed.
            LOGGER.warning("Delete failed for %r: %s", host, exc)
            result.failures.append(HostFailure(host=host, error=str(exc)))
            return

        LOGGER.info("Deleted %s cookies for %s", removed, host)
        result.deleted[host] = removed
