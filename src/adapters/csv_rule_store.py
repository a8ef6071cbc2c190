"""CSV rule file adapter.

Implements the core RuleStorePort on top of a plain ``host,decision`` text
file. The file has no header row. A missing, empty or unknown decision reads
as undecided, which is also how newly discovered hosts are appended.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

from core.errors import MalformedRecordError, NotFoundError, RuleStoreError
from core.models import Decision

LOGGER = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


def parse_rule_line(line: str, line_number: int) -> Optional[tuple[str, Decision]]:
    """Parse one rule file line into ``(host, decision)``.

    Returns None for blank lines. Fields beyond the second are ignored.
    """

    stripped = line.strip()
    if not stripped:
        return None

    fields = stripped.split(",")
    host = fields[0].strip()
    if not host:
        raise MalformedRecordError(line_number, stripped, "empty host")

    token = fields[1].strip() if len(fields) > 1 else ""
    if not token:
        return host, Decision.UNDECIDED

    decision = Decision.from_token(token)
    if decision is None:
        LOGGER.warning(
            "Unknown decision %r for %s on line %s, treating as undecided",
            token,
            host,
            line_number,
        )
        return host, Decision.UNDECIDED
    return host, decision


def _decode_line(raw: bytes, line_number: int) -> str:
    if line_number == 1 and raw.startswith(UTF8_BOM):
        # Spreadsheet editors like to leave a BOM behind.
        raw = raw[len(UTF8_BOM):]
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        text = raw.decode("utf-8", errors="replace").strip()
        raise MalformedRecordError(line_number, text, f"not valid UTF-8 at byte {exc.start}") from exc


class CsvRuleStore:
    """Rule file reader/appender that satisfies the RuleStorePort contract."""

    def __init__(self, path: str, strict: bool = False) -> None:
        self._path = path
        self._strict = strict

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> dict[str, Decision]:
        """Read every rule, last occurrence of a host wins.

        Malformed lines, including lines that are not valid UTF-8, are skipped
        with a warning unless the store is strict, in which case the first one
        raises MalformedRecordError.
        """

        if not os.path.exists(self._path):
            raise NotFoundError("rules CSV file", self._path)

        rules: dict[str, Decision] = {}
        try:
            # Lines are decoded one at a time so a stray byte only costs its line.
            with open(self._path, "rb") as handle:
                for line_number, raw in enumerate(handle, start=1):
                    try:
                        parsed = parse_rule_line(_decode_line(raw, line_number), line_number)
                    except MalformedRecordError as exc:
                        if self._strict:
                            raise
                        LOGGER.warning("Skipping malformed rule %s", exc)
                        continue
                    if parsed is None:
                        continue
                    host, decision = parsed
                    if host in rules:
                        LOGGER.debug("Duplicate rule for %s on line %s overrides earlier one", host, line_number)
                    rules[host] = decision
        except OSError as exc:
            raise RuleStoreError(f"Cannot read rules CSV file {self._path}: {exc}") from exc

        LOGGER.info("Read %s rules from %s", len(rules), self._path)
        return rules

    def append_hosts(self, hosts: Sequence[str]) -> None:
        """Append ``host,`` records without touching existing lines."""

        if not hosts:
            return

        lines = [f"{host},\n" for host in hosts]
        try:
            if self._needs_leading_newline():
                lines.insert(0, "\n")
            with open(self._path, "a", encoding="utf-8", newline="") as handle:
                handle.writelines(lines)
        except OSError as exc:
            raise RuleStoreError(f"Cannot append to rules CSV file {self._path}: {exc}") from exc

    def _needs_leading_newline(self) -> bool:
        # A last line without a terminator would swallow the first new host.
        try:
            with open(self._path, "rb") as handle:
                handle.seek(0, os.SEEK_END)
                if handle.tell() == 0:
                    return False
                handle.seek(-1, os.SEEK_END)
                return handle.read(1) not in (b"\n", b"\r")
        except FileNotFoundError:
            return False
