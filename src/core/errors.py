"""Error taxonomy shared by the core and adapters.

Fatal errors (missing inputs, unreachable backend) abort the run. Per-host
errors raised while deleting are collected by the reconciler instead.
"""

from __future__ import annotations


class CookieJanitorError(Exception):
    """Base class for all cookie-janitor errors."""


class NotFoundError(CookieJanitorError, FileNotFoundError):
    """A required input file (rule file or cookie database) does not exist."""

    def __init__(self, what: str, path: str) -> None:
        super().__init__(f"Cannot locate {what} at {path}")
        self.what = what
        self.path = path


class MalformedRecordError(CookieJanitorError, ValueError):
    """A rule file line could not be turned into a rule."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        super().__init__(f"line {line_number}: {reason} ({line!r})")
        self.line_number = line_number
        self.line = line
        self.reason = reason


class InvalidHostError(CookieJanitorError, ValueError):
    """A host was rejected by the delete guard."""


class StorageError(CookieJanitorError):
    """The cookie backend failed while executing a statement."""


class StorageConnectionError(StorageError):
    """The cookie backend could not be opened or the discovery query failed."""


class RuleStoreError(CookieJanitorError):
    """The rule file could not be read or appended to."""
