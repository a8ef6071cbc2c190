"""SQLite cookie store adapter.

Implements the core CookieStorePort on top of Chrome's ``Cookies`` database.
The browser owning the database must be closed while this runs; Chrome keeps
the file locked and may rewrite rows we just deleted.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from core.errors import InvalidHostError, NotFoundError, StorageConnectionError, StorageError

LOGGER = logging.getLogger(__name__)

# delete_by_host refuses hosts shorter than this.
MIN_HOST_LENGTH = 2

DEFAULT_QUERY_TIMEOUT = 30.0

# Number of SQLite VM instructions between deadline checks.
PROGRESS_STEPS = 1000


class SQLiteCookieStore:
    """Thin SQLite wrapper that satisfies the CookieStorePort contract.

    The connection is opened on first use and reused for the whole run.
    Statements run in autocommit mode, so each delete is durable at once.
    """

    def __init__(self, db_path: str, query_timeout: float = DEFAULT_QUERY_TIMEOUT) -> None:
        self._db_path = db_path
        self._query_timeout = query_timeout
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def path(self) -> str:
        return self._db_path

    def __enter__(self) -> "SQLiteCookieStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _connect(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        if not os.path.exists(self._db_path):
            raise NotFoundError("cookies SQLite database file", self._db_path)

        # mode=rw refuses to create a fresh empty database at a wrong path.
        uri = f"{Path(self._db_path).resolve().as_uri()}?mode=rw"
        LOGGER.info("Attempting connection to %s", uri)
        try:
            conn = sqlite3.connect(
                uri,
                uri=True,
                timeout=self._query_timeout,
                isolation_level=None,
            )
        except sqlite3.Error as exc:
            raise StorageConnectionError(f"Cannot open {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        self._conn = conn
        return conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @contextmanager
    def _deadline(self, conn: sqlite3.Connection) -> Iterator[None]:
        """Abort the running statement once the query timeout has elapsed."""

        deadline = time.monotonic() + self._query_timeout

        def _check() -> int:
            return 1 if time.monotonic() >= deadline else 0

        conn.set_progress_handler(_check, PROGRESS_STEPS)
        try:
            yield
        finally:
            conn.set_progress_handler(None, PROGRESS_STEPS)

    def distinct_hosts(self) -> set[str]:
        """Return every distinct host_key in the cookies table."""

        conn = self._connect()
        try:
            with self._deadline(conn):
                rows = conn.execute("SELECT DISTINCT host_key FROM cookies").fetchall()
        except sqlite3.Error as exc:
            raise StorageConnectionError(f"Host discovery failed on {self._db_path}: {exc}") from exc
        return {row["host_key"] for row in rows if row["host_key"] is not None}

    def delete_by_host(self, host: str) -> int:
        """Delete all cookies stored under exactly ``host``; return rows removed."""

        if not isinstance(host, str) or len(host) < MIN_HOST_LENGTH:
            raise InvalidHostError(f"HostKey too short ({host!r})")

        conn = self._connect()
        LOGGER.info("DELETE cookies for host_key=%s", host)
        try:
            cur = conn.execute("DELETE FROM cookies WHERE host_key = ?", (host,))
        except sqlite3.Error as exc:
            raise StorageError(f"Delete failed for {host}: {exc}") from exc
        return cur.rowcount
