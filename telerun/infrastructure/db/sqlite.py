from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from .errors import sqlite_errors


class SqliteDatabase:
    """
    Connection factory shared by the SQLite repositories.

    A fresh connection is opened for every operation; SQLite's own file
    locking serialises writers coming from concurrent bot handlers.
    """

    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._timeout = timeout

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction, translating driver errors."""

        with sqlite_errors():
            conn = sqlite3.connect(self._db_path, timeout=self._timeout)
            try:
                conn.execute("PRAGMA foreign_keys = ON")
                with conn:
                    yield conn
            finally:
                conn.close()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    # Rows inserted by older schema versions may have no timestamp.
    if value is None:
        return None
    return datetime.fromisoformat(value)
