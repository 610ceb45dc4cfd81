from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from psycopg2.extensions import connection as PgConnection
from psycopg2.pool import ThreadedConnectionPool

from .errors import postgres_errors


def create_pool(dsn: str, minconn: int = 1, maxconn: int = 10) -> ThreadedConnectionPool:
    """
    Build the connection pool shared by all Postgres repositories.

    The pool is thread-safe, so telebot's worker threads can borrow
    connections concurrently.
    """

    with postgres_errors():
        return ThreadedConnectionPool(minconn, maxconn, dsn)


@contextmanager
def pooled_connection(pool: ThreadedConnectionPool) -> Iterator[PgConnection]:
    """
    Borrow a connection for one operation.

    The connection's context commits on success and rolls back on error;
    it is always handed back to the pool.
    """

    with postgres_errors():
        conn = pool.getconn()
        try:
            with conn:
                yield conn
        finally:
            pool.putconn(conn)
