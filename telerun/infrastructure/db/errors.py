"""Translation of database driver exceptions into domain errors.

Repositories wrap every round trip in one of these context managers so the
application layer only ever sees `StoreUnavailable` or `ConstraintViolation`.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

import psycopg2

from telerun.domain.errors import ConstraintViolation, StoreUnavailable


@contextmanager
def sqlite_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.IntegrityError as exc:
        raise ConstraintViolation(str(exc)) from exc
    except OverflowError as exc:
        # Raised by the driver when an int parameter exceeds 64 bits.
        raise ConstraintViolation(str(exc)) from exc
    except sqlite3.Error as exc:
        raise StoreUnavailable(str(exc)) from exc


@contextmanager
def postgres_errors() -> Iterator[None]:
    # PoolError derives from psycopg2.Error, so an exhausted pool is reported
    # as StoreUnavailable as well.
    try:
        yield
    except (psycopg2.IntegrityError, psycopg2.DataError) as exc:
        raise ConstraintViolation(str(exc)) from exc
    except psycopg2.Error as exc:
        raise StoreUnavailable(str(exc)) from exc
