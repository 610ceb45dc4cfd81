from __future__ import annotations

import sqlite3
from typing import List, Sequence

from telerun.domain.models import OwnerConstraint, Run, Score
from telerun.domain.repositories import RunRepository

from .sqlite import SqliteDatabase, parse_timestamp


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class SqliteRunRepository(RunRepository):
    """
    SQLite-backed implementation of `RunRepository`.

    Owns the `runs` table. Ownership checks join against the `users` table
    managed by `SqliteIdentityRepository`, which must be created first.
    """

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db
        self._ensure_table()

    def _ensure_table(self) -> None:
        with self._db.connection() as conn:
            # Millisecond timestamps keep "most recent first" meaningful for
            # runs submitted within the same second.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS runs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    distance REAL NOT NULL CHECK (distance >= 0),
                    run_datetime TIMESTAMP
                        DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
                    user_id INTEGER NOT NULL REFERENCES users (id)
                )
                """
            )

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Run:
        return Run(
            id=int(row[0]),
            distance=float(row[1]),
            run_datetime=parse_timestamp(row[2]),
            user_id=int(row[3]),
        )

    def add_run(self, distance: float, user_id: int) -> int:
        with self._db.connection() as conn:
            cur = conn.execute(
                "INSERT INTO runs (distance, user_id) VALUES (?, ?)",
                (distance, user_id),
            )
            return int(cur.lastrowid)

    def get_runs_for_users(self, user_ids: Sequence[int], limit: int) -> List[Run]:
        if not user_ids:
            return []
        with self._db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT id, distance, run_datetime, user_id
                FROM runs
                WHERE user_id IN ({_placeholders(len(user_ids))})
                ORDER BY run_datetime DESC, id DESC
                LIMIT ?
                """,
                (*user_ids, limit),
            ).fetchall()
        return [self._to_domain(row) for row in rows]

    def update_run(self, run_id: int, distance: float, owner: OwnerConstraint) -> int:
        with self._db.connection() as conn:
            cur = conn.execute(
                """
                UPDATE runs
                SET distance = ?
                WHERE id = ?
                  AND user_id IN (
                      SELECT id FROM users
                      WHERE chat_id = ? AND telegram_userid = ?
                  )
                """,
                (distance, run_id, owner.chat_id, owner.external_user_id),
            )
            return cur.rowcount

    def delete_run(self, run_id: int, owner: OwnerConstraint) -> int:
        with self._db.connection() as conn:
            cur = conn.execute(
                """
                DELETE FROM runs
                WHERE id = ?
                  AND user_id IN (
                      SELECT id FROM users
                      WHERE chat_id = ? AND telegram_userid = ?
                  )
                """,
                (run_id, owner.chat_id, owner.external_user_id),
            )
            return cur.rowcount

    def tally_for_users(self, user_ids: Sequence[int]) -> List[Score]:
        if not user_ids:
            return []
        with self._db.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT users.user_name, COUNT(runs.id), SUM(runs.distance)
                FROM runs
                JOIN users ON users.id = runs.user_id
                WHERE runs.user_id IN ({_placeholders(len(user_ids))})
                GROUP BY users.id, users.user_name
                ORDER BY users.id
                """,
                tuple(user_ids),
            ).fetchall()
        return [
            Score(display_name=row[0], medals=int(row[1]), distance=float(row[2]))
            for row in rows
        ]
