from __future__ import annotations

from typing import List, Sequence

from psycopg2.pool import ThreadedConnectionPool

from telerun.domain.models import OwnerConstraint, Run, Score
from telerun.domain.repositories import RunRepository

from .postgres import pooled_connection


class PostgresRunRepository(RunRepository):
    """
    Postgres-backed implementation of `RunRepository`.

    Shares its connection pool with `PostgresIdentityRepository`; the
    `users` table must exist before this repository is constructed.
    """

    def __init__(self, pool: ThreadedConnectionPool) -> None:
        self._pool = pool
        self._ensure_table()

    def _ensure_table(self) -> None:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS runs (
                        id SERIAL PRIMARY KEY,
                        distance DOUBLE PRECISION NOT NULL CHECK (distance >= 0),
                        run_datetime TIMESTAMP DEFAULT (now() AT TIME ZONE 'utc'),
                        user_id INTEGER NOT NULL REFERENCES users (id)
                    )
                    """
                )

    @staticmethod
    def _to_domain(row: tuple) -> Run:
        return Run(
            id=int(row[0]),
            distance=float(row[1]),
            run_datetime=row[2],
            user_id=int(row[3]),
        )

    def add_run(self, distance: float, user_id: int) -> int:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO runs (distance, user_id)
                    VALUES (%s, %s)
                    RETURNING id
                    """,
                    (distance, user_id),
                )
                return int(cur.fetchone()[0])

    def get_runs_for_users(self, user_ids: Sequence[int], limit: int) -> List[Run]:
        if not user_ids:
            return []
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, distance, run_datetime, user_id
                    FROM runs
                    WHERE user_id = ANY(%s)
                    ORDER BY run_datetime DESC NULLS LAST, id DESC
                    LIMIT %s
                    """,
                    (list(user_ids), limit),
                )
                rows = cur.fetchall()
        return [self._to_domain(row) for row in rows]

    def update_run(self, run_id: int, distance: float, owner: OwnerConstraint) -> int:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE runs
                    SET distance = %s
                    FROM users
                    WHERE runs.id = %s
                      AND users.id = runs.user_id
                      AND users.chat_id = %s
                      AND users.telegram_userid = %s
                    """,
                    (distance, run_id, owner.chat_id, owner.external_user_id),
                )
                return cur.rowcount

    def delete_run(self, run_id: int, owner: OwnerConstraint) -> int:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM runs
                    USING users
                    WHERE runs.id = %s
                      AND users.id = runs.user_id
                      AND users.chat_id = %s
                      AND users.telegram_userid = %s
                    """,
                    (run_id, owner.chat_id, owner.external_user_id),
                )
                return cur.rowcount

    def tally_for_users(self, user_ids: Sequence[int]) -> List[Score]:
        if not user_ids:
            return []
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT users.user_name, COUNT(runs.id), SUM(runs.distance)
                    FROM runs
                    JOIN users ON users.id = runs.user_id
                    WHERE runs.user_id = ANY(%s)
                    GROUP BY users.id, users.user_name
                    ORDER BY users.id
                    """,
                    (list(user_ids),),
                )
                rows = cur.fetchall()
        return [
            Score(display_name=row[0], medals=int(row[1]), distance=float(row[2]))
            for row in rows
        ]
