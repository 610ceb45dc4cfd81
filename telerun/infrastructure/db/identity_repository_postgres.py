from __future__ import annotations

from typing import List, Optional

from psycopg2.pool import ThreadedConnectionPool

from telerun.domain.models import Identity
from telerun.domain.repositories import IdentityRepository

from .postgres import pooled_connection


class PostgresIdentityRepository(IdentityRepository):
    """
    Postgres-backed implementation of `IdentityRepository`.

    Identities live in the `users` table; the unique constraint on
    (chat_id, telegram_userid, user_name) is what makes concurrent
    first-time inserts safe.
    """

    def __init__(self, pool: ThreadedConnectionPool) -> None:
        self._pool = pool
        self._ensure_table()

    def _ensure_table(self) -> None:
        """
        Ensure that the `users` table exists.

        Schema:
          - id SERIAL         -- surrogate key referenced by `runs.user_id`
          - chat_id TEXT
          - telegram_userid TEXT
          - user_name TEXT
        """

        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS users (
                        id SERIAL PRIMARY KEY,
                        chat_id TEXT NOT NULL,
                        telegram_userid TEXT NOT NULL,
                        user_name TEXT NOT NULL,
                        UNIQUE (chat_id, telegram_userid, user_name)
                    )
                    """
                )

    @staticmethod
    def _to_domain(row: tuple) -> Identity:
        return Identity(
            id=int(row[0]),
            chat_id=str(row[1]),
            external_user_id=str(row[2]),
            display_name=row[3],
        )

    def find_identity(
        self,
        chat_id: str,
        external_user_id: str,
        display_name: str,
    ) -> Optional[Identity]:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, chat_id, telegram_userid, user_name
                    FROM users
                    WHERE chat_id = %s AND telegram_userid = %s AND user_name = %s
                    """,
                    (chat_id, external_user_id, display_name),
                )
                row = cur.fetchone()
        if not row:
            return None
        return self._to_domain(row)

    def insert_identity(
        self,
        chat_id: str,
        external_user_id: str,
        display_name: str,
    ) -> None:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO users (chat_id, telegram_userid, user_name)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (chat_id, telegram_userid, user_name) DO NOTHING
                    """,
                    (chat_id, external_user_id, display_name),
                )

    def get_identities_in_chat(self, chat_id: str) -> List[Identity]:
        with pooled_connection(self._pool) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, chat_id, telegram_userid, user_name
                    FROM users
                    WHERE chat_id = %s
                    ORDER BY id
                    """,
                    (chat_id,),
                )
                rows = cur.fetchall()
        return [self._to_domain(row) for row in rows]
