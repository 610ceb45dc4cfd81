from __future__ import annotations

import sqlite3
from typing import List, Optional

from telerun.domain.models import Identity
from telerun.domain.repositories import IdentityRepository

from .sqlite import SqliteDatabase


class SqliteIdentityRepository(IdentityRepository):
    """
    SQLite-backed implementation of `IdentityRepository`.

    Stores identities in a `users` table keyed by a surrogate id, with a
    uniqueness constraint on (chat_id, telegram_userid, user_name).
    """

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db
        self._ensure_table()

    def _ensure_table(self) -> None:
        with self._db.connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    chat_id TEXT NOT NULL,
                    telegram_userid TEXT NOT NULL,
                    user_name TEXT NOT NULL,
                    UNIQUE (chat_id, telegram_userid, user_name)
                )
                """
            )

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> Identity:
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
        with self._db.connection() as conn:
            row = conn.execute(
                """
                SELECT id, chat_id, telegram_userid, user_name
                FROM users
                WHERE chat_id = ? AND telegram_userid = ? AND user_name = ?
                """,
                (chat_id, external_user_id, display_name),
            ).fetchone()
        if not row:
            return None
        return self._to_domain(row)

    def insert_identity(
        self,
        chat_id: str,
        external_user_id: str,
        display_name: str,
    ) -> None:
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO users (chat_id, telegram_userid, user_name)
                VALUES (?, ?, ?)
                ON CONFLICT (chat_id, telegram_userid, user_name) DO NOTHING
                """,
                (chat_id, external_user_id, display_name),
            )

    def get_identities_in_chat(self, chat_id: str) -> List[Identity]:
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT id, chat_id, telegram_userid, user_name
                FROM users
                WHERE chat_id = ?
                ORDER BY id
                """,
                (chat_id,),
            ).fetchall()
        return [self._to_domain(row) for row in rows]
