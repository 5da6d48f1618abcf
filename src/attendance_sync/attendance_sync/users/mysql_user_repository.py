from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import DirectoryUser
from .repository import UserDirectory


def _row_to_user(row: dict) -> DirectoryUser:
    return DirectoryUser(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row.get("email"),
        is_active=as_bool(row.get("is_active", 1)),
    )


class MySQLUserDirectory(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[DirectoryUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, email, is_active FROM users WHERE user_id=%s",
                (int(user_id),),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[DirectoryUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, email, is_active FROM users WHERE LOWER(email)=LOWER(%s)",
                (email,),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_active(self) -> Sequence[DirectoryUser]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, is_active
                FROM users
                WHERE is_active=1
                ORDER BY full_name ASC
                """
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(self, *, full_name: str, email: str, password_hash: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, is_active)
                VALUES(%s,%s,%s,1)
                """,
                (full_name, email, password_hash),
            )
            return int(cur.lastrowid)
