from __future__ import annotations

from datetime import datetime
from typing import Optional

import mysql.connector

from ..core.exceptions import CursorStoreUnavailable
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SyncCursor
from .repository import SyncCursorRepository


class MySQLSyncCursorRepository(SyncCursorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, stream_id: str) -> Optional[SyncCursor]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT stream_id, token, last_sync_at FROM sync_cursors WHERE stream_id=%s",
                    (stream_id,),
                )
                row = fetchone(cur)
        except mysql.connector.Error as e:
            raise CursorStoreUnavailable(f"Cannot read cursor for {stream_id}: {e}") from e

        if not row:
            return None
        return SyncCursor(stream_id=row["stream_id"], token=row["token"], last_sync_at=row.get("last_sync_at"))

    def save(self, stream_id: str, token: str, synced_at: datetime) -> None:
        naive = synced_at.replace(tzinfo=None)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO sync_cursors(stream_id, token, last_sync_at)
                    VALUES(%s,%s,%s)
                    ON DUPLICATE KEY UPDATE token=VALUES(token), last_sync_at=VALUES(last_sync_at)
                    """,
                    (stream_id, token, naive),
                )
        except mysql.connector.Error as e:
            raise CursorStoreUnavailable(f"Cannot save cursor for {stream_id}: {e}") from e
