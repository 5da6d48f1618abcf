from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import SyncCursor


class SyncCursorRepository(Protocol):
    """One row per stream. Implementations raise ``CursorStoreUnavailable``
    when the store cannot be reached."""

    def get(self, stream_id: str) -> Optional[SyncCursor]:
        raise NotImplementedError

    def save(self, stream_id: str, token: str, synced_at: datetime) -> None:
        raise NotImplementedError
