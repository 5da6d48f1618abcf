from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, entry_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_merge(self, record: AttendanceRecord) -> AttendanceRecord:
        """Apply the merge policy atomically on (user_id, entry_date).

        Returns the stored row after the write. Implementations must not do a
        separate read-then-write: concurrent sync runs hit the same keys.
        """

        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
