from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..core.exceptions import ValidationError
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceWriter:
    """Single entry point for writing day records.

    Every writer (live sync, backfill, imports) goes through :meth:`merge`, so
    overlapping runs on the same (user, day) converge through the store's
    atomic upsert instead of overwriting each other.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def merge(self, user_id: int, entry_date: date, incoming: AttendanceRecord) -> AttendanceRecord:
        if incoming.user_id != user_id or incoming.entry_date != entry_date:
            incoming = replace(incoming, user_id=int(user_id), entry_date=entry_date)

        stored = self._attendance.upsert_merge(incoming)
        logger.debug(
            "Merged attendance user=%s date=%s -> status=%s minutes=%s",
            user_id, entry_date, stored.status.value, stored.total_work_minutes,
        )
        return stored

    def get(self, user_id: int, entry_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(int(user_id), entry_date)

    def history(self, user_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("end date must not be before start date")
        return self._attendance.list_range(start=start, end=end, user_id=int(user_id))
