"""Merge policy for attendance records.

- no existing row: the incoming record is stored as is;
- existing row complete (check-in and check-out present): untouched, which
  protects manual corrections and finalized days from stale replays;
- otherwise: only null fields are filled from the incoming record, then
  work minutes, status and lateness are recomputed.

:class:`~.mysql_attendance_repository.MySQLAttendanceRepository` expresses the
same rules in a single ``INSERT ... ON DUPLICATE KEY UPDATE``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .aggregator import derive_status, work_minutes
from .model import AttendanceRecord
from .policy import AttendancePolicy


def merge_records(
    existing: Optional[AttendanceRecord],
    incoming: AttendanceRecord,
    policy: AttendancePolicy,
) -> AttendanceRecord:
    if existing is None:
        return incoming
    if existing.is_complete:
        return existing

    check_in_at = existing.check_in_at or incoming.check_in_at
    check_out_at = existing.check_out_at
    if check_out_at is None and incoming.check_out_at is not None and incoming.check_out_at != check_in_at:
        check_out_at = incoming.check_out_at

    lunch_start = existing.lunch_break_start or incoming.lunch_break_start
    lunch_end = existing.lunch_break_end or incoming.lunch_break_end

    return replace(
        existing,
        check_in_at=check_in_at,
        check_out_at=check_out_at,
        lunch_break_start=lunch_start,
        lunch_break_end=lunch_end,
        total_work_minutes=work_minutes(check_in_at, check_out_at, lunch_start, lunch_end),
        status=derive_status(check_in_at, check_out_at),
        is_late=policy.is_late(check_in_at),
        employee_code=existing.employee_code or incoming.employee_code,
        employee_name=existing.employee_name or incoming.employee_name,
        device_id=existing.device_id or incoming.device_id,
        last_modified_by=incoming.last_modified_by or existing.last_modified_by,
    )
