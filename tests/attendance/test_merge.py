from dataclasses import replace
from datetime import date, datetime

import pytest
import pytz

from src.attendance_sync.attendance_sync.attendance.merge import merge_records
from src.attendance_sync.attendance_sync.attendance.model import AttendanceRecord
from src.attendance_sync.attendance_sync.attendance.service import AttendanceWriter
from src.attendance_sync.attendance_sync.core.enums import DayStatus
from src.attendance_sync.attendance_sync.core.exceptions import ValidationError

IST = pytz.timezone("Asia/Kolkata")
DAY = date(2025, 10, 8)


def at(h, m):
    return IST.localize(datetime(2025, 10, 8, h, m))


def _record(check_in=None, check_out=None, **kwargs):
    return AttendanceRecord(user_id=1, entry_date=DAY, check_in_at=check_in, check_out_at=check_out, **kwargs)


def test_no_existing_row_inserts_incoming(policy):
    incoming = _record(at(9, 0), status=DayStatus.IN_PROGRESS)

    assert merge_records(None, incoming, policy) is incoming


def test_complete_row_is_never_regressed(policy):
    manual = _record(at(9, 0), at(17, 0), total_work_minutes=480, status=DayStatus.COMPLETED, last_modified_by="admin")

    merged = merge_records(manual, _record(at(8, 0), at(20, 0), last_modified_by="sync"), policy)

    assert merged == manual


def test_incomplete_row_fills_missing_out(policy):
    existing = _record(at(10, 50), status=DayStatus.IN_PROGRESS, is_late=True)

    merged = merge_records(existing, _record(at(11, 30), at(18, 0), last_modified_by="sync"), policy)

    assert merged.check_in_at == at(10, 50)
    assert merged.check_out_at == at(18, 0)
    assert merged.total_work_minutes == 430
    assert merged.status == DayStatus.COMPLETED
    assert merged.is_late is True
    assert merged.last_modified_by == "sync"


def test_filled_out_equal_to_in_is_dropped(policy):
    existing = _record(at(10, 0), status=DayStatus.IN_PROGRESS)

    merged = merge_records(existing, _record(None, at(10, 0)), policy)

    assert merged.check_out_at is None
    assert merged.status == DayStatus.IN_PROGRESS


def test_absent_row_gets_check_in(policy):
    existing = _record(None, at(18, 0), status=DayStatus.ABSENT)

    merged = merge_records(existing, _record(at(9, 0)), policy)

    assert merged.status == DayStatus.COMPLETED
    assert merged.total_work_minutes == 540


def test_lunch_is_deducted_on_recompute(policy):
    existing = _record(at(9, 0), lunch_break_start=at(13, 0), lunch_break_end=at(13, 45))

    merged = merge_records(existing, _record(None, at(18, 0)), policy)

    assert merged.total_work_minutes == 495


def test_writer_merge_is_idempotent(attendance_repo):
    writer = AttendanceWriter(attendance_repo)
    incoming = _record(at(10, 20), at(17, 12), total_work_minutes=412, status=DayStatus.COMPLETED)

    first = writer.merge(1, DAY, incoming)
    second = writer.merge(1, DAY, incoming)

    assert first == second
    assert len(attendance_repo.rows) == 1


def test_writer_aligns_key_with_arguments(attendance_repo):
    writer = AttendanceWriter(attendance_repo)

    stored = writer.merge(5, DAY, replace(_record(at(9, 0)), user_id=1, entry_date=date(2000, 1, 1)))

    assert (stored.user_id, stored.entry_date) == (5, DAY)


def test_history_rejects_inverted_range(attendance_repo):
    with pytest.raises(ValidationError):
        AttendanceWriter(attendance_repo).history(1, start=DAY, end=date(2025, 10, 1))
