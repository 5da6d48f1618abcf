"""The SQL upsert against the pure merge policy, on a real MySQL database.

Runs only with ``TEST_MYSQL=1``; connection settings come from
``config.testing`` (``DB_HOST``, ``DB_USER``, ``DB_PASSWORD``, ``DB_NAME``).
"""

import os
import uuid
from datetime import date, datetime

import pytest
import pytz

from config import testing as settings
from src.attendance_sync.attendance_sync.attendance.aggregator import derive_status, work_minutes
from src.attendance_sync.attendance_sync.attendance.merge import merge_records
from src.attendance_sync.attendance_sync.attendance.model import AttendanceRecord
from src.attendance_sync.attendance_sync.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.attendance_sync.attendance_sync.database.bootstrap import apply_schema
from src.attendance_sync.attendance_sync.database.connection import DatabaseConnection, DBConfig
from src.attendance_sync.attendance_sync.database.mysql_base import db_cursor
from src.attendance_sync.attendance_sync.users.mysql_user_repository import MySQLUserDirectory

pytestmark = pytest.mark.skipif(os.getenv("TEST_MYSQL") != "1", reason="set TEST_MYSQL=1 to run against MySQL")

IST = pytz.timezone("Asia/Kolkata")
COMPARED = (
    "check_in_at",
    "check_out_at",
    "total_work_minutes",
    "status",
    "is_late",
    "employee_code",
    "employee_name",
    "device_id",
    "last_modified_by",
)


@pytest.fixture(scope="module")
def conn():
    apply_schema(settings.DB_CONFIG)
    return DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))


@pytest.fixture
def user_id(conn):
    uid = MySQLUserDirectory(conn).create_user(
        full_name="Merge Check",
        email=f"merge-{uuid.uuid4().hex[:12]}@example.com",
        password_hash="x",
    )
    yield uid
    with db_cursor(conn) as (_, cur):
        cur.execute("DELETE FROM attendance_records WHERE user_id=%s", (uid,))
        cur.execute("DELETE FROM users WHERE user_id=%s", (uid,))


@pytest.fixture
def repo(conn, policy):
    return MySQLAttendanceRepository(conn, policy)


def _record(policy, user_id, day, check_in=None, check_out=None, **kwargs):
    def at(hm):
        if hm is None:
            return None
        return IST.localize(datetime.combine(day, datetime.strptime(hm, "%H:%M").time()))

    cin, cout = at(check_in), at(check_out)
    return AttendanceRecord(
        user_id=user_id,
        entry_date=day,
        check_in_at=cin,
        check_out_at=cout,
        total_work_minutes=work_minutes(cin, cout),
        status=derive_status(cin, cout),
        is_late=policy.is_late(cin),
        **kwargs,
    )


def _fields(record):
    return {name: getattr(record, name) for name in COMPARED}


CASES = [
    # (existing (in, out), incoming (in, out))
    pytest.param(None, ("09:00", "17:00"), id="fresh-insert"),
    pytest.param(("09:00", "17:00"), ("08:00", "20:00"), id="complete-row-untouched"),
    pytest.param(("09:00", None), ("09:00", "09:00"), id="out-equal-to-in-dropped"),
    pytest.param(("10:50", None), ("11:30", "18:00"), id="in-only-gets-out"),
    pytest.param(("10:50", None), (None, "18:00"), id="in-only-gets-bare-out"),
    pytest.param((None, "18:00"), ("10:40", None), id="out-only-gets-in"),
    pytest.param((None, "18:00"), ("10:50", "19:00"), id="out-only-keeps-out-late-in"),
    pytest.param(("09:00", None), ("09:30", None), id="in-only-keeps-earlier-in"),
]


@pytest.mark.parametrize("existing_times,incoming_times", CASES)
def test_sql_upsert_agrees_with_merge_policy(repo, policy, user_id, existing_times, incoming_times):
    # Each case gets a fresh user, so one day is enough.
    day = date(2031, 1, 1)
    stored = None
    if existing_times is not None:
        stored = repo.upsert_merge(
            _record(policy, user_id, day, *existing_times, employee_code="0006", last_modified_by="admin")
        )

    incoming = _record(
        policy,
        user_id,
        day,
        *incoming_times,
        employee_code="0006",
        employee_name="Sakshi Sharma",
        device_id="D1",
        last_modified_by="sync",
    )

    expected = merge_records(stored, incoming, policy)
    actual = repo.upsert_merge(incoming)

    assert _fields(actual) == _fields(expected)
    assert _fields(repo.get_for_user_and_date(user_id, day)) == _fields(expected)
