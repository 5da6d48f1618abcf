from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

import pytest
import pytz

from src.attendance_sync.attendance_sync.attendance.merge import merge_records
from src.attendance_sync.attendance_sync.attendance.model import AttendanceRecord
from src.attendance_sync.attendance_sync.attendance.policy import AttendancePolicy
from src.attendance_sync.attendance_sync.mappings.model import EmployeeMapping
from src.attendance_sync.attendance_sync.sync.model import SyncCursor
from src.attendance_sync.attendance_sync.users.model import DirectoryUser

IST = pytz.timezone("Asia/Kolkata")


def ist(*args) -> datetime:
    return IST.localize(datetime(*args))


class InMemoryUserDirectory:
    def __init__(self, users: Optional[List[DirectoryUser]] = None):
        self._users: Dict[int, DirectoryUser] = {u.user_id: u for u in (users or [])}
        self.created: List[DirectoryUser] = []

    def get_by_id(self, user_id):
        return self._users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self._users.values() if (u.email or "").lower() == email.lower()), None)

    def list_active(self):
        return [u for u in self._users.values() if u.is_active]

    def create_user(self, *, full_name, email, password_hash):
        user_id = max(self._users, default=0) + 1
        user = DirectoryUser(user_id=user_id, full_name=full_name, email=email)
        self._users[user_id] = user
        self.created.append(user)
        return user_id


class InMemoryMappingRepo:
    def __init__(self, mappings: Optional[List[EmployeeMapping]] = None):
        self._rows: Dict[str, EmployeeMapping] = {m.emp_code: m for m in (mappings or [])}

    def get_active(self, emp_code):
        m = self._rows.get(emp_code)
        return m if m and m.is_active else None

    def list_active(self):
        return [m for m in self._rows.values() if m.is_active]

    def create_if_absent(self, *, emp_code, user_id, confidence, vendor_name=None, vendor_email=None):
        if self.get_active(emp_code):
            return False
        self._rows[emp_code] = EmployeeMapping(
            emp_code=emp_code, user_id=user_id, confidence=confidence, vendor_name=vendor_name, vendor_email=vendor_email
        )
        return True

    def replace(self, *, emp_code, user_id, confidence, vendor_name=None, vendor_email=None):
        self._rows[emp_code] = EmployeeMapping(
            emp_code=emp_code, user_id=user_id, confidence=confidence, vendor_name=vendor_name, vendor_email=vendor_email
        )

    def deactivate(self, emp_code):
        m = self.get_active(emp_code)
        if not m:
            return False
        self._rows[emp_code] = replace(m, is_active=False)
        return True


class InMemoryAttendanceRepo:
    """Applies the reference merge policy, like the SQL upsert does."""

    def __init__(self, policy: Optional[AttendancePolicy] = None):
        self._policy = policy or AttendancePolicy()
        self.rows: Dict[Tuple[int, date], AttendanceRecord] = {}
        self.writes = 0

    def get_for_user_and_date(self, user_id, entry_date):
        return self.rows.get((int(user_id), entry_date))

    def upsert_merge(self, record):
        key = (record.user_id, record.entry_date)
        self.rows[key] = merge_records(self.rows.get(key), record, self._policy)
        self.writes += 1
        return self.rows[key]

    def list_range(self, *, start, end, user_id=None):
        out = [
            r for (uid, day), r in self.rows.items()
            if start <= day <= end and (user_id is None or uid == user_id)
        ]
        return sorted(out, key=lambda r: (r.entry_date, r.user_id), reverse=True)


class InMemoryCursorRepo:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.rows: Dict[str, SyncCursor] = {
            sid: SyncCursor(stream_id=sid, token=tok) for sid, tok in (initial or {}).items()
        }
        self.saves = 0

    def get(self, stream_id):
        return self.rows.get(stream_id)

    def save(self, stream_id, token, synced_at):
        self.rows[stream_id] = SyncCursor(stream_id=stream_id, token=token, last_sync_at=synced_at)
        self.saves += 1


@pytest.fixture
def fixed_now():
    return ist(2025, 10, 8, 12, 0, 0)


@pytest.fixture
def policy():
    return AttendancePolicy()


@pytest.fixture
def users():
    return InMemoryUserDirectory(
        [
            DirectoryUser(user_id=1, full_name="Sakshi Sharma", email="sakshi@example.com"),
            DirectoryUser(user_id=2, full_name="Rahul Verma", email="rahul@example.com"),
            DirectoryUser(user_id=3, full_name="Priya Patel", email=None),
        ]
    )


@pytest.fixture
def mappings():
    return InMemoryMappingRepo()


@pytest.fixture
def attendance_repo(policy):
    return InMemoryAttendanceRepo(policy)


@pytest.fixture
def cursors():
    return InMemoryCursorRepo()


@pytest.fixture
def make_users():
    return InMemoryUserDirectory


@pytest.fixture
def make_mappings():
    return InMemoryMappingRepo
