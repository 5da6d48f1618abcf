from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import localize
from ..core.enums import DayStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .policy import AttendancePolicy
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, entry_date, employee_code, employee_name,
    check_in_at, check_out_at, total_work_minutes, status, is_late,
    lunch_break_start, lunch_break_end, device_id, source, last_modified_by
"""

# Row is "complete" (check-in and check-out present) before this statement runs.
_COMPLETE = "(check_in_at IS NOT NULL AND check_out_at IS NOT NULL)"
_NEW_IN = "COALESCE(check_in_at, VALUES(check_in_at))"
_NEW_OUT = f"COALESCE(check_out_at, IF(VALUES(check_out_at) <=> {_NEW_IN}, NULL, VALUES(check_out_at)))"
_LUNCH_MINUTES = (
    "IF(lunch_break_start IS NOT NULL AND lunch_break_end IS NOT NULL, "
    "GREATEST(0, TIMESTAMPDIFF(MINUTE, lunch_break_start, lunch_break_end)), 0)"
)
_WORK_MINUTES = (
    f"IF({_NEW_IN} IS NULL OR {_NEW_OUT} IS NULL, 0, "
    f"GREATEST(0, GREATEST(0, TIMESTAMPDIFF(MINUTE, {_NEW_IN}, {_NEW_OUT})) - {_LUNCH_MINUTES}))"
)
_STATUS = (
    f"CASE WHEN {_NEW_IN} IS NULL THEN '{DayStatus.ABSENT.value}' "
    f"WHEN {_NEW_OUT} IS NULL THEN '{DayStatus.IN_PROGRESS.value}' "
    f"ELSE '{DayStatus.COMPLETED.value}' END"
)
_IS_LATE = f"IF({_NEW_IN} IS NULL, 0, TIME({_NEW_IN}) >= CAST(%(late_from)s AS TIME))"

# MySQL evaluates ON DUPLICATE KEY assignments left to right and later ones see
# earlier results, so the two timestamps are assigned last: everything above
# them still reads the pre-merge values through _COMPLETE/_NEW_IN/_NEW_OUT.
UPSERT_MERGE_SQL = f"""
    INSERT INTO attendance_records(
        user_id, entry_date, employee_code, employee_name,
        check_in_at, check_out_at, total_work_minutes, status, is_late,
        lunch_break_start, lunch_break_end, device_id, source, last_modified_by
    )
    VALUES(
        %(user_id)s, %(entry_date)s, %(employee_code)s, %(employee_name)s,
        %(check_in_at)s, %(check_out_at)s, %(total_work_minutes)s, %(status)s, %(is_late)s,
        %(lunch_break_start)s, %(lunch_break_end)s, %(device_id)s, %(source)s, %(last_modified_by)s
    )
    ON DUPLICATE KEY UPDATE
        lunch_break_start = IF({_COMPLETE}, lunch_break_start, COALESCE(lunch_break_start, VALUES(lunch_break_start))),
        lunch_break_end = IF({_COMPLETE}, lunch_break_end, COALESCE(lunch_break_end, VALUES(lunch_break_end))),
        total_work_minutes = IF({_COMPLETE}, total_work_minutes, {_WORK_MINUTES}),
        status = IF({_COMPLETE}, status, {_STATUS}),
        is_late = IF({_COMPLETE}, is_late, {_IS_LATE}),
        employee_code = IF({_COMPLETE}, employee_code, COALESCE(employee_code, VALUES(employee_code))),
        employee_name = IF({_COMPLETE}, employee_name, COALESCE(employee_name, VALUES(employee_name))),
        device_id = IF({_COMPLETE}, device_id, COALESCE(device_id, VALUES(device_id))),
        last_modified_by = IF({_COMPLETE}, last_modified_by, COALESCE(VALUES(last_modified_by), last_modified_by)),
        check_out_at = IF({_COMPLETE}, check_out_at, {_NEW_OUT}),
        check_in_at = COALESCE(check_in_at, VALUES(check_in_at))
"""


def late_from_param(policy: AttendancePolicy) -> str:
    """First clock value (HH:MM:SS) that counts as late under ``policy``."""

    minutes = policy.late_cutoff.hour * 60 + policy.late_cutoff.minute + 1
    return f"{minutes // 60:02d}:{minutes % 60:02d}:00"


class MySQLAttendanceRepository(AttendanceRepository):
    """DATETIME columns hold naive wall-clock times in the policy time zone."""

    def __init__(self, conn_factory: DatabaseConnection, policy: Optional[AttendancePolicy] = None):
        self._conn_factory = conn_factory
        self._policy = policy or AttendancePolicy()

    def _to_db(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return localize(value, self._policy.tz_name).replace(tzinfo=None)

    def _from_db(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return localize(value, self._policy.tz_name)

    def _row_to_record(self, r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            user_id=int(r["user_id"]),
            entry_date=r["entry_date"],
            employee_code=r.get("employee_code"),
            employee_name=r.get("employee_name"),
            check_in_at=self._from_db(r.get("check_in_at")),
            check_out_at=self._from_db(r.get("check_out_at")),
            total_work_minutes=int(r.get("total_work_minutes") or 0),
            status=DayStatus(r["status"]),
            is_late=as_bool(r.get("is_late")),
            lunch_break_start=self._from_db(r.get("lunch_break_start")),
            lunch_break_end=self._from_db(r.get("lunch_break_end")),
            device_id=r.get("device_id"),
            source=r["source"],
            last_modified_by=r.get("last_modified_by"),
        )

    def get_for_user_and_date(self, user_id: int, entry_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND entry_date=%s",
                (int(user_id), entry_date),
            )
            r = fetchone(cur)
            return self._row_to_record(r) if r else None

    def upsert_merge(self, record: AttendanceRecord) -> AttendanceRecord:
        params = {
            "user_id": int(record.user_id),
            "entry_date": record.entry_date,
            "employee_code": record.employee_code,
            "employee_name": record.employee_name,
            "check_in_at": self._to_db(record.check_in_at),
            "check_out_at": self._to_db(record.check_out_at),
            "total_work_minutes": int(record.total_work_minutes),
            "status": record.status.value,
            "is_late": 1 if record.is_late else 0,
            "lunch_break_start": self._to_db(record.lunch_break_start),
            "lunch_break_end": self._to_db(record.lunch_break_end),
            "device_id": record.device_id,
            "source": record.source,
            "last_modified_by": record.last_modified_by,
            "late_from": late_from_param(self._policy),
        }
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(UPSERT_MERGE_SQL, params)
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND entry_date=%s",
                (int(record.user_id), record.entry_date),
            )
            return self._row_to_record(fetchone(cur))

    def list_range(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["entry_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY entry_date DESC, user_id ASC
                """,
                tuple(params),
            )
            return [self._row_to_record(r) for r in fetchall(cur)]
