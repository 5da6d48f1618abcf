from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import SOURCE_VENDOR
from ..core.enums import DayStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Daily attendance summary for one user, unique on (user_id, entry_date).

    ``status`` is always derived from the two timestamps; see
    :func:`..aggregator.derive_status`.
    """

    user_id: int
    entry_date: date
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    total_work_minutes: int = 0
    status: DayStatus = DayStatus.ABSENT
    is_late: bool = False
    lunch_break_start: Optional[datetime] = None
    lunch_break_end: Optional[datetime] = None
    source: str = SOURCE_VENDOR
    last_modified_by: Optional[str] = None
    employee_code: Optional[str] = None
    employee_name: Optional[str] = None
    device_id: Optional[str] = None
    attendance_id: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.check_in_at is not None and self.check_out_at is not None

    def as_dict(self) -> dict:
        def _iso(v: Optional[datetime]) -> Optional[str]:
            return v.isoformat() if v else None

        return {
            "user_id": self.user_id,
            "entry_date": self.entry_date.isoformat(),
            "check_in_at": _iso(self.check_in_at),
            "check_out_at": _iso(self.check_out_at),
            "total_work_minutes": self.total_work_minutes,
            "status": self.status.value,
            "is_late": self.is_late,
            "lunch_break_start": _iso(self.lunch_break_start),
            "lunch_break_end": _iso(self.lunch_break_end),
            "source": self.source,
            "last_modified_by": self.last_modified_by,
            "employee_code": self.employee_code,
            "employee_name": self.employee_name,
        }


@dataclass(frozen=True)
class DayAggregate:
    """Punches of one vendor employee on one local calendar day, folded."""

    emp_code: str
    entry_date: date
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    total_work_minutes: int
    status: DayStatus
    is_late: bool
    emp_name: Optional[str] = None
    device_id: Optional[str] = None
    punch_count: int = 0

    def to_record(self, user_id: int, *, source: str = SOURCE_VENDOR, modified_by: Optional[str] = None) -> AttendanceRecord:
        return AttendanceRecord(
            user_id=int(user_id),
            entry_date=self.entry_date,
            check_in_at=self.check_in_at,
            check_out_at=self.check_out_at,
            total_work_minutes=self.total_work_minutes,
            status=self.status,
            is_late=self.is_late,
            source=source,
            last_modified_by=modified_by,
            employee_code=self.emp_code,
            employee_name=self.emp_name,
            device_id=self.device_id,
        )
