"""Fold punch events into per-day attendance.

Group key is (vendor employee code, local calendar date). Within a group the
earliest ``in`` is the check-in and the latest ``out`` is the check-out; an
``out`` equal to the check-in is dropped, so a vendor echoing one punch as
both directions never yields a completed day.

``unspecified`` punches (raw rows without a direction marker) count as
candidates for both sides, so a lone one gives an in-progress day and several
give earliest-in / latest-out.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..common.datetime_utils import localize
from ..core.enums import DayStatus, PunchDirection
from ..vendor.model import PunchEvent
from .model import DayAggregate
from .policy import AttendancePolicy

GroupKey = Tuple[str, date]


def derive_status(check_in_at: Optional[datetime], check_out_at: Optional[datetime]) -> DayStatus:
    if check_in_at is None:
        return DayStatus.ABSENT
    if check_out_at is None:
        return DayStatus.IN_PROGRESS
    return DayStatus.COMPLETED


def work_minutes(
    check_in_at: Optional[datetime],
    check_out_at: Optional[datetime],
    lunch_break_start: Optional[datetime] = None,
    lunch_break_end: Optional[datetime] = None,
) -> int:
    if check_in_at is None or check_out_at is None:
        return 0

    worked = max(0, int((check_out_at - check_in_at).total_seconds() // 60))
    if lunch_break_start is not None and lunch_break_end is not None:
        lunch = max(0, int((lunch_break_end - lunch_break_start).total_seconds() // 60))
        worked -= lunch
    return max(0, worked)


def group_punches(events: Iterable[PunchEvent], tz_name: str) -> Dict[GroupKey, List[PunchEvent]]:
    groups: Dict[GroupKey, List[PunchEvent]] = defaultdict(list)
    for event in events:
        local_day = localize(event.timestamp, tz_name).date()
        groups[(event.emp_code, local_day)].append(event)
    return dict(groups)


class DayAggregator:
    def __init__(self, policy: Optional[AttendancePolicy] = None):
        self._policy = policy or AttendancePolicy()

    @property
    def policy(self) -> AttendancePolicy:
        return self._policy

    def aggregate(self, events: Iterable[PunchEvent]) -> List[DayAggregate]:
        groups = group_punches(events, self._policy.tz_name)
        days = [self.aggregate_group(code, day, punches) for (code, day), punches in groups.items()]
        days.sort(key=lambda d: (d.entry_date, d.emp_code))
        return days

    def aggregate_group(self, emp_code: str, entry_date: date, punches: List[PunchEvent]) -> DayAggregate:
        ins = [p.timestamp for p in punches if p.direction in (PunchDirection.IN, PunchDirection.UNSPECIFIED)]
        outs = [p.timestamp for p in punches if p.direction in (PunchDirection.OUT, PunchDirection.UNSPECIFIED)]

        check_in_at = min(ins) if ins else None
        check_out_at = max(outs) if outs else None
        if check_out_at is not None and check_out_at == check_in_at:
            check_out_at = None

        name = next((p.emp_name for p in punches if p.emp_name), None)
        device = next((p.device_id for p in reversed(punches) if p.device_id), None)

        return DayAggregate(
            emp_code=emp_code,
            entry_date=entry_date,
            check_in_at=check_in_at,
            check_out_at=check_out_at,
            total_work_minutes=work_minutes(check_in_at, check_out_at),
            status=derive_status(check_in_at, check_out_at),
            is_late=self._policy.is_late(check_in_at),
            emp_name=name,
            device_id=device,
            punch_count=len(punches),
        )
