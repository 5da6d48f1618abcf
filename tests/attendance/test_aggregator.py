from datetime import date, datetime, time

import pytest
import pytz

from src.attendance_sync.attendance_sync.attendance.aggregator import DayAggregator, derive_status, work_minutes
from src.attendance_sync.attendance_sync.attendance.policy import AttendancePolicy
from src.attendance_sync.attendance_sync.core.enums import DayStatus, PunchDirection
from src.attendance_sync.attendance_sync.vendor.adapter import VendorAdapter
from src.attendance_sync.attendance_sync.vendor.model import PunchEvent

IST = pytz.timezone("Asia/Kolkata")


def _punch(code, direction, *dt, name=None):
    return PunchEvent(emp_code=code, emp_name=name, timestamp=IST.localize(datetime(*dt)), direction=direction)


def test_scenario_paired_row_gives_completed_day():
    events = VendorAdapter().normalize(
        [{"Empcode": "0006", "Name": "Sakshi", "DateString": "08/10/2025", "INTime": "10:20", "OUTTime": "17:12"}]
    )

    [day] = DayAggregator().aggregate(events)

    assert day.emp_code == "0006"
    assert day.entry_date == date(2025, 10, 8)
    assert day.check_in_at == IST.localize(datetime(2025, 10, 8, 10, 20))
    assert day.check_out_at == IST.localize(datetime(2025, 10, 8, 17, 12))
    assert day.total_work_minutes == 412
    assert day.status == DayStatus.COMPLETED
    assert day.is_late is False


def test_identical_in_and_out_is_in_progress():
    events = [
        _punch("0006", PunchDirection.IN, 2025, 10, 8, 10, 0),
        _punch("0006", PunchDirection.OUT, 2025, 10, 8, 10, 0),
    ]

    [day] = DayAggregator().aggregate(events)

    assert day.check_out_at is None
    assert day.status == DayStatus.IN_PROGRESS
    assert day.total_work_minutes == 0


def test_earliest_in_and_latest_out_win():
    events = [
        _punch("0006", PunchDirection.OUT, 2025, 10, 8, 13, 0),
        _punch("0006", PunchDirection.IN, 2025, 10, 8, 9, 30),
        _punch("0006", PunchDirection.IN, 2025, 10, 8, 14, 0),
        _punch("0006", PunchDirection.OUT, 2025, 10, 8, 18, 5),
    ]

    [day] = DayAggregator().aggregate(events)

    assert day.check_in_at.time() == time(9, 30)
    assert day.check_out_at.time() == time(18, 5)
    assert day.total_work_minutes == 515
    assert day.punch_count == 4


def test_groups_by_employee_and_local_day():
    events = [
        _punch("0006", PunchDirection.IN, 2025, 10, 8, 9, 0),
        _punch("0007", PunchDirection.IN, 2025, 10, 8, 9, 0),
        _punch("0006", PunchDirection.IN, 2025, 10, 9, 9, 0),
        # 20:00 UTC on the 8th is 01:30 on the 9th in Kolkata
        PunchEvent(
            emp_code="0007",
            emp_name=None,
            timestamp=pytz.utc.localize(datetime(2025, 10, 8, 20, 0)),
            direction=PunchDirection.IN,
        ),
    ]

    days = DayAggregator().aggregate(events)

    assert [(d.entry_date.day, d.emp_code) for d in days] == [(8, "0006"), (8, "0007"), (9, "0006"), (9, "0007")]


def test_out_without_in_is_absent():
    [day] = DayAggregator().aggregate([_punch("0006", PunchDirection.OUT, 2025, 10, 8, 18, 0)])

    assert day.check_in_at is None
    assert day.check_out_at is not None
    assert day.status == DayStatus.ABSENT


@pytest.mark.parametrize(
    "has_in, has_out, expected",
    [(False, False, DayStatus.ABSENT), (True, False, DayStatus.IN_PROGRESS), (True, True, DayStatus.COMPLETED)],
)
def test_derive_status(has_in, has_out, expected):
    stamp = IST.localize(datetime(2025, 10, 8, 9, 0))
    assert derive_status(stamp if has_in else None, stamp if has_out else None) == expected


def test_work_minutes_deducts_lunch_and_never_goes_negative():
    def at(h, m):
        return IST.localize(datetime(2025, 10, 8, h, m))

    assert work_minutes(at(9, 0), at(18, 0), at(13, 0), at(14, 0)) == 480
    assert work_minutes(at(9, 0), at(9, 30), at(9, 0), at(11, 0)) == 0
    assert work_minutes(at(9, 0), None) == 0
    assert work_minutes(at(9, 0), at(18, 0), at(13, 0), None) == 540


@pytest.mark.parametrize(
    "clock, late",
    [(time(10, 44), False), (time(10, 45), False), (time(10, 45, 59), False), (time(10, 46), True), (time(11, 0), True)],
)
def test_late_cutoff(clock, late):
    policy = AttendancePolicy()
    check_in = IST.localize(datetime.combine(date(2025, 10, 8), clock))

    assert policy.is_late(check_in) is late
    assert policy.is_late(None) is False


def test_policy_from_dict():
    policy = AttendancePolicy.from_dict({"late_cutoff": "09:30", "timezone": "UTC"})

    assert policy.late_cutoff == time(9, 30)
    assert policy.tz_name == "UTC"
    assert policy.is_late(pytz.utc.localize(datetime(2025, 10, 8, 9, 31))) is True


def test_undirected_punches_fold_to_earliest_and_latest():
    rows = [
        {"Empcode": "0006", "PunchDate": "08/10/2025 18:02:00", "M_Flag": None},
        {"Empcode": "0006", "PunchDate": "08/10/2025 09:10:00", "M_Flag": None},
        {"Empcode": "0006", "PunchDate": "08/10/2025 13:30:00", "M_Flag": None},
    ]

    [day] = DayAggregator().aggregate(VendorAdapter().normalize({"PunchData": rows}))

    assert day.check_in_at.time() == time(9, 10)
    assert day.check_out_at.time() == time(18, 2)
    assert day.status == DayStatus.COMPLETED
    assert day.total_work_minutes == 532


def test_single_undirected_punch_is_in_progress():
    [day] = DayAggregator().aggregate([_punch("0006", PunchDirection.UNSPECIFIED, 2025, 10, 8, 10, 50)])

    assert day.check_in_at.time() == time(10, 50)
    assert day.check_out_at is None
    assert day.status == DayStatus.IN_PROGRESS
    assert day.is_late is True


def test_absent_day_row_writes_nothing():
    events = VendorAdapter().normalize(
        [{"Empcode": "0006", "DateString": "08/10/2025", "INTime": "00:00", "OUTTime": "00:00"}]
    )

    assert DayAggregator().aggregate(events) == []
