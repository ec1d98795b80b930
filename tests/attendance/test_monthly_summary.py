from datetime import date, timedelta

from src.hrms.hrms.attendance.model import AttendanceRecord
from src.hrms.hrms.attendance.summary import summarize_month
from src.hrms.hrms.core.enums import AttendanceStatus


def _record(i: int, day: date, status: AttendanceStatus, overtime: float = 0.0) -> AttendanceRecord:
    return AttendanceRecord(attendance_id=i, user_id=1, work_date=day, status=status, overtime_hours=overtime)


def test_january_2024_has_23_working_days():
    summary = summarize_month([], 1, 2024)

    assert summary.working_days == 23
    assert summary.present_days == 0
    assert summary.absent_days == 23


def test_present_and_late_count_as_present_leave_counted_separately():
    records = [
        _record(1, date(2024, 1, 2), AttendanceStatus.PRESENT, 1.5),
        _record(2, date(2024, 1, 3), AttendanceStatus.LATE, 0.25),
        _record(3, date(2024, 1, 4), AttendanceStatus.LEAVE),
        _record(4, date(2024, 1, 5), AttendanceStatus.HALF_DAY),
        _record(5, date(2024, 1, 8), AttendanceStatus.ABSENT),
    ]

    summary = summarize_month(records, 1, 2024)

    assert summary.present_days == 2
    assert summary.leave_days == 1
    assert summary.absent_days == 21
    assert summary.overtime_hours == 1.75


def test_absent_days_go_negative_when_weekends_are_worked():
    start = date(2024, 2, 1)
    records = [_record(i, start + timedelta(days=i), AttendanceStatus.PRESENT) for i in range(29)]

    summary = summarize_month(records, 2, 2024)

    assert summary.working_days == 21
    assert summary.present_days == 29
    assert summary.absent_days == -8
