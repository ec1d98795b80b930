from __future__ import annotations

from typing import Iterable

from ..common.datetime_utils import is_weekend, iter_month_days
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, MonthlyAttendanceSummary

_PRESENT_STATUSES = {AttendanceStatus.PRESENT, AttendanceStatus.LATE}


def summarize_month(records: Iterable[AttendanceRecord], month: int, year: int) -> MonthlyAttendanceSummary:
    """Count present/leave days and sum overtime for one calendar month.

    Working days are the Monday-Friday days of the month. Absent days are
    not clamped, so extra weekend attendance can make them negative.
    """

    working_days = sum(1 for d in iter_month_days(month, year) if not is_weekend(d))

    present_days = 0
    leave_days = 0
    overtime_hours = 0.0
    for r in records:
        if r.status in _PRESENT_STATUSES:
            present_days += 1
        elif r.status == AttendanceStatus.LEAVE:
            leave_days += 1
        overtime_hours += r.overtime_hours or 0

    return MonthlyAttendanceSummary(
        working_days=working_days,
        present_days=present_days,
        absent_days=working_days - present_days,
        overtime_hours=overtime_hours,
        leave_days=leave_days,
    )
