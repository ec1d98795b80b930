from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..core.constants import (
    DEFAULT_CHECK_IN,
    DEFAULT_CHECK_OUT,
    DEFAULT_HALF_DAY_MARK_MINUTES,
    DEFAULT_LATE_MARK_MINUTES,
    DEFAULT_MAX_OVERTIME_HOURS,
    DEFAULT_WEEKEND_DAYS,
)
from ..core.enums import AttendanceStatus, AttendanceType, Department, Designation


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per user per date."""

    attendance_id: int
    user_id: int
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    attendance_type: AttendanceType = AttendanceType.OFFICE
    overtime_hours: float = 0.0
    working_hours: float = 0.0
    late_minutes: int = 0
    remarks: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "attendance_type": self.attendance_type.value,
            "overtime_hours": self.overtime_hours,
            "working_hours": self.working_hours,
            "late_minutes": self.late_minutes,
            "remarks": self.remarks,
        }


@dataclass(frozen=True)
class AttendancePolicy:
    """Working-time rules for a department and/or designation."""

    policy_id: Optional[int]
    name: str
    check_in_time: time
    check_out_time: time
    department: Optional[Department] = None
    designation: Optional[Designation] = None
    late_mark_after_minutes: int = DEFAULT_LATE_MARK_MINUTES
    half_day_mark_after_minutes: int = DEFAULT_HALF_DAY_MARK_MINUTES
    overtime_allowed: bool = True
    max_overtime_hours: float = DEFAULT_MAX_OVERTIME_HOURS
    weekend_days: tuple[int, ...] = DEFAULT_WEEKEND_DAYS
    is_active: bool = True

    @classmethod
    def default(cls) -> "AttendancePolicy":
        return cls(
            policy_id=None,
            name="Default",
            check_in_time=parse_hhmm(DEFAULT_CHECK_IN),
            check_out_time=parse_hhmm(DEFAULT_CHECK_OUT),
        )

    def to_dict(self) -> dict:
        return {
            "policy_id": self.policy_id,
            "name": self.name,
            "department": self.department.value if self.department else None,
            "designation": self.designation.value if self.designation else None,
            "check_in_time": self.check_in_time.strftime("%H:%M"),
            "check_out_time": self.check_out_time.strftime("%H:%M"),
            "late_mark_after_minutes": self.late_mark_after_minutes,
            "half_day_mark_after_minutes": self.half_day_mark_after_minutes,
            "overtime_allowed": self.overtime_allowed,
            "max_overtime_hours": self.max_overtime_hours,
            "weekend_days": list(self.weekend_days),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class MonthlyAttendanceSummary:
    """Read-model used by payroll."""

    working_days: int
    present_days: int
    absent_days: int
    overtime_hours: float
    leave_days: int

    def to_dict(self) -> dict:
        return {
            "working_days": self.working_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "overtime_hours": self.overtime_hours,
            "leave_days": self.leave_days,
        }
