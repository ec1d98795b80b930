from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import hours_between, month_bounds, now_local, parse_hhmm
from ..common.validators import (
    optional_enum,
    require_int,
    require_month_year,
    require_non_empty,
    require_non_negative,
)
from ..core.enums import AttendanceStatus, AttendanceType, Department, Designation
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .factory import AttendanceStrategyFactory
from .model import AttendancePolicy, AttendanceRecord, MonthlyAttendanceSummary
from .repository import AttendancePolicyRepository, AttendanceRepository
from .summary import summarize_month

logger = logging.getLogger(__name__)


def compute_hours(
    check_in: datetime, check_out: datetime, policy: AttendancePolicy
) -> tuple[float, float]:
    """Return (working_hours, overtime_hours) for one day, both rounded to 2 decimals."""

    working = max(0.0, hours_between(check_in, check_out))
    overtime = 0.0
    if policy.overtime_allowed:
        scheduled_out = datetime.combine(check_in.date(), policy.check_out_time)
        overtime = min(max(0.0, hours_between(scheduled_out, check_out)), policy.max_overtime_hours)
    return round(working, 2), round(overtime, 2)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        policies: AttendancePolicyRepository,
        users: UserRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._policies = policies
        self._users = users
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def resolve_policy(
        self, department: Optional[Department], designation: Optional[Designation]
    ) -> AttendancePolicy:
        """Most specific active policy: (department, designation), then department, then default."""

        policies = self._policies.list_policies(active_only=True)
        if department:
            for p in policies:
                if p.department == department and designation and p.designation == designation:
                    return p
            for p in policies:
                if p.department == department and p.designation is None:
                    return p
        return AttendancePolicy.default()

    def policy_for_user(self, user_id: int) -> AttendancePolicy:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return self.resolve_policy(user.department, user.designation)

    def check_in(
        self,
        user_id: int,
        *,
        now: datetime | None = None,
        attendance_type: str = AttendanceType.OFFICE.value,
        remarks: Optional[str] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        att_type = optional_enum(AttendanceType, attendance_type, "Attendance type") or AttendanceType.OFFICE

        policy = self.policy_for_user(user_id)

        if self._attendance.get_for_user_and_date(user_id, today):
            raise ValidationError("Already checked in today")

        strategy = self._factory.for_checkin(now=now, policy=policy)
        decision = strategy.decide_checkin(now=now, policy=policy)

        self._attendance.create_checkin(
            user_id=user_id,
            work_date=today,
            check_in_time=now,
            status=decision.status,
            attendance_type=att_type,
            late_minutes=decision.late_minutes,
            remarks=(remarks or "").strip() or decision.remarks,
        )
        logger.info("User %s checked in at %s (%s)", user_id, now.isoformat(), decision.status.value)
        return self._attendance.get_for_user_and_date(user_id, today)

    def check_out(self, user_id: int, *, now: datetime | None = None, remarks: Optional[str] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record or record.check_in_time is None:
            raise ValidationError("You have not checked in today")
        if record.check_out_time is not None:
            raise ValidationError("Already checked out today")

        policy = self.policy_for_user(user_id)
        working_hours, overtime_hours = compute_hours(record.check_in_time, now, policy)

        self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            working_hours=working_hours,
            overtime_hours=overtime_hours,
            remarks=(remarks or "").strip() or record.remarks,
        )
        return self._attendance.get_for_user_and_date(user_id, today)

    def get_monthly_summary(self, user_id: int, month: int, year: int) -> MonthlyAttendanceSummary:
        month, year = require_month_year(month, year)
        start, end = month_bounds(month, year)
        records = self._attendance.list_between_dates(start, end, user_id=int(user_id))
        return summarize_month(records, month, year)

    def list_records(self, start: date, end: date, *, user_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._attendance.list_between_dates(start, end, user_id=user_id)

    def list_policies(self) -> Sequence[AttendancePolicy]:
        return self._policies.list_policies(active_only=False)

    def create_policy(
        self,
        *,
        name: str,
        check_in_time: str,
        check_out_time: str,
        department: Optional[str] = None,
        designation: Optional[str] = None,
        late_mark_after_minutes=None,
        half_day_mark_after_minutes=None,
        overtime_allowed: bool = True,
        max_overtime_hours=None,
        weekend_days: Optional[Sequence[int]] = None,
    ) -> int:
        defaults = AttendancePolicy.default()
        name = require_non_empty(name, "Policy name")
        try:
            start = parse_hhmm(check_in_time)
            end = parse_hhmm(check_out_time)
        except (AttributeError, ValueError):
            raise ValidationError("Check-in/check-out time must be HH:MM")
        if end <= start:
            raise ValidationError("Check-out time must be after check-in time")

        late_mark = int(require_non_negative(
            defaults.late_mark_after_minutes if late_mark_after_minutes is None else late_mark_after_minutes,
            "Late mark",
        ))
        half_day_mark = int(require_non_negative(
            defaults.half_day_mark_after_minutes if half_day_mark_after_minutes is None else half_day_mark_after_minutes,
            "Half-day mark",
        ))
        if half_day_mark < late_mark:
            raise ValidationError("Half-day mark must not be earlier than the late mark")

        if weekend_days is None:
            days = defaults.weekend_days
        elif isinstance(weekend_days, (list, tuple)):
            days = tuple(require_int(d, "Weekend day") for d in weekend_days)
        else:
            raise ValidationError("Weekend days must be a list of weekday numbers")
        if any(not 0 <= d <= 6 for d in days):
            raise ValidationError("Weekend days must be weekday numbers 0-6")

        policy_id = self._policies.create_policy(
            name=name,
            department=optional_enum(Department, department, "Department"),
            designation=optional_enum(Designation, designation, "Designation"),
            check_in_time=start,
            check_out_time=end,
            late_mark_after_minutes=late_mark,
            half_day_mark_after_minutes=half_day_mark,
            overtime_allowed=bool(overtime_allowed),
            max_overtime_hours=require_non_negative(
                defaults.max_overtime_hours if max_overtime_hours is None else max_overtime_hours,
                "Max overtime hours",
            ),
            weekend_days=days,
        )
        logger.info("Attendance policy %s created (%s)", policy_id, name)
        return policy_id

    def mark_leave_days(self, user_id: int, start: date, end: date, *, remarks: Optional[str] = None) -> int:
        """Write `leave` records for working days in [start, end] that have no record yet."""

        policy = self.policy_for_user(user_id)
        existing = {r.work_date for r in self._attendance.list_between_dates(start, end, user_id=user_id)}

        created = 0
        day = start
        while day <= end:
            if day.weekday() not in policy.weekend_days and day not in existing:
                self._attendance.create_record(
                    user_id=user_id,
                    work_date=day,
                    status=AttendanceStatus.LEAVE,
                    remarks=remarks,
                )
                created += 1
            day += timedelta(days=1)
        return created
