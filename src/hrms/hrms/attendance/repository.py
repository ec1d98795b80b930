from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, AttendanceType
from .model import AttendancePolicy, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_between_dates(
        self,
        start_date: date,
        end_date: date,
        *,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start_date <= date <= end_date, optionally for one user."""

        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        attendance_type: AttendanceType,
        late_minutes: int = 0,
        remarks: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        working_hours: float,
        overtime_hours: float,
        remarks: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def create_record(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        remarks: Optional[str] = None,
    ) -> int:
        """Insert a record without check-in/out times (e.g. approved leave)."""

        raise NotImplementedError


class AttendancePolicyRepository(Protocol):
    def list_policies(self, *, active_only: bool = True) -> Sequence[AttendancePolicy]:
        raise NotImplementedError

    def create_policy(self, **fields: Any) -> int:
        raise NotImplementedError
