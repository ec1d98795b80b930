from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus, UserRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Leave
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

_DECIDERS = {UserRole.ADMIN, UserRole.MASTER_ADMIN}


class LeaveService:
    def __init__(self, leaves: LeaveRepository, attendance_service: AttendanceService):
        self._leaves = leaves
        self._attendance = attendance_service

    def request_leave(self, *, user_id: int, start_date: date, end_date: date, reason: str) -> int:
        if end_date < start_date:
            raise ValidationError("End date must not be before start date")
        reason = require_non_empty(reason, "Reason")
        return self._leaves.create_leave(
            user_id=int(user_id),
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )

    def get_leave(self, leave_id: int) -> Leave:
        leave = self._leaves.get_leave(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def list_for_user(self, user_id: int) -> Sequence[Leave]:
        return self._leaves.list_for_user(int(user_id))

    def list_pending(self) -> Sequence[Leave]:
        return self._leaves.list_by_status(LeaveStatus.PENDING)

    def approve(
        self,
        *,
        current_role: UserRole,
        admin_user_id: int,
        leave_id: int,
        admin_note: Optional[str] = "",
    ) -> int:
        """Approve a pending leave and mark its working days as `leave`.

        Days are marked before the decision is stored. If marking fails the
        request stays pending, and a retry skips days already written.
        Returns the number of attendance records written.
        """

        leave = self._pending_leave(current_role, leave_id)
        created = self._attendance.mark_leave_days(
            leave.user_id,
            leave.start_date,
            leave.end_date,
            remarks=f"Leave #{leave.leave_id}",
        )
        self._record_decision(leave, LeaveStatus.APPROVED, admin_user_id, admin_note)
        logger.info("Leave %s approved by %s (%s days marked)", leave.leave_id, admin_user_id, created)
        return created

    def reject(
        self,
        *,
        current_role: UserRole,
        admin_user_id: int,
        leave_id: int,
        admin_note: Optional[str] = "",
    ) -> None:
        leave = self._pending_leave(current_role, leave_id)
        self._record_decision(leave, LeaveStatus.REJECTED, admin_user_id, admin_note)
        logger.info("Leave %s rejected by %s", leave.leave_id, admin_user_id)

    def _pending_leave(self, current_role: UserRole, leave_id: int) -> Leave:
        if current_role not in _DECIDERS:
            raise AuthorizationError("Only admins can decide leave requests")

        leave = self.get_leave(leave_id)
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been decided")
        return leave

    def _record_decision(
        self, leave: Leave, status: LeaveStatus, admin_user_id: int, admin_note: Optional[str]
    ) -> None:
        decided = self._leaves.decide(
            leave_id=leave.leave_id,
            status=status,
            decided_by=int(admin_user_id),
            admin_note=(admin_note or "").strip() or None,
        )
        if not decided:
            raise ValidationError("Leave request has already been decided")
