from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import Leave


class LeaveRepository(Protocol):
    def create_leave(self, *, user_id: int, start_date: date, end_date: date, reason: str) -> int:
        raise NotImplementedError

    def get_leave(self, leave_id: int) -> Optional[Leave]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Leave]:
        raise NotImplementedError

    def list_by_status(self, status: LeaveStatus) -> Sequence[Leave]:
        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Move a pending leave to approved/rejected; False when it was not pending."""

        raise NotImplementedError
