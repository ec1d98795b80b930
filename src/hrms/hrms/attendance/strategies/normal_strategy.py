from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in (within the late mark)."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
