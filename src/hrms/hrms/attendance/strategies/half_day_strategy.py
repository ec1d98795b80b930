from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision, minutes_after_start


class HalfDayStrategy(AttendanceStrategy):
    """Check-in past the half-day mark counts as half a day."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            late_minutes=minutes_after_start(now, policy),
            remarks="Checked in after half-day mark",
        )
