from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision, minutes_after_start


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        minutes = minutes_after_start(now, policy)
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=minutes, remarks=f"Late by {minutes} min")
