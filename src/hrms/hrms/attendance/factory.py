from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .model import AttendancePolicy
from .strategies.base import AttendanceStrategy, minutes_after_start
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on policy rules."""

    def for_checkin(self, *, now: datetime, policy: AttendancePolicy) -> AttendanceStrategy:
        minutes_late = minutes_after_start(now, policy)
        if minutes_late <= policy.late_mark_after_minutes:
            return NormalStrategy()
        if minutes_late > policy.half_day_mark_after_minutes:
            return HalfDayStrategy()
        return LateStrategy()
