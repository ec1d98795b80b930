from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendancePolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0
    remarks: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a check-in status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, policy: AttendancePolicy) -> StatusDecision:
        raise NotImplementedError


def minutes_after_start(now: datetime, policy: AttendancePolicy) -> int:
    scheduled = datetime.combine(now.date(), policy.check_in_time)
    return max(0, int((now - scheduled).total_seconds() // 60))
