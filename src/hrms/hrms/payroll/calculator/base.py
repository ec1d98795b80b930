from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.model import MonthlyAttendanceSummary
from ..model import PayrollDraft, PayrollSettings, SalaryAdvance, SalaryStructure


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self,
        *,
        structure: SalaryStructure,
        summary: MonthlyAttendanceSummary,
        settings: PayrollSettings,
        advances: Sequence[SalaryAdvance],
        month: int,
        year: int,
    ) -> PayrollDraft:
        raise NotImplementedError
