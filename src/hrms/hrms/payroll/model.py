from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.constants import (
    DEFAULT_COMPANY_NAME,
    DEFAULT_ESI_APPLICABLE_FROM,
    DEFAULT_ESI_RATE,
    DEFAULT_OVERTIME_MULTIPLIER,
    DEFAULT_PF_APPLICABLE_FROM,
    DEFAULT_PF_RATE,
    DEFAULT_STANDARD_WORKING_DAYS,
    DEFAULT_STANDARD_WORKING_HOURS,
    DEFAULT_TDS_RATE,
)
from ..core.enums import AdvanceStatus, PayrollStatus


@dataclass(frozen=True)
class SalaryStructure:
    """Pay components assigned to a user, effective over a date range."""

    structure_id: int
    user_id: int
    fixed_salary: float
    basic_salary: float
    hra: float
    allowances: float
    variable_component: float
    effective_from: date
    effective_to: Optional[date] = None
    employee_id: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data["effective_from"] = self.effective_from.isoformat()
        data["effective_to"] = self.effective_to.isoformat() if self.effective_to else None
        return data


@dataclass(frozen=True)
class PayrollSettings:
    """Company-wide payroll parameters. Rates are percentages (12 means 12%)."""

    pf_rate: float = DEFAULT_PF_RATE
    esi_rate: float = DEFAULT_ESI_RATE
    tds_rate: float = DEFAULT_TDS_RATE
    overtime_multiplier: float = DEFAULT_OVERTIME_MULTIPLIER
    standard_working_hours: float = DEFAULT_STANDARD_WORKING_HOURS
    standard_working_days: int = DEFAULT_STANDARD_WORKING_DAYS
    pf_applicable_from_salary: float = DEFAULT_PF_APPLICABLE_FROM
    esi_applicable_from_salary: float = DEFAULT_ESI_APPLICABLE_FROM
    company_name: str = DEFAULT_COMPANY_NAME

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PayrollDraft:
    """Computed payroll for one user and month; not persisted."""

    user_id: int
    month: int
    year: int
    working_days: int
    present_days: int
    absent_days: int
    leave_days: int
    overtime_hours: float
    fixed_salary: float
    basic_salary: float
    hra: float
    allowances: float
    variable_component: float
    adjusted_salary: float
    overtime_pay: float
    gross_salary: float
    pf_deduction: float
    esi_deduction: float
    tds_deduction: float
    advance_deduction: float
    total_deductions: float
    net_salary: float
    employee_id: Optional[str] = None
    status: PayrollStatus = PayrollStatus.DRAFT
    # Salary advances whose installment is included in advance_deduction.
    advance_ids: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        data["advance_ids"] = list(self.advance_ids)
        return data


@dataclass(frozen=True)
class Payroll(PayrollDraft):
    payroll_id: Optional[int] = None
    processed_by: Optional[int] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data


@dataclass(frozen=True)
class SalaryAdvance:
    advance_id: int
    user_id: int
    amount: float
    reason: str
    deduction_start_month: int
    deduction_start_year: int
    number_of_installments: int
    monthly_deduction: float
    remaining_amount: float
    status: AdvanceStatus
    requested_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    def starts_by(self, month: int, year: int) -> bool:
        return (self.deduction_start_year, self.deduction_start_month) <= (year, month)

    def installment_due(self) -> float:
        return min(self.monthly_deduction, self.remaining_amount)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        data["requested_at"] = self.requested_at.isoformat() if self.requested_at else None
        data["approved_at"] = self.approved_at.isoformat() if self.approved_at else None
        return data
