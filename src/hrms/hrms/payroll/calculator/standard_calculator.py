from __future__ import annotations

from typing import Sequence

from ...attendance.model import MonthlyAttendanceSummary
from ...core.enums import AdvanceStatus
from ..model import PayrollDraft, PayrollSettings, SalaryAdvance, SalaryStructure
from .base import PayrollCalculator


def advance_deduction(advances: Sequence[SalaryAdvance], month: int, year: int) -> tuple[float, tuple[int, ...]]:
    """Sum of installments due for the period, with the advances they come from.

    The last installment is capped at the remaining balance.
    """

    due = [
        a
        for a in advances
        if a.status == AdvanceStatus.APPROVED and a.remaining_amount > 0 and a.starts_by(month, year)
    ]
    return sum(a.installment_due() for a in due), tuple(a.advance_id for a in due)


class StandardPayrollCalculator(PayrollCalculator):
    """Pro-rated fixed salary plus allowances, minus PF/ESI/TDS and advance installments.

    - PF applies on basic salary once gross reaches the PF threshold.
    - ESI applies on gross only while gross is below the ESI threshold.
    - TDS is a flat rate on gross.
    Amounts are not rounded.
    """

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
        days = settings.standard_working_days
        daily_salary = structure.fixed_salary / days
        adjusted_salary = daily_salary * summary.present_days

        hourly_rate = structure.fixed_salary / (days * settings.standard_working_hours)
        overtime_pay = hourly_rate * summary.overtime_hours * settings.overtime_multiplier

        gross = (
            adjusted_salary
            + structure.hra
            + structure.allowances
            + structure.variable_component
            + overtime_pay
        )

        pf = structure.basic_salary * settings.pf_rate / 100 if gross >= settings.pf_applicable_from_salary else 0.0
        esi = 0.0 if gross >= settings.esi_applicable_from_salary else gross * settings.esi_rate / 100
        tds = gross * settings.tds_rate / 100
        advance, advance_ids = advance_deduction(advances, month, year)

        total_deductions = pf + esi + tds + advance

        return PayrollDraft(
            user_id=structure.user_id,
            employee_id=structure.employee_id,
            month=month,
            year=year,
            working_days=summary.working_days,
            present_days=summary.present_days,
            absent_days=summary.absent_days,
            leave_days=summary.leave_days,
            overtime_hours=summary.overtime_hours,
            fixed_salary=structure.fixed_salary,
            basic_salary=structure.basic_salary,
            hra=structure.hra,
            allowances=structure.allowances,
            variable_component=structure.variable_component,
            adjusted_salary=adjusted_salary,
            overtime_pay=overtime_pay,
            gross_salary=gross,
            pf_deduction=pf,
            esi_deduction=esi,
            tds_deduction=tds,
            advance_deduction=advance,
            total_deductions=total_deductions,
            net_salary=gross - total_deductions,
            advance_ids=advance_ids,
        )
