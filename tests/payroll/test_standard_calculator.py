from datetime import date

import pytest

from src.hrms.hrms.attendance.model import MonthlyAttendanceSummary
from src.hrms.hrms.core.enums import AdvanceStatus
from src.hrms.hrms.payroll.calculator.standard_calculator import StandardPayrollCalculator, advance_deduction
from src.hrms.hrms.payroll.model import PayrollSettings, SalaryAdvance, SalaryStructure


def _structure(**overrides) -> SalaryStructure:
    values = dict(
        structure_id=1,
        user_id=7,
        fixed_salary=30000.0,
        basic_salary=15000.0,
        hra=5000.0,
        allowances=2000.0,
        variable_component=1000.0,
        effective_from=date(2024, 1, 1),
    )
    values.update(overrides)
    return SalaryStructure(**values)


def _summary(present_days: int = 22, overtime_hours: float = 0.0) -> MonthlyAttendanceSummary:
    return MonthlyAttendanceSummary(
        working_days=22,
        present_days=present_days,
        absent_days=22 - present_days,
        overtime_hours=overtime_hours,
        leave_days=0,
    )


def _advance(advance_id: int, *, month: int, year: int, status=AdvanceStatus.APPROVED, remaining=1000.0):
    return SalaryAdvance(
        advance_id=advance_id,
        user_id=7,
        amount=3000.0,
        reason="Medical",
        deduction_start_month=month,
        deduction_start_year=year,
        number_of_installments=3,
        monthly_deduction=1000.0,
        remaining_amount=remaining,
        status=status,
    )


def _calculate(structure, summary, *, settings=None, advances=(), month=3, year=2024):
    return StandardPayrollCalculator().calculate(
        structure=structure,
        summary=summary,
        settings=settings or PayrollSettings(),
        advances=list(advances),
        month=month,
        year=year,
    )


def test_full_month_with_default_settings():
    draft = _calculate(_structure(), _summary())

    assert draft.adjusted_salary == pytest.approx(30000.0)
    assert draft.gross_salary == pytest.approx(38000.0)
    assert draft.pf_deduction == pytest.approx(1800.0)
    assert draft.esi_deduction == 0
    assert draft.tds_deduction == pytest.approx(3800.0)
    assert draft.total_deductions == pytest.approx(5600.0)
    assert draft.net_salary == pytest.approx(32400.0)
    assert draft.status.value == "draft"


def test_salary_is_prorated_by_present_days():
    draft = _calculate(_structure(hra=0, allowances=0, variable_component=0), _summary(present_days=11))

    assert draft.adjusted_salary == pytest.approx(15000.0)


def test_gross_exactly_at_esi_threshold_has_no_esi():
    structure = _structure(fixed_salary=10000.0, basic_salary=5000.0, hra=21000.0, allowances=0, variable_component=0)

    draft = _calculate(structure, _summary(present_days=0))

    assert draft.gross_salary == 21000.0
    assert draft.esi_deduction == 0


def test_gross_below_esi_threshold_pays_esi_on_gross():
    structure = _structure(fixed_salary=10000.0, basic_salary=5000.0, hra=20000.0, allowances=0, variable_component=0)

    draft = _calculate(structure, _summary(present_days=0))

    assert draft.esi_deduction == pytest.approx(20000.0 * 0.0075)


def test_no_pf_below_pf_threshold():
    structure = _structure(fixed_salary=10000.0, basic_salary=5000.0, hra=14000.0, allowances=0, variable_component=0)

    draft = _calculate(structure, _summary(present_days=0))

    assert draft.pf_deduction == 0
    assert draft.tds_deduction == pytest.approx(1400.0)


def test_overtime_pay_uses_hourly_rate_and_multiplier():
    structure = _structure(fixed_salary=17600.0, basic_salary=8000.0, hra=0, allowances=0, variable_component=0)

    draft = _calculate(structure, _summary(present_days=0, overtime_hours=2))

    assert draft.overtime_pay == pytest.approx(300.0)


def test_custom_settings_rates_are_percentages():
    settings = PayrollSettings(pf_rate=10, tds_rate=5, pf_applicable_from_salary=0)

    draft = _calculate(_structure(), _summary(), settings=settings)

    assert draft.pf_deduction == pytest.approx(1500.0)
    assert draft.tds_deduction == pytest.approx(1900.0)


def test_advance_start_compares_year_before_month():
    advances = [
        _advance(1, month=12, year=2024),
        _advance(2, month=2, year=2025),
        _advance(3, month=1, year=2025, remaining=0),
        _advance(4, month=1, year=2024, status=AdvanceStatus.PENDING),
    ]

    amount, ids = advance_deduction(advances, 1, 2025)

    assert amount == 1000.0
    assert ids == (1,)


def test_advance_installment_is_deducted_from_net():
    draft = _calculate(_structure(), _summary(), advances=[_advance(1, month=3, year=2024)])

    assert draft.advance_deduction == 1000.0
    assert draft.advance_ids == (1,)
    assert draft.net_salary == pytest.approx(31400.0)
