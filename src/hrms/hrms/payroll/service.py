from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..common.validators import (
    optional_enum,
    require_int,
    require_month_year,
    require_non_empty,
    require_non_negative,
)
from ..core.constants import MIN_PAYROLL_YEAR
from ..core.enums import AdvanceStatus, PayrollStatus
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..permissions.audit_service import AuditService
from ..users.repository import UserRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payroll, PayrollDraft, PayrollSettings, SalaryAdvance, SalaryStructure
from .repository import (
    PayrollRepository,
    PayrollSettingsRepository,
    SalaryAdvanceRepository,
    SalaryStructureRepository,
)

logger = logging.getLogger(__name__)

# Allowed forward moves; any status except paid may also move to cancelled.
_NEXT_STATUS = {
    PayrollStatus.DRAFT: PayrollStatus.PENDING,
    PayrollStatus.PENDING: PayrollStatus.APPROVED,
    PayrollStatus.APPROVED: PayrollStatus.PAID,
}


def installment_amount(amount: float, installments: int) -> float:
    """Equal installment in whole cents, rounded up so n payments cover the amount."""

    cents = round(amount * 100)
    return -(-cents // installments) / 100


@dataclass
class ProcessResult:
    month: int
    year: int
    created: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "created": self.created,
            "skipped": self.skipped,
            "failed": {str(k): v for k, v in self.failed.items()},
        }


class PayrollService:
    def __init__(
        self,
        payrolls: PayrollRepository,
        structures: SalaryStructureRepository,
        settings: PayrollSettingsRepository,
        advances: SalaryAdvanceRepository,
        users: UserRepository,
        attendance_service: AttendanceService,
        audit: AuditService,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._payrolls = payrolls
        self._structures = structures
        self._settings = settings
        self._advances = advances
        self._users = users
        self._attendance = attendance_service
        self._audit = audit
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock

    # Calculation

    def calculate_payroll(self, user_id: int, month: int, year: int) -> PayrollDraft:
        """Compute a draft payroll; nothing is persisted."""

        month, year = require_month_year(month, year)
        user_id = require_int(user_id, "User id")

        structure = self._structures.get_active_for_user(user_id)
        if not structure:
            raise NotFoundError("Salary structure not found")

        summary = self._attendance.get_monthly_summary(user_id, month, year)
        advances = self._advances.list_advances(user_id=user_id, status=AdvanceStatus.APPROVED)

        return self._calculator.calculate(
            structure=structure,
            summary=summary,
            settings=self.get_settings(),
            advances=advances,
            month=month,
            year=year,
        )

    def create_payroll(self, draft: PayrollDraft, *, processed_by: int, remarks: Optional[str] = None) -> int:
        """Persist a draft. Does not check for an existing payroll for the same period."""

        self._validate_period(draft.month, draft.year)
        if draft.present_days > draft.working_days:
            raise ValidationError("Present days cannot exceed working days")

        payroll_id = self._payrolls.create_payroll(
            draft,
            processed_by=int(processed_by),
            remarks=(remarks or "").strip() or None,
        )
        logger.info("Payroll %s created for user %s (%s/%s)", payroll_id, draft.user_id, draft.month, draft.year)
        return payroll_id

    def get_payroll(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_payroll(int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll not found")
        return payroll

    def get_payroll_by_user_and_month(self, user_id: int, month: int, year: int) -> Optional[Payroll]:
        return self._payrolls.get_by_user_and_month(int(user_id), int(month), int(year))

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[Payroll]:
        return self._payrolls.list_payrolls(month=month, year=year, user_id=user_id)

    def process_payroll(
        self,
        *,
        month: int,
        year: int,
        processed_by: int,
        user_ids: Optional[Sequence[int]] = None,
    ) -> ProcessResult:
        """Calculate and store payrolls for a period, skipping users that already have one."""

        month, year = self._validate_period(month, year)
        if user_ids is None:
            user_ids = [u.user_id for u in self._users.list_users(active_only=True)]
        elif isinstance(user_ids, (list, tuple)):
            user_ids = [require_int(u, "User id") for u in user_ids]
        else:
            raise ValidationError("user_ids must be a list of user ids")

        result = ProcessResult(month=month, year=year)
        for user_id in user_ids:
            if self.get_payroll_by_user_and_month(user_id, month, year):
                result.skipped.append(user_id)
                continue
            try:
                draft = self.calculate_payroll(user_id, month, year)
                result.created.append(self.create_payroll(draft, processed_by=processed_by))
            except DomainError as e:
                logger.warning("Payroll for user %s (%s/%s) not processed: %s", user_id, month, year, e)
                result.failed[user_id] = str(e)

        self._audit.log(
            user_id=processed_by,
            action="payroll_processed",
            entity_type="payroll",
            entity_id=f"{month}-{year}",
            changes={
                "created": len(result.created),
                "skipped": len(result.skipped),
                "failed": len(result.failed),
            },
        )
        return result

    def payroll_stats(self, month: int, year: int) -> dict:
        month, year = require_month_year(month, year)
        payrolls = [p for p in self._payrolls.list_payrolls(month=month, year=year) if p.status != PayrollStatus.CANCELLED]

        departments: Counter = Counter()
        for p in payrolls:
            user = self._users.get_by_id(p.user_id)
            departments[user.department.value if user and user.department else "unassigned"] += 1

        return {
            "month": month,
            "year": year,
            "total_employees": len(payrolls),
            "total_gross_salary": sum(p.gross_salary for p in payrolls),
            "total_deductions": sum(p.total_deductions for p in payrolls),
            "total_net_salary": sum(p.net_salary for p in payrolls),
            "department_breakdown": dict(departments),
        }

    def update_status(self, *, payroll_id: int, status: str, updated_by: int) -> Payroll:
        payroll = self.get_payroll(payroll_id)
        new_status = optional_enum(PayrollStatus, status, "Status")
        if new_status is None:
            raise ValidationError("Status is required")

        allowed = new_status == _NEXT_STATUS.get(payroll.status) or (
            new_status == PayrollStatus.CANCELLED
            and payroll.status not in (PayrollStatus.PAID, PayrollStatus.CANCELLED)
        )
        if not allowed:
            raise ValidationError(f"Cannot move payroll from {payroll.status.value} to {new_status.value}")

        self._payrolls.update_status(payroll.payroll_id, new_status)
        if new_status == PayrollStatus.PAID:
            self._apply_installments(payroll.advance_ids)

        self._audit.log(
            user_id=updated_by,
            action="payroll_status_updated",
            entity_type="payroll",
            entity_id=str(payroll.payroll_id),
            changes={"from": payroll.status.value, "to": new_status.value},
        )
        return self.get_payroll(payroll.payroll_id)

    def _apply_installments(self, advance_ids: Sequence[int]) -> None:
        for advance_id in advance_ids:
            advance = self._advances.get_advance(advance_id)
            if not advance or advance.status != AdvanceStatus.APPROVED:
                continue
            remaining = max(0.0, round(advance.remaining_amount - advance.installment_due(), 2))
            status = AdvanceStatus.COMPLETED if remaining <= 0 else AdvanceStatus.APPROVED
            self._advances.update_balance(advance_id=advance.advance_id, remaining_amount=remaining, status=status)

    def _validate_period(self, month, year) -> tuple[int, int]:
        month, year = require_month_year(month, year)
        if year < MIN_PAYROLL_YEAR:
            raise ValidationError(f"Year must be {MIN_PAYROLL_YEAR} or later")
        now = self._clock()
        if (year, month) > (now.year, now.month):
            raise ValidationError("Cannot process payroll for a future month")
        return month, year

    # Salary structures

    def list_structures(self, *, user_id: Optional[int] = None) -> Sequence[SalaryStructure]:
        return self._structures.list_structures(user_id=user_id)

    def create_structure(
        self,
        *,
        user_id: int,
        fixed_salary,
        basic_salary,
        effective_from: date,
        hra=0,
        allowances=0,
        variable_component=0,
        effective_to: Optional[date] = None,
        created_by: Optional[int] = None,
    ) -> int:
        user = self._users.get_by_id(require_int(user_id, "User id"))
        if not user:
            raise NotFoundError("User not found")

        fixed = require_non_negative(fixed_salary, "Fixed salary")
        basic = require_non_negative(basic_salary, "Basic salary")
        if basic > fixed:
            raise ValidationError("Basic salary cannot exceed fixed salary")
        if effective_to is not None and effective_to < effective_from:
            raise ValidationError("effective_to must not be before effective_from")

        structure_id = self._structures.create_structure(
            user_id=user.user_id,
            employee_id=user.employee_id,
            fixed_salary=fixed,
            basic_salary=basic,
            hra=require_non_negative(hra or 0, "HRA"),
            allowances=require_non_negative(allowances or 0, "Allowances"),
            variable_component=require_non_negative(variable_component or 0, "Variable component"),
            effective_from=effective_from,
            effective_to=effective_to,
            created_by=created_by,
        )
        logger.info("Salary structure %s created for user %s", structure_id, user.user_id)
        return structure_id

    # Settings

    def get_settings(self) -> PayrollSettings:
        return self._settings.get_settings() or PayrollSettings()

    def save_settings(self, *, updated_by: int, **values) -> PayrollSettings:
        current = self.get_settings()
        data = current.to_dict()
        for key in ("pf_rate", "esi_rate", "tds_rate", "overtime_multiplier", "pf_applicable_from_salary", "esi_applicable_from_salary"):
            if values.get(key) is not None:
                data[key] = require_non_negative(values[key], key)
        for key in ("pf_rate", "esi_rate", "tds_rate"):
            if data[key] > 100:
                raise ValidationError(f"{key} must be a percentage between 0 and 100")

        if values.get("standard_working_days") is not None:
            data["standard_working_days"] = int(require_non_negative(values["standard_working_days"], "standard_working_days"))
        if not 1 <= data["standard_working_days"] <= 31:
            raise ValidationError("standard_working_days must be between 1 and 31")

        if values.get("standard_working_hours") is not None:
            data["standard_working_hours"] = require_non_negative(values["standard_working_hours"], "standard_working_hours")
        if not 0 < data["standard_working_hours"] <= 24:
            raise ValidationError("standard_working_hours must be between 0 and 24")

        if values.get("company_name") is not None:
            data["company_name"] = require_non_empty(values["company_name"], "Company name")

        settings = PayrollSettings(**data)
        self._settings.save_settings(settings, updated_by=int(updated_by))
        self._audit.log(
            user_id=updated_by,
            action="payroll_settings_updated",
            entity_type="payroll_settings",
            entity_id="1",
            changes={k: v for k, v in data.items() if current.to_dict()[k] != v},
        )
        return settings

    # Salary advances

    def request_advance(
        self,
        *,
        user_id: int,
        amount,
        reason: str,
        deduction_start_month,
        deduction_start_year,
        number_of_installments=1,
    ) -> int:
        amount = round(require_non_negative(amount, "Amount"), 2)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        reason = require_non_empty(reason, "Reason")
        month, year = require_month_year(deduction_start_month, deduction_start_year)
        try:
            installments = int(number_of_installments)
        except (TypeError, ValueError):
            raise ValidationError("Number of installments must be an integer")
        if installments < 1:
            raise ValidationError("Number of installments must be at least 1")

        return self._advances.create_advance(
            user_id=require_int(user_id, "User id"),
            amount=amount,
            reason=reason,
            deduction_start_month=month,
            deduction_start_year=year,
            number_of_installments=installments,
            monthly_deduction=installment_amount(amount, installments),
            remaining_amount=amount,
        )

    def get_advance(self, advance_id: int) -> SalaryAdvance:
        advance = self._advances.get_advance(int(advance_id))
        if not advance:
            raise NotFoundError("Salary advance not found")
        return advance

    def list_advances(self, *, user_id: Optional[int] = None, status: Optional[str] = None) -> Sequence[SalaryAdvance]:
        return self._advances.list_advances(
            user_id=user_id,
            status=optional_enum(AdvanceStatus, status, "Status"),
        )

    def approve_advance(self, *, advance_id: int, approved_by: int) -> None:
        self._decide_advance(advance_id, AdvanceStatus.APPROVED, approved_by)

    def reject_advance(self, *, advance_id: int, approved_by: int) -> None:
        self._decide_advance(advance_id, AdvanceStatus.REJECTED, approved_by)

    def _decide_advance(self, advance_id: int, status: AdvanceStatus, approved_by: int) -> None:
        advance = self.get_advance(advance_id)
        if advance.status != AdvanceStatus.PENDING or not self._advances.decide(
            advance_id=advance.advance_id, status=status, approved_by=int(approved_by)
        ):
            raise ValidationError("Salary advance has already been decided")
        self._audit.log(
            user_id=approved_by,
            action=f"salary_advance_{status.value}",
            entity_type="salary_advance",
            entity_id=str(advance.advance_id),
            changes={"amount": advance.amount, "user_id": advance.user_id},
        )
