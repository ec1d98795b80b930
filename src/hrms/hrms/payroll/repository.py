from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AdvanceStatus, PayrollStatus
from .model import Payroll, PayrollDraft, PayrollSettings, SalaryAdvance, SalaryStructure


class SalaryStructureRepository(Protocol):
    def get_active_for_user(self, user_id: int) -> Optional[SalaryStructure]:
        """Active structure with the latest effective_from."""

        raise NotImplementedError

    def list_structures(self, *, user_id: Optional[int] = None) -> Sequence[SalaryStructure]:
        raise NotImplementedError

    def create_structure(self, **fields: Any) -> int:
        """Insert a new active structure, deactivating the user's previous ones in the same transaction."""

        raise NotImplementedError


class PayrollSettingsRepository(Protocol):
    def get_settings(self) -> Optional[PayrollSettings]:
        raise NotImplementedError

    def save_settings(self, settings: PayrollSettings, *, updated_by: int) -> None:
        raise NotImplementedError


class PayrollRepository(Protocol):
    def create_payroll(self, draft: PayrollDraft, *, processed_by: int, remarks: Optional[str] = None) -> int:
        raise NotImplementedError

    def get_payroll(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def get_by_user_and_month(self, user_id: int, month: int, year: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[Payroll]:
        raise NotImplementedError

    def update_status(self, payroll_id: int, status: PayrollStatus) -> bool:
        raise NotImplementedError


class SalaryAdvanceRepository(Protocol):
    def create_advance(self, **fields: Any) -> int:
        raise NotImplementedError

    def get_advance(self, advance_id: int) -> Optional[SalaryAdvance]:
        raise NotImplementedError

    def list_advances(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[AdvanceStatus] = None,
    ) -> Sequence[SalaryAdvance]:
        raise NotImplementedError

    def decide(self, *, advance_id: int, status: AdvanceStatus, approved_by: int) -> bool:
        """Move a pending advance to approved/rejected; False when it was not pending."""

        raise NotImplementedError

    def update_balance(self, *, advance_id: int, remaining_amount: float, status: AdvanceStatus) -> bool:
        raise NotImplementedError
