from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Department, Designation, UserRole


@dataclass(frozen=True)
class User:
    """Domain entity: an employee account.

    Plain data object; no database access here.
    """

    user_id: int
    email: str
    display_name: str
    password_hash: str
    role: UserRole
    department: Optional[Department] = None
    designation: Optional[Designation] = None
    employee_id: Optional[str] = None
    reporting_manager_id: Optional[int] = None
    payroll_grade: Optional[str] = None
    join_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role.value,
            "department": self.department.value if self.department else None,
            "designation": self.designation.value if self.designation else None,
            "employee_id": self.employee_id,
            "reporting_manager_id": self.reporting_manager_id,
            "payroll_grade": self.payroll_grade,
            "join_date": self.join_date.isoformat() if self.join_date else None,
            "is_active": self.is_active,
        }
