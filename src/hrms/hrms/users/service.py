from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.logging_utils import mask_email
from ..common.validators import optional_enum, require_email, require_int, require_min_length, require_non_empty
from ..core.enums import Department, Designation, UserRole
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import User
from .organization import PAYROLL_GRADES
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    display_name: str
    role: UserRole
    department: Optional[Department]
    designation: Optional[Designation]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            logger.info("Login rejected for %s", mask_email(email))
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Login rejected for %s", mask_email(email))
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            user_id=user.user_id,
            display_name=user.display_name,
            role=user.role,
            department=user.department,
            designation=user.designation,
        )


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(
        self,
        *,
        department: Optional[str] = None,
        designation: Optional[str] = None,
        reporting_manager_id: Optional[int] = None,
        active_only: bool = False,
    ) -> Sequence[User]:
        return self._users.list_users(
            department=optional_enum(Department, department, "Department"),
            designation=optional_enum(Designation, designation, "Designation"),
            reporting_manager_id=reporting_manager_id,
            active_only=active_only,
        )

    def create_user(
        self,
        *,
        current_role: UserRole,
        email: str,
        display_name: str,
        password: str,
        role: str = UserRole.EMPLOYEE.value,
        department: Optional[str] = None,
        designation: Optional[str] = None,
        employee_id: Optional[str] = None,
        reporting_manager_id: Optional[int] = None,
        payroll_grade: Optional[str] = None,
        join_date: Optional[date] = None,
    ) -> int:
        email = require_email(email)
        display_name = require_min_length(require_non_empty(display_name, "Display name"), "Display name", 2)
        require_min_length(password, "Password", 6)
        new_role = optional_enum(UserRole, role, "Role") or UserRole.EMPLOYEE

        if new_role == UserRole.MASTER_ADMIN and current_role != UserRole.MASTER_ADMIN:
            raise AuthorizationError("Only a master admin can create master admins")

        if self._users.get_by_email(email):
            raise ValidationError("Email is already registered")

        fields = self._profile_fields(
            department=department,
            designation=designation,
            employee_id=employee_id,
            reporting_manager_id=reporting_manager_id,
            payroll_grade=payroll_grade,
            join_date=join_date,
        )
        user_id = self._users.create_user(
            email=email,
            display_name=display_name,
            password_hash=generate_password_hash(password),
            role=new_role,
            is_active=True,
            **fields,
        )
        logger.info("User %s created (%s)", user_id, mask_email(email))
        return user_id

    def update_user(self, *, current_role: UserRole, user_id: int, changes: dict[str, Any]) -> User:
        user = self.get_user(user_id)
        fields: dict[str, Any] = {}

        if "display_name" in changes:
            fields["display_name"] = require_min_length(
                require_non_empty(changes["display_name"], "Display name"), "Display name", 2
            )
        if "role" in changes:
            new_role = optional_enum(UserRole, changes["role"], "Role") or user.role
            if UserRole.MASTER_ADMIN in {new_role, user.role} and current_role != UserRole.MASTER_ADMIN:
                raise AuthorizationError("Only a master admin can change master admin roles")
            fields["role"] = new_role
        if "password" in changes:
            require_min_length(changes["password"], "Password", 6)
            fields["password_hash"] = generate_password_hash(changes["password"])

        profile_keys = {"department", "designation", "employee_id", "reporting_manager_id", "payroll_grade", "join_date"}
        fields.update(self._profile_fields(**{k: v for k, v in changes.items() if k in profile_keys}))

        if fields:
            self._users.update_user(user.user_id, fields)
        return self.get_user(user.user_id)

    def set_active(self, *, user_id: int, is_active: bool) -> None:
        user = self.get_user(user_id)
        if user.role == UserRole.MASTER_ADMIN and not is_active:
            raise ValidationError("A master admin account cannot be deactivated")
        self._users.set_active(user.user_id, is_active=is_active)

    def _profile_fields(self, **values: Any) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if "department" in values:
            fields["department"] = optional_enum(Department, values["department"], "Department")
        if "designation" in values:
            fields["designation"] = optional_enum(Designation, values["designation"], "Designation")
        if "employee_id" in values:
            fields["employee_id"] = (values["employee_id"] or "").strip() or None
        if "payroll_grade" in values:
            grade = values["payroll_grade"] or None
            if grade is not None and grade not in PAYROLL_GRADES:
                raise ValidationError("Payroll grade is not valid")
            fields["payroll_grade"] = grade
        if "join_date" in values:
            fields["join_date"] = values["join_date"]
        if "reporting_manager_id" in values:
            manager_id = values["reporting_manager_id"]
            if manager_id is not None:
                manager_id = require_int(manager_id, "Reporting manager")
                if not self._users.get_by_id(manager_id):
                    raise ValidationError("Reporting manager does not exist")
            fields["reporting_manager_id"] = manager_id
        return fields
