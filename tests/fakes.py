"""In-memory repositories used by the test suite."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional

from werkzeug.security import generate_password_hash

from src.hrms.hrms.attendance.model import AttendancePolicy, AttendanceRecord
from src.hrms.hrms.container import Repositories
from src.hrms.hrms.core.enums import (
    AdvanceStatus,
    AttendanceStatus,
    AttendanceType,
    Department,
    Designation,
    LeaveStatus,
    PayrollStatus,
    UserRole,
)
from src.hrms.hrms.leaves.model import Leave
from src.hrms.hrms.payroll.model import Payroll, PayrollDraft, PayrollSettings, SalaryAdvance, SalaryStructure
from src.hrms.hrms.permissions.model import AuditLog, PermissionOverride, Role, UserRoleAssignment
from src.hrms.hrms.users.model import User

FIXED_NOW = datetime(2024, 3, 15, 10, 0, 0)


PASSWORD = "secret1"


def make_user(user_id: int, role: UserRole = UserRole.EMPLOYEE, **overrides) -> User:
    values = dict(
        user_id=user_id,
        email=f"user{user_id}@example.com",
        display_name=f"User {user_id}",
        password_hash=generate_password_hash(PASSWORD),
        role=role,
        department=Department.SALES,
        designation=Designation.EXECUTIVE,
        employee_id=f"EMP{user_id:03d}",
        join_date=date(2023, 1, 1),
    )
    values.update(overrides)
    return User(**values)


class _Ids:
    def __init__(self):
        self._next = 0

    def __call__(self) -> int:
        self._next += 1
        return self._next


class InMemoryUsers:
    def __init__(self, *users: User):
        self.users: dict[int, User] = {u.user_id: u for u in users}
        self._ids = _Ids()
        self._ids._next = max(self.users, default=0)

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def list_users(self, *, department=None, designation=None, reporting_manager_id=None, active_only=False):
        out = list(self.users.values())
        if department:
            out = [u for u in out if u.department == department]
        if designation:
            out = [u for u in out if u.designation == designation]
        if reporting_manager_id is not None:
            out = [u for u in out if u.reporting_manager_id == reporting_manager_id]
        if active_only:
            out = [u for u in out if u.is_active]
        return out

    def create_user(self, **fields: Any) -> int:
        user_id = self._ids()
        self.users[user_id] = User(user_id=user_id, **fields)
        return user_id

    def update_user(self, user_id: int, fields: dict[str, Any]) -> bool:
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, **fields)
        return True

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        return self.update_user(user_id, {"is_active": is_active})


class InMemoryAttendance:
    def __init__(self, *records: AttendanceRecord):
        self.records: dict[tuple[int, date], AttendanceRecord] = {(r.user_id, r.work_date): r for r in records}
        self._ids = _Ids()

    def add(self, user_id: int, work_date: date, status: AttendanceStatus, *, overtime_hours: float = 0.0):
        rec = AttendanceRecord(
            attendance_id=self._ids(),
            user_id=user_id,
            work_date=work_date,
            status=status,
            overtime_hours=overtime_hours,
        )
        self.records[(user_id, work_date)] = rec
        return rec

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self.records.get((user_id, work_date))

    def list_between_dates(self, start_date: date, end_date: date, *, user_id: Optional[int] = None):
        return sorted(
            (
                r
                for r in self.records.values()
                if start_date <= r.work_date <= end_date and (user_id is None or r.user_id == user_id)
            ),
            key=lambda r: (r.work_date, r.user_id),
        )

    def create_checkin(self, *, user_id, work_date, check_in_time, status, attendance_type, late_minutes=0, remarks=None):
        rec = AttendanceRecord(
            attendance_id=self._ids(),
            user_id=user_id,
            work_date=work_date,
            status=status,
            check_in_time=check_in_time,
            attendance_type=attendance_type,
            late_minutes=late_minutes,
            remarks=remarks,
        )
        self.records[(user_id, work_date)] = rec
        return rec.attendance_id

    def update_checkout(self, *, attendance_id, check_out_time, working_hours, overtime_hours, remarks=None):
        for key, rec in self.records.items():
            if rec.attendance_id == attendance_id:
                self.records[key] = replace(
                    rec,
                    check_out_time=check_out_time,
                    working_hours=working_hours,
                    overtime_hours=overtime_hours,
                    remarks=remarks,
                )
                return True
        return False

    def create_record(self, *, user_id, work_date, status, remarks=None):
        rec = AttendanceRecord(
            attendance_id=self._ids(),
            user_id=user_id,
            work_date=work_date,
            status=status,
            attendance_type=AttendanceType.OFFICE,
            remarks=remarks,
        )
        self.records[(user_id, work_date)] = rec
        return rec.attendance_id


class InMemoryPolicies:
    def __init__(self, *policies: AttendancePolicy):
        self.policies = list(policies)
        self._ids = _Ids()

    def list_policies(self, *, active_only: bool = True):
        return [p for p in self.policies if p.is_active or not active_only]

    def create_policy(self, **fields: Any) -> int:
        policy_id = self._ids()
        self.policies.append(AttendancePolicy(policy_id=policy_id, **fields))
        return policy_id


class InMemoryLeaves:
    def __init__(self):
        self.leaves: dict[int, Leave] = {}
        self._ids = _Ids()

    def create_leave(self, *, user_id, start_date, end_date, reason) -> int:
        leave_id = self._ids()
        self.leaves[leave_id] = Leave(
            leave_id=leave_id,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=FIXED_NOW,
        )
        return leave_id

    def get_leave(self, leave_id: int) -> Optional[Leave]:
        return self.leaves.get(int(leave_id))

    def list_for_user(self, user_id: int):
        return [lv for lv in self.leaves.values() if lv.user_id == user_id]

    def list_by_status(self, status: LeaveStatus):
        return [lv for lv in self.leaves.values() if lv.status == status]

    def decide(self, *, leave_id, status, decided_by, admin_note=None) -> bool:
        leave = self.leaves.get(int(leave_id))
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.leaves[leave.leave_id] = replace(
            leave, status=status, decided_by=decided_by, decided_at=FIXED_NOW, admin_note=admin_note
        )
        return True


class InMemoryStructures:
    def __init__(self, *structures: SalaryStructure):
        self.structures = list(structures)
        self._ids = _Ids()
        self._ids._next = max((s.structure_id for s in structures), default=0)

    def get_active_for_user(self, user_id: int) -> Optional[SalaryStructure]:
        active = [s for s in self.structures if s.user_id == user_id and s.is_active]
        return max(active, key=lambda s: s.effective_from, default=None)

    def list_structures(self, *, user_id=None):
        return [s for s in self.structures if user_id is None or s.user_id == user_id]

    def create_structure(self, **fields: Any) -> int:
        self.structures = [
            replace(s, is_active=False, effective_to=fields["effective_from"])
            if s.user_id == fields["user_id"] and s.is_active
            else s
            for s in self.structures
        ]
        fields.pop("created_by", None)
        structure_id = self._ids()
        self.structures.append(SalaryStructure(structure_id=structure_id, is_active=True, **fields))
        return structure_id


class InMemoryPayrollSettings:
    def __init__(self, settings: Optional[PayrollSettings] = None):
        self.settings = settings

    def get_settings(self) -> Optional[PayrollSettings]:
        return self.settings

    def save_settings(self, settings: PayrollSettings, *, updated_by: int) -> None:
        self.settings = settings


class InMemoryPayrolls:
    def __init__(self):
        self.payrolls: dict[int, Payroll] = {}
        self._ids = _Ids()

    def create_payroll(self, draft: PayrollDraft, *, processed_by: int, remarks=None) -> int:
        payroll_id = self._ids()
        values = {f: getattr(draft, f) for f in draft.__dataclass_fields__}
        self.payrolls[payroll_id] = Payroll(
            payroll_id=payroll_id, processed_by=processed_by, remarks=remarks, created_at=FIXED_NOW, **values
        )
        return payroll_id

    def get_payroll(self, payroll_id: int) -> Optional[Payroll]:
        return self.payrolls.get(int(payroll_id))

    def get_by_user_and_month(self, user_id: int, month: int, year: int) -> Optional[Payroll]:
        return next(
            (p for p in self.payrolls.values() if (p.user_id, p.month, p.year) == (user_id, month, year)),
            None,
        )

    def list_payrolls(self, *, month=None, year=None, user_id=None):
        return [
            p
            for p in self.payrolls.values()
            if (month is None or p.month == month)
            and (year is None or p.year == year)
            and (user_id is None or p.user_id == user_id)
        ]

    def update_status(self, payroll_id: int, status: PayrollStatus) -> bool:
        payroll = self.payrolls.get(int(payroll_id))
        if not payroll:
            return False
        self.payrolls[payroll.payroll_id] = replace(payroll, status=status)
        return True


class InMemoryAdvances:
    def __init__(self, *advances: SalaryAdvance):
        self.advances: dict[int, SalaryAdvance] = {a.advance_id: a for a in advances}
        self._ids = _Ids()
        self._ids._next = max(self.advances, default=0)

    def create_advance(self, **fields: Any) -> int:
        advance_id = self._ids()
        self.advances[advance_id] = SalaryAdvance(
            advance_id=advance_id, status=AdvanceStatus.PENDING, requested_at=FIXED_NOW, **fields
        )
        return advance_id

    def get_advance(self, advance_id: int) -> Optional[SalaryAdvance]:
        return self.advances.get(int(advance_id))

    def list_advances(self, *, user_id=None, status=None):
        return [
            a
            for a in self.advances.values()
            if (user_id is None or a.user_id == user_id) and (status is None or a.status == status)
        ]

    def decide(self, *, advance_id, status, approved_by) -> bool:
        advance = self.advances.get(int(advance_id))
        if not advance or advance.status != AdvanceStatus.PENDING:
            return False
        self.advances[advance.advance_id] = replace(advance, status=status, approved_by=approved_by, approved_at=FIXED_NOW)
        return True

    def update_balance(self, *, advance_id, remaining_amount, status) -> bool:
        advance = self.advances.get(int(advance_id))
        if not advance:
            return False
        self.advances[advance.advance_id] = replace(advance, remaining_amount=remaining_amount, status=status)
        return True


class InMemoryRoles:
    def __init__(self):
        self.roles: dict[int, Role] = {}
        self.assignments: list[UserRoleAssignment] = []
        self.overrides: list[PermissionOverride] = []
        self._role_ids = _Ids()
        self._assignment_ids = _Ids()
        self._override_ids = _Ids()

    def get_role(self, role_id: int) -> Optional[Role]:
        return self.roles.get(int(role_id))

    def get_role_by_name(self, name: str) -> Optional[Role]:
        return next((r for r in self.roles.values() if r.name == name), None)

    def list_roles(self):
        return sorted(self.roles.values(), key=lambda r: r.name)

    def create_role(self, *, name, permissions, description, is_system_role, approval_limits) -> int:
        role_id = self._role_ids()
        self.roles[role_id] = Role(
            role_id=role_id,
            name=name,
            permissions=tuple(permissions),
            description=description,
            is_system_role=is_system_role,
            approval_limits=approval_limits,
        )
        return role_id

    def delete_role(self, role_id: int) -> bool:
        return self.roles.pop(int(role_id), None) is not None

    def list_assignments(self, user_id: int):
        return [a for a in self.assignments if a.user_id == user_id and a.is_active]

    def assign_role(self, *, user_id, role_id, assigned_by, effective_from, effective_to) -> int:
        assignment_id = self._assignment_ids()
        self.assignments.append(
            UserRoleAssignment(
                assignment_id=assignment_id,
                user_id=user_id,
                role_id=role_id,
                assigned_by=assigned_by,
                effective_from=effective_from,
                effective_to=effective_to,
            )
        )
        return assignment_id

    def revoke_role(self, *, user_id, role_id) -> int:
        changed = 0
        for i, a in enumerate(self.assignments):
            if a.user_id == user_id and a.role_id == role_id and a.is_active:
                self.assignments[i] = replace(a, is_active=False)
                changed += 1
        return changed

    def list_overrides(self, user_id: int):
        return [o for o in self.overrides if o.user_id == user_id]

    def create_override(self, *, user_id, permission, granted, reason, granted_by, effective_from, effective_to) -> int:
        override_id = self._override_ids()
        self.overrides.append(
            PermissionOverride(
                override_id=override_id,
                user_id=user_id,
                permission=permission,
                granted=granted,
                reason=reason,
                granted_by=granted_by,
                effective_from=effective_from,
                effective_to=effective_to,
            )
        )
        return override_id

    def delete_override(self, override_id: int) -> bool:
        before = len(self.overrides)
        self.overrides = [o for o in self.overrides if o.override_id != override_id]
        return len(self.overrides) < before


class InMemoryAuditLogs:
    def __init__(self):
        self.logs: list[AuditLog] = []

    def create(self, *, user_id, action, entity_type, entity_id, changes, department, designation) -> int:
        log_id = len(self.logs) + 1
        self.logs.append(
            AuditLog(
                log_id=log_id,
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                created_at=FIXED_NOW,
                changes=changes,
            )
        )
        return log_id

    def list_logs(self, *, user_id=None, entity_type=None, start=None, end=None, limit=1000):
        out = [
            log
            for log in self.logs
            if (user_id is None or log.user_id == user_id) and (entity_type is None or log.entity_type == entity_type)
        ]
        return list(reversed(out))[:limit]


def make_repositories(*users: User) -> Repositories:
    return Repositories(
        users=InMemoryUsers(*users),
        attendance=InMemoryAttendance(),
        policies=InMemoryPolicies(),
        leaves=InMemoryLeaves(),
        payrolls=InMemoryPayrolls(),
        payroll_settings=InMemoryPayrollSettings(),
        structures=InMemoryStructures(),
        advances=InMemoryAdvances(),
        roles=InMemoryRoles(),
        audit_logs=InMemoryAuditLogs(),
    )
