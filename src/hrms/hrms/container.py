from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendancePolicyRepository, MySQLAttendanceRepository
from .attendance.repository import AttendancePolicyRepository, AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository, MySQLPayrollSettingsRepository
from .payroll.mysql_salary_repository import MySQLSalaryAdvanceRepository, MySQLSalaryStructureRepository
from .payroll.repository import (
    PayrollRepository,
    PayrollSettingsRepository,
    SalaryAdvanceRepository,
    SalaryStructureRepository,
)
from .payroll.service import PayrollService
from .permissions.audit_service import AuditService
from .permissions.mysql_permission_repository import MySQLAuditLogRepository, MySQLRoleRepository
from .permissions.repository import AuditLogRepository, RoleRepository
from .permissions.service import PermissionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    attendance: AttendanceRepository
    policies: AttendancePolicyRepository
    leaves: LeaveRepository
    payrolls: PayrollRepository
    payroll_settings: PayrollSettingsRepository
    structures: SalaryStructureRepository
    advances: SalaryAdvanceRepository
    roles: RoleRepository
    audit_logs: AuditLogRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService
    permission_service: PermissionService
    audit_service: AuditService

    conn: DatabaseConnection | None = None


def build_services(repos: Repositories, *, conn: DatabaseConnection | None = None) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory)."""

    attendance_service = AttendanceService(
        repos.attendance,
        repos.policies,
        repos.users,
        strategy_factory=AttendanceStrategyFactory(),
    )
    audit_service = AuditService(repos.audit_logs, repos.users)

    return Container(
        repos=repos,
        conn=conn,
        auth_service=AuthService(repos.users),
        user_service=UserService(repos.users),
        attendance_service=attendance_service,
        leave_service=LeaveService(repos.leaves, attendance_service),
        payroll_service=PayrollService(
            repos.payrolls,
            repos.structures,
            repos.payroll_settings,
            repos.advances,
            repos.users,
            attendance_service,
            audit_service,
        ),
        permission_service=PermissionService(repos.users, repos.roles),
        audit_service=audit_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        policies=MySQLAttendancePolicyRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        payrolls=MySQLPayrollRepository(conn),
        payroll_settings=MySQLPayrollSettingsRepository(conn),
        structures=MySQLSalaryStructureRepository(conn),
        advances=MySQLSalaryAdvanceRepository(conn),
        roles=MySQLRoleRepository(conn),
        audit_logs=MySQLAuditLogRepository(conn),
    )
    return build_services(repos, conn=conn)
