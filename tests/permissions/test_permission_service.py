from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.hrms.hrms.core.enums import Department, Designation, UserRole
from src.hrms.hrms.core.exceptions import NotFoundError, ValidationError
from src.hrms.hrms.permissions.model import ApprovalLimits
from src.hrms.hrms.permissions.service import PermissionService
from src.hrms.hrms.permissions.tables import (
    MASTER_ADMIN_SYSTEM_PERMISSIONS,
    NEW_EMPLOYEE_PERMISSIONS,
    designation_action_permissions,
    static_permissions,
)


from tests.fakes import InMemoryRoles, InMemoryUsers, make_user

NOW = datetime(2024, 3, 15, 10, 0, 0)


@pytest.fixture
def roles():
    return InMemoryRoles()


@pytest.fixture
def users():
    return InMemoryUsers(
        make_user(1, UserRole.MASTER_ADMIN, department=None, designation=None),
        make_user(3, department=Department.SALES, designation=Designation.EXECUTIVE),
        make_user(4, department=None, designation=None),
    )


@pytest.fixture
def service(users, roles):
    return PermissionService(users, roles, clock=lambda: NOW)


def _override(service, permission: str, *, granted: bool, start=NOW - timedelta(days=1), end=None):
    return service.create_override(
        user_id=3,
        permission=permission,
        granted=granted,
        reason="Temporary project access",
        granted_by=1,
        effective_from=start,
        effective_to=end,
    )


def test_unknown_user_has_no_permissions(service):
    assert service.get_effective_permissions(99) == set()


def test_master_admin_always_has_system_permissions(service):
    permissions = service.get_effective_permissions(1)

    assert set(MASTER_ADMIN_SYSTEM_PERMISSIONS) <= permissions
    assert "dashboard.view" in permissions


def test_master_admin_ignores_overrides(service, roles):
    roles.create_override(
        user_id=1,
        permission="system.audit",
        granted=False,
        reason="Attempted revoke",
        granted_by=1,
        effective_from=NOW - timedelta(days=1),
        effective_to=None,
    )

    assert "system.audit" in service.get_effective_permissions(1)


def test_missing_department_gets_new_employee_defaults(service):
    assert service.get_effective_permissions(4) == set(NEW_EMPLOYEE_PERMISSIONS)


def test_static_table_combines_department_and_designation():
    permissions = static_permissions(Department.SALES, Designation.EXECUTIVE)

    assert "customers.create" in permissions
    assert "invoices.create" in permissions
    assert "users.create" not in permissions


def test_designation_levels_are_cumulative():
    assert designation_action_permissions(Designation.HOUSE_MAN) < designation_action_permissions(Designation.CEO)
    assert "system.backup" in designation_action_permissions(Designation.CEO)


def test_revoke_override_wins_over_department_and_role(service):
    role_id = service.create_role(name="Sales lead", permissions=["customers.create", "reports.export"])
    service.assign_role(user_id=3, role_id=role_id, assigned_by=1, effective_from=NOW - timedelta(days=2))
    _override(service, "customers.create", granted=False)

    permissions = service.get_effective_permissions(3)

    assert "customers.create" not in permissions
    assert "reports.export" in permissions


def test_grant_override_adds_permission(service):
    assert not service.check_permission(3, "payroll.view")

    _override(service, "payroll.view", granted=True)

    assert service.check_permission(3, "payroll.view")


def test_later_override_wins(service):
    _override(service, "payroll.view", granted=True, start=NOW - timedelta(days=3))
    _override(service, "payroll.view", granted=False, start=NOW - timedelta(days=1))

    assert not service.check_permission(3, "payroll.view")


def test_expired_override_and_assignment_are_ignored(service):
    role_id = service.create_role(name="Auditor", permissions=["system.audit"])
    service.assign_role(
        user_id=3,
        role_id=role_id,
        assigned_by=1,
        effective_from=NOW - timedelta(days=10),
        effective_to=NOW - timedelta(days=1),
    )
    _override(service, "payroll.view", granted=True, start=NOW - timedelta(days=10), end=NOW - timedelta(days=5))

    permissions = service.get_effective_permissions(3)

    assert "system.audit" not in permissions
    assert "payroll.view" not in permissions


def test_revoked_assignment_is_ignored(service):
    role_id = service.create_role(name="Auditor", permissions=["system.audit"])
    service.assign_role(user_id=3, role_id=role_id, assigned_by=1, effective_from=NOW - timedelta(days=1))
    assert service.check_permission(3, "system.audit")

    service.revoke_role(user_id=3, role_id=role_id)

    assert not service.check_permission(3, "system.audit")
    with pytest.raises(NotFoundError):
        service.revoke_role(user_id=3, role_id=role_id)


def test_override_reason_must_be_descriptive(service):
    with pytest.raises(ValidationError):
        service.create_override(user_id=3, permission="x.y", granted=True, reason="short", granted_by=1)


def test_approval_limits_take_maximum_across_roles(service):
    low = service.create_role(
        name="Approver L1", permissions=["approve.quotations.basic"], approval_limits={"quotations": 1000, "leave": True}
    )
    high = service.create_role(
        name="Approver L2", permissions=["approve.quotations.advanced"], approval_limits={"quotations": 5000, "invoices": 200}
    )
    for role_id in (low, high):
        service.assign_role(user_id=3, role_id=role_id, assigned_by=1, effective_from=NOW - timedelta(days=1))

    limits = service.get_effective_approval_limits(3)

    assert limits == ApprovalLimits(quotations=5000, invoices=200, expenses=0, leave=True, overtime=False)


def test_role_names_are_unique_and_system_roles_protected(service, roles):
    service.create_role(name="HR", permissions=["leave.approve"], is_system_role=True)

    with pytest.raises(ValidationError):
        service.create_role(name="HR", permissions=["leave.approve"])
    with pytest.raises(ValidationError):
        service.delete_role(1)
