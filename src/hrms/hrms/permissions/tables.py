"""Static department/designation permission tables."""

from __future__ import annotations

from typing import Optional

from ..core.enums import Department, Designation
from ..users.organization import designation_level

MASTER_ADMIN_SYSTEM_PERMISSIONS = (
    "system.settings",
    "system.backup",
    "system.audit",
    "users.delete",
    "permissions.assign",
)

NEW_EMPLOYEE_PERMISSIONS = (
    "dashboard.view",
    "attendance.view_own",
    "leave.view_own",
    "leave.request",
)

_SITE_VISIT_TEAM = (
    "site_visit.view",
    "site_visit.create",
    "site_visit.edit",
    "site_visit.view_team",
    "site_visit.reports",
)

DEPARTMENT_MODULE_ACCESS: dict[Department, tuple[str, ...]] = {
    Department.OPERATIONS: (
        "dashboard.full_access",
        "analytics.enterprise",
        "reports.advanced",
        "reports.export",
        "users.view",
        "departments.view",
    ),
    Department.ADMIN: (
        "users.view",
        "users.create",
        "users.edit",
        "departments.view",
        "designations.view",
        "analytics.departmental",
        "reports.basic",
    )
    + _SITE_VISIT_TEAM,
    Department.HR: (
        "attendance.view_all",
        "leave.view_all",
        "leave.approve",
        "users.view",
        "users.create",
        "users.edit",
        "customers.view",
        "products.view",
        "quotations.view",
        "invoices.view",
    ),
    Department.MARKETING: (
        "customers.view",
        "customers.create",
        "customers.edit",
        "products.view",
        "quotations.view",
        "reports.basic",
    )
    + _SITE_VISIT_TEAM,
    Department.SALES: (
        "customers.view",
        "customers.create",
        "customers.edit",
        "quotations.view",
        "quotations.create",
        "quotations.edit",
        "products.view",
        "reports.basic",
    ),
    Department.TECHNICAL: (
        "products.view",
        "products.create",
        "products.edit",
        "products.specifications",
        "products.inventory",
    )
    + _SITE_VISIT_TEAM,
    Department.HOUSEKEEPING: ("attendance.view_own",),
}

# (minimum designation level, permissions unlocked at that level)
DESIGNATION_ACTION_TIERS: tuple[tuple[int, tuple[str, ...]], ...] = (
    (1, ("attendance.mark",)),
    (2, ("products.view",)),
    (3, ("products.create", "products.edit")),
    (4, ("customers.create", "customers.edit", "quotations.create", "quotations.edit")),
    (5, ("invoices.create", "approve.quotations.basic", "attendance.view_team")),
    (6, ("approve.quotations.advanced", "approve.leave.team", "users.view", "reports.advanced")),
    (7, ("approve.invoices.basic", "approve.leave.department", "users.create", "users.edit", "analytics.departmental")),
    (8, ("approve.invoices.advanced", "users.permissions", "analytics.enterprise", "system.settings")),
    (
        9,
        (
            "system.backup",
            "system.audit",
            "system.integrations",
            "users.delete",
            "departments.create",
            "departments.edit",
            "departments.delete",
        ),
    ),
)


def department_module_access(department: Department) -> set[str]:
    return {"dashboard.view", *DEPARTMENT_MODULE_ACCESS.get(department, ())}


def designation_action_permissions(designation: Designation) -> set[str]:
    level = designation_level(designation)
    permissions = set(NEW_EMPLOYEE_PERMISSIONS)
    for min_level, unlocked in DESIGNATION_ACTION_TIERS:
        if level >= min_level:
            permissions.update(unlocked)
    return permissions


def static_permissions(department: Optional[Department], designation: Optional[Designation]) -> set[str]:
    """Department module access combined with designation action permissions.

    A user missing either a department or a designation gets the new-employee
    defaults rather than an empty set, so an unplaced account can still view
    its own attendance and request leave.
    """

    if not department or not designation:
        return set(NEW_EMPLOYEE_PERMISSIONS)
    return department_module_access(department) | designation_action_permissions(designation)
