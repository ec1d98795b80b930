from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_int, require_min_length, require_non_empty
from ..core.enums import Department, Designation, UserRole
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import ApprovalLimits, PermissionOverride, Role
from .repository import RoleRepository
from .tables import MASTER_ADMIN_SYSTEM_PERMISSIONS, static_permissions

logger = logging.getLogger(__name__)

MIN_OVERRIDE_REASON = 10


class PermissionService:
    """Resolve what a user may do: static tables, then roles, then per-user overrides."""

    def __init__(
        self,
        users: UserRepository,
        roles: RoleRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._roles = roles
        self._clock = clock

    def get_effective_permissions(self, user_id: int) -> set[str]:
        user = self._users.get_by_id(int(user_id))
        if not user:
            return set()

        if user.role == UserRole.MASTER_ADMIN:
            permissions = static_permissions(
                user.department or Department.OPERATIONS,
                user.designation or Designation.CEO,
            )
            permissions.update(MASTER_ADMIN_SYSTEM_PERMISSIONS)
            return permissions

        now = self._clock()
        permissions = static_permissions(user.department, user.designation)

        for role in self._effective_roles(user.user_id, now):
            permissions.update(role.permissions)

        # Overrides are applied last, in order; a later override wins.
        for override in self._roles.list_overrides(user.user_id):
            if not override.is_effective(now):
                continue
            if override.granted:
                permissions.add(override.permission)
            else:
                permissions.discard(override.permission)

        return permissions

    def check_permission(self, user_id: int, permission: str) -> bool:
        return permission in self.get_effective_permissions(user_id)

    def get_effective_approval_limits(self, user_id: int) -> ApprovalLimits:
        """Most generous limit across the user's effective roles."""

        quotations = invoices = expenses = 0.0
        leave = overtime = False
        for role in self._effective_roles(int(user_id), self._clock()):
            limits = role.approval_limits
            if not limits:
                continue
            quotations = max(quotations, limits.quotations or 0)
            invoices = max(invoices, limits.invoices or 0)
            expenses = max(expenses, limits.expenses or 0)
            leave = leave or limits.leave
            overtime = overtime or limits.overtime
        return ApprovalLimits(
            quotations=quotations,
            invoices=invoices,
            expenses=expenses,
            leave=leave,
            overtime=overtime,
        )

    def _effective_roles(self, user_id: int, now: datetime) -> list[Role]:
        roles: list[Role] = []
        for assignment in self._roles.list_assignments(user_id):
            if not assignment.is_effective(now):
                continue
            role = self._roles.get_role(assignment.role_id)
            if role:
                roles.append(role)
        return roles

    # Role management

    def list_roles(self) -> Sequence[Role]:
        return self._roles.list_roles()

    def create_role(
        self,
        *,
        name: str,
        permissions: Sequence[str],
        description: Optional[str] = None,
        is_system_role: bool = False,
        approval_limits: Optional[dict[str, Any]] = None,
    ) -> int:
        name = require_non_empty(name, "Role name")
        if self._roles.get_role_by_name(name):
            raise ValidationError("Role name already exists")

        cleaned = sorted({p.strip() for p in permissions or [] if p and p.strip()})
        if not cleaned:
            raise ValidationError("A role needs at least one permission")

        limits = None
        if approval_limits:
            try:
                limits = ApprovalLimits(**approval_limits)
            except TypeError:
                raise ValidationError("Approval limits are not valid")

        return self._roles.create_role(
            name=name,
            permissions=cleaned,
            description=(description or "").strip() or None,
            is_system_role=bool(is_system_role),
            approval_limits=limits,
        )

    def delete_role(self, role_id: int) -> None:
        role = self._roles.get_role(int(role_id))
        if not role:
            raise NotFoundError("Role not found")
        if role.is_system_role:
            raise ValidationError("System roles cannot be deleted")
        self._roles.delete_role(role.role_id)

    def assign_role(
        self,
        *,
        user_id: int,
        role_id: int,
        assigned_by: int,
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
    ) -> int:
        user_id = require_int(user_id, "User id")
        role_id = require_int(role_id, "Role id")
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")
        if not self._roles.get_role(role_id):
            raise NotFoundError("Role not found")

        start = effective_from or self._clock()
        if effective_to is not None and effective_to <= start:
            raise ValidationError("effective_to must be after effective_from")

        assignment_id = self._roles.assign_role(
            user_id=user_id,
            role_id=role_id,
            assigned_by=int(assigned_by),
            effective_from=start,
            effective_to=effective_to,
        )
        logger.info("Role %s assigned to user %s by %s", role_id, user_id, assigned_by)
        return assignment_id

    def revoke_role(self, *, user_id: int, role_id: int) -> None:
        if not self._roles.revoke_role(user_id=int(user_id), role_id=int(role_id)):
            raise NotFoundError("Role assignment not found")
        logger.info("Role %s revoked from user %s", role_id, user_id)

    # Overrides

    def list_overrides(self, user_id: int) -> Sequence[PermissionOverride]:
        return self._roles.list_overrides(int(user_id))

    def create_override(
        self,
        *,
        user_id: int,
        permission: str,
        granted: bool,
        reason: str,
        granted_by: int,
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
    ) -> int:
        user_id = require_int(user_id, "User id")
        if not self._users.get_by_id(user_id):
            raise NotFoundError("User not found")
        permission = require_non_empty(permission, "Permission")
        reason = require_min_length(require_non_empty(reason, "Reason"), "Reason", MIN_OVERRIDE_REASON)

        start = effective_from or self._clock()
        if effective_to is not None and effective_to <= start:
            raise ValidationError("effective_to must be after effective_from")

        override_id = self._roles.create_override(
            user_id=user_id,
            permission=permission,
            granted=bool(granted),
            reason=reason,
            granted_by=int(granted_by),
            effective_from=start,
            effective_to=effective_to,
        )
        logger.info(
            "Permission %s %s for user %s by %s",
            permission,
            "granted" if granted else "revoked",
            user_id,
            granted_by,
        )
        return override_id

    def delete_override(self, override_id: int) -> None:
        if not self._roles.delete_override(int(override_id)):
            raise NotFoundError("Permission override not found")
