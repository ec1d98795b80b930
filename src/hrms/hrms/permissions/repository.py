from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .model import ApprovalLimits, AuditLog, PermissionOverride, Role, UserRoleAssignment


class RoleRepository(Protocol):
    def get_role(self, role_id: int) -> Optional[Role]:
        raise NotImplementedError

    def get_role_by_name(self, name: str) -> Optional[Role]:
        raise NotImplementedError

    def list_roles(self) -> Sequence[Role]:
        raise NotImplementedError

    def create_role(
        self,
        *,
        name: str,
        permissions: Sequence[str],
        description: Optional[str],
        is_system_role: bool,
        approval_limits: Optional[ApprovalLimits],
    ) -> int:
        raise NotImplementedError

    def delete_role(self, role_id: int) -> bool:
        raise NotImplementedError

    def list_assignments(self, user_id: int) -> Sequence[UserRoleAssignment]:
        """Active assignments for the user (date effectiveness is checked by the caller)."""

        raise NotImplementedError

    def assign_role(
        self,
        *,
        user_id: int,
        role_id: int,
        assigned_by: int,
        effective_from: datetime,
        effective_to: Optional[datetime],
    ) -> int:
        raise NotImplementedError

    def revoke_role(self, *, user_id: int, role_id: int) -> int:
        """Deactivate every active assignment of the role; returns the number changed."""

        raise NotImplementedError

    def list_overrides(self, user_id: int) -> Sequence[PermissionOverride]:
        raise NotImplementedError

    def create_override(
        self,
        *,
        user_id: int,
        permission: str,
        granted: bool,
        reason: str,
        granted_by: int,
        effective_from: datetime,
        effective_to: Optional[datetime],
    ) -> int:
        raise NotImplementedError

    def delete_override(self, override_id: int) -> bool:
        raise NotImplementedError


class AuditLogRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        action: str,
        entity_type: str,
        entity_id: str,
        changes: dict[str, Any],
        department: Optional[str],
        designation: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list_logs(
        self,
        *,
        user_id: Optional[int] = None,
        entity_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 1000,
    ) -> Sequence[AuditLog]:
        raise NotImplementedError
