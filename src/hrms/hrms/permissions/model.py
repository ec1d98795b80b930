from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import Department, Designation


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ApprovalLimits:
    quotations: Optional[float] = None
    invoices: Optional[float] = None
    expenses: Optional[float] = None
    leave: bool = False
    overtime: bool = False


@dataclass(frozen=True)
class Role:
    role_id: int
    name: str
    permissions: tuple[str, ...]
    description: Optional[str] = None
    is_system_role: bool = False
    approval_limits: Optional[ApprovalLimits] = None

    def to_dict(self) -> dict:
        return {
            "role_id": self.role_id,
            "name": self.name,
            "description": self.description,
            "is_system_role": self.is_system_role,
            "permissions": list(self.permissions),
            "approval_limits": asdict(self.approval_limits) if self.approval_limits else None,
        }


@dataclass(frozen=True)
class UserRoleAssignment:
    assignment_id: int
    user_id: int
    role_id: int
    assigned_by: int
    effective_from: datetime
    effective_to: Optional[datetime] = None
    is_active: bool = True

    def is_effective(self, at: datetime) -> bool:
        return self.is_active and self.effective_from <= at and (self.effective_to is None or self.effective_to > at)


@dataclass(frozen=True)
class PermissionOverride:
    override_id: int
    user_id: int
    permission: str
    granted: bool
    reason: str
    granted_by: int
    effective_from: datetime
    effective_to: Optional[datetime] = None

    def is_effective(self, at: datetime) -> bool:
        return self.effective_from <= at and (self.effective_to is None or self.effective_to > at)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["effective_from"] = _iso(self.effective_from)
        data["effective_to"] = _iso(self.effective_to)
        return data


@dataclass(frozen=True)
class AuditLog:
    log_id: int
    user_id: int
    action: str
    entity_type: str
    entity_id: str
    created_at: datetime
    changes: dict[str, Any] = field(default_factory=dict)
    department: Optional[Department] = None
    designation: Optional[Designation] = None

    def to_dict(self) -> dict:
        return {
            "log_id": self.log_id,
            "user_id": self.user_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "changes": self.changes,
            "department": self.department.value if self.department else None,
            "designation": self.designation.value if self.designation else None,
            "created_at": _iso(self.created_at),
        }
