from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.constants import AUDIT_LOG_LIMIT
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from .model import AuditLog
from .repository import AuditLogRepository


class AuditService:
    """Append-only audit trail; entries carry the actor's department/designation."""

    def __init__(self, logs: AuditLogRepository, users: UserRepository):
        self._logs = logs
        self._users = users

    def log(
        self,
        *,
        user_id: int,
        action: str,
        entity_type: str,
        entity_id: str,
        changes: Optional[dict[str, Any]] = None,
    ) -> int:
        if not action or not entity_type:
            raise ValidationError("Audit action and entity type are required")
        actor = self._users.get_by_id(int(user_id))
        return self._logs.create(
            user_id=int(user_id),
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            changes=changes or {},
            department=actor.department.value if actor and actor.department else None,
            designation=actor.designation.value if actor and actor.designation else None,
        )

    def list_logs(
        self,
        *,
        user_id: Optional[int] = None,
        entity_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = AUDIT_LOG_LIMIT,
    ) -> Sequence[AuditLog]:
        return self._logs.list_logs(
            user_id=user_id,
            entity_type=entity_type or None,
            start=start,
            end=end,
            limit=min(max(1, int(limit)), AUDIT_LOG_LIMIT),
        )
