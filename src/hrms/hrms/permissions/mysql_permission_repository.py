from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Optional, Sequence

from ..core.enums import Department, Designation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import ApprovalLimits, AuditLog, PermissionOverride, Role, UserRoleAssignment
from .repository import AuditLogRepository, RoleRepository

_ROLE_COLUMNS = "role_id, name, description, is_system_role, permissions, approval_limits"


def _to_role(r: dict) -> Role:
    limits = load_json(r.get("approval_limits"))
    return Role(
        role_id=int(r["role_id"]),
        name=r["name"],
        description=r.get("description"),
        is_system_role=bool(r.get("is_system_role")),
        permissions=tuple(load_json(r.get("permissions"), [])),
        approval_limits=ApprovalLimits(**limits) if limits else None,
    )


def _to_assignment(r: dict) -> UserRoleAssignment:
    return UserRoleAssignment(
        assignment_id=int(r["assignment_id"]),
        user_id=int(r["user_id"]),
        role_id=int(r["role_id"]),
        assigned_by=int(r["assigned_by"]),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        is_active=bool(r["is_active"]),
    )


def _to_override(r: dict) -> PermissionOverride:
    return PermissionOverride(
        override_id=int(r["override_id"]),
        user_id=int(r["user_id"]),
        permission=r["permission"],
        granted=bool(r["granted"]),
        reason=r["reason"],
        granted_by=int(r["granted_by"]),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
    )


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_role(self, role_id: int) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROLE_COLUMNS} FROM roles WHERE role_id=%s", (role_id,))
            r = fetchone(cur)
            return _to_role(r) if r else None

    def get_role_by_name(self, name: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROLE_COLUMNS} FROM roles WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_role(r) if r else None

    def list_roles(self) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROLE_COLUMNS} FROM roles ORDER BY name")
            return [_to_role(r) for r in fetchall(cur)]

    def create_role(
        self,
        *,
        name: str,
        permissions: Sequence[str],
        description: Optional[str],
        is_system_role: bool,
        approval_limits: Optional[ApprovalLimits],
    ) -> int:
        limits = None
        if approval_limits is not None:
            limits = dump_json(asdict(approval_limits))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO roles(name, description, is_system_role, permissions, approval_limits)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (name, description, 1 if is_system_role else 0, dump_json(list(permissions)), limits),
            )
            return int(cur.lastrowid)

    def delete_role(self, role_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE user_role_assignments SET is_active=0 WHERE role_id=%s", (role_id,))
            cur.execute("DELETE FROM roles WHERE role_id=%s", (role_id,))
            return cur.rowcount > 0

    def list_assignments(self, user_id: int) -> Sequence[UserRoleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, user_id, role_id, assigned_by, effective_from, effective_to, is_active
                FROM user_role_assignments
                WHERE user_id=%s AND is_active=1
                ORDER BY effective_from
                """,
                (user_id,),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def assign_role(
        self,
        *,
        user_id: int,
        role_id: int,
        assigned_by: int,
        effective_from: datetime,
        effective_to: Optional[datetime],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_role_assignments(user_id, role_id, assigned_by, effective_from, effective_to, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (user_id, role_id, assigned_by, effective_from, effective_to),
            )
            return int(cur.lastrowid)

    def revoke_role(self, *, user_id: int, role_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE user_role_assignments SET is_active=0 WHERE user_id=%s AND role_id=%s AND is_active=1",
                (user_id, role_id),
            )
            return int(cur.rowcount)

    def list_overrides(self, user_id: int) -> Sequence[PermissionOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT override_id, user_id, permission, granted, reason, granted_by, effective_from, effective_to
                FROM permission_overrides
                WHERE user_id=%s
                ORDER BY effective_from, override_id
                """,
                (user_id,),
            )
            return [_to_override(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO permission_overrides(user_id, permission, granted, reason, granted_by, effective_from, effective_to)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (user_id, permission, 1 if granted else 0, reason, granted_by, effective_from, effective_to),
            )
            return int(cur.lastrowid)

    def delete_override(self, override_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM permission_overrides WHERE override_id=%s", (override_id,))
            return cur.rowcount > 0


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(user_id, action, entity_type, entity_id, changes, department, designation)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (user_id, action, entity_type, entity_id, dump_json(changes), department, designation),
            )
            return int(cur.lastrowid)

    def list_logs(
        self,
        *,
        user_id: Optional[int] = None,
        entity_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 1000,
    ) -> Sequence[AuditLog]:
        where, params = build_where({"user_id": user_id, "entity_type": entity_type})
        if start is not None:
            where += " AND created_at >= %s"
            params.append(start)
        if end is not None:
            where += " AND created_at <= %s"
            params.append(end)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT log_id, user_id, action, entity_type, entity_id, changes, department, designation, created_at
                FROM audit_logs
                WHERE {where}
                ORDER BY created_at DESC, log_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [
                AuditLog(
                    log_id=int(r["log_id"]),
                    user_id=int(r["user_id"]),
                    action=r["action"],
                    entity_type=r["entity_type"],
                    entity_id=r["entity_id"],
                    created_at=r["created_at"],
                    changes=load_json(r.get("changes"), {}),
                    department=Department(r["department"]) if r.get("department") else None,
                    designation=Designation(r["designation"]) if r.get("designation") else None,
                )
                for r in fetchall(cur)
            ]
