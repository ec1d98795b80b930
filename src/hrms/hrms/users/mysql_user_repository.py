from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Department, Designation, UserRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, email, display_name, password_hash, role, department, designation,
    employee_id, reporting_manager_id, payroll_grade, join_date, is_active, created_at
"""

_WRITABLE = {
    "email",
    "display_name",
    "password_hash",
    "role",
    "department",
    "designation",
    "employee_id",
    "reporting_manager_id",
    "payroll_grade",
    "join_date",
    "is_active",
}


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        display_name=row["display_name"],
        password_hash=row["password_hash"],
        role=UserRole(row["role"]),
        department=Department(row["department"]) if row.get("department") else None,
        designation=Designation(row["designation"]) if row.get("designation") else None,
        employee_id=row.get("employee_id"),
        reporting_manager_id=row.get("reporting_manager_id"),
        payroll_grade=row.get("payroll_grade"),
        join_date=row.get("join_date"),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
    )


def _db_value(value: Any) -> Any:
    return getattr(value, "value", value)


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_users(
        self,
        *,
        department: Optional[Department] = None,
        designation: Optional[Designation] = None,
        reporting_manager_id: Optional[int] = None,
        active_only: bool = False,
    ) -> Sequence[User]:
        where, params = build_where(
            {
                "department": department,
                "designation": designation,
                "reporting_manager_id": reporting_manager_id,
                "is_active": 1 if active_only else None,
            }
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where} ORDER BY display_name", tuple(params))
            return [_to_user(r) for r in fetchall(cur)]

    def create_user(self, **fields: Any) -> int:
        cols = [c for c in fields if c in _WRITABLE]
        placeholders = ",".join(["%s"] * len(cols))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO users({','.join(cols)}) VALUES({placeholders})",
                tuple(_db_value(fields[c]) for c in cols),
            )
            return int(cur.lastrowid)

    def update_user(self, user_id: int, fields: dict[str, Any]) -> bool:
        cols = [c for c in fields if c in _WRITABLE]
        if not cols:
            return False
        assignments = ", ".join(f"{c}=%s" for c in cols)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {assignments} WHERE user_id=%s",
                tuple(_db_value(fields[c]) for c in cols) + (int(user_id),),
            )
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(user_id)))
            return cur.rowcount > 0
