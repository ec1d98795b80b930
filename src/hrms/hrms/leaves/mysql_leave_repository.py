from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Leave
from .repository import LeaveRepository

_COLUMNS = "leave_id, user_id, start_date, end_date, reason, status, created_at, decided_by, decided_at, admin_note"


def _to_leave(r: dict) -> Leave:
    return Leave(
        leave_id=int(r["leave_id"]),
        user_id=int(r["user_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_leave(self, *, user_id: int, start_date: date, end_date: date, reason: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(user_id, start_date, end_date, reason, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (user_id, start_date, end_date, reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_leave(self, leave_id: int) -> Optional[Leave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leaves WHERE leave_id=%s", (leave_id,))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_for_user(self, user_id: int) -> Sequence[Leave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leaves WHERE user_id=%s ORDER BY start_date DESC, leave_id DESC",
                (user_id,),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_by_status(self, status: LeaveStatus) -> Sequence[Leave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leaves WHERE status=%s ORDER BY created_at, leave_id",
                (status.value,),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        decided_by: int,
        admin_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, decided_by=%s, decided_at=NOW(), admin_note=%s
                WHERE leave_id=%s AND status=%s
                """,
                (status.value, decided_by, admin_note, leave_id, LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0
