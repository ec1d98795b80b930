from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus, AttendanceType, Department, Designation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, normalize_mysql_time
from .model import AttendancePolicy, AttendanceRecord
from .repository import AttendancePolicyRepository, AttendanceRepository

_RECORD_COLUMNS = """
    attendance_id, user_id, work_date, check_in_time, check_out_time, status,
    attendance_type, overtime_hours, working_hours, late_minutes, remarks
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        attendance_type=AttendanceType(r.get("attendance_type") or AttendanceType.OFFICE.value),
        overtime_hours=float(r.get("overtime_hours") or 0),
        working_hours=float(r.get("working_hours") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        remarks=r.get("remarks"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance WHERE user_id=%s AND work_date=%s",
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_between_dates(
        self,
        start_date: date,
        end_date: date,
        *,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_RECORD_COLUMNS} FROM attendance WHERE work_date BETWEEN %s AND %s"
        params: list = [start_date, end_date]
        if user_id is not None:
            sql += " AND user_id=%s"
            params.append(int(user_id))
        sql += " ORDER BY work_date, user_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        attendance_type: AttendanceType,
        late_minutes: int = 0,
        remarks: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, work_date, check_in_time, status, attendance_type, late_minutes, remarks)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (user_id, work_date, check_in_time, status.value, attendance_type.value, int(late_minutes), remarks),
            )
            return int(cur.lastrowid)

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        working_hours: float,
        overtime_hours: float,
        remarks: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out_time=%s, working_hours=%s, overtime_hours=%s, remarks=%s
                WHERE attendance_id=%s
                """,
                (check_out_time, working_hours, overtime_hours, remarks, attendance_id),
            )
            return cur.rowcount > 0

    def create_record(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        remarks: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO attendance(user_id, work_date, status, remarks) VALUES(%s,%s,%s,%s)",
                (user_id, work_date, status.value, remarks),
            )
            return int(cur.lastrowid)


def _to_policy(r: dict) -> AttendancePolicy:
    return AttendancePolicy(
        policy_id=int(r["policy_id"]),
        name=r["name"],
        check_in_time=normalize_mysql_time(r["check_in_time"]),
        check_out_time=normalize_mysql_time(r["check_out_time"]),
        department=Department(r["department"]) if r.get("department") else None,
        designation=Designation(r["designation"]) if r.get("designation") else None,
        late_mark_after_minutes=int(r["late_mark_after_minutes"]),
        half_day_mark_after_minutes=int(r["half_day_mark_after_minutes"]),
        overtime_allowed=bool(r["overtime_allowed"]),
        max_overtime_hours=float(r["max_overtime_hours"]),
        weekend_days=tuple(load_json(r.get("weekend_days"), [5, 6])),
        is_active=bool(r["is_active"]),
    )


class MySQLAttendancePolicyRepository(AttendancePolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_policies(self, *, active_only: bool = True) -> Sequence[AttendancePolicy]:
        sql = """
            SELECT policy_id, name, department, designation, check_in_time, check_out_time,
                   late_mark_after_minutes, half_day_mark_after_minutes, overtime_allowed,
                   max_overtime_hours, weekend_days, is_active
            FROM attendance_policies
        """
        if active_only:
            sql += " WHERE is_active=1"
        sql += " ORDER BY policy_id"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql)
            return [_to_policy(r) for r in fetchall(cur)]

    def create_policy(self, **fields: Any) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_policies(
                    name, department, designation, check_in_time, check_out_time,
                    late_mark_after_minutes, half_day_mark_after_minutes, overtime_allowed,
                    max_overtime_hours, weekend_days, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    fields["name"],
                    getattr(fields.get("department"), "value", None),
                    getattr(fields.get("designation"), "value", None),
                    fields["check_in_time"],
                    fields["check_out_time"],
                    int(fields["late_mark_after_minutes"]),
                    int(fields["half_day_mark_after_minutes"]),
                    1 if fields.get("overtime_allowed", True) else 0,
                    float(fields["max_overtime_hours"]),
                    dump_json(list(fields.get("weekend_days") or [])),
                    1,
                ),
            )
            return int(cur.lastrowid)
