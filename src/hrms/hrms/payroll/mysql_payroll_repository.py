from __future__ import annotations

from dataclasses import fields as dataclass_fields
from typing import Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Payroll, PayrollDraft, PayrollSettings
from .repository import PayrollRepository, PayrollSettingsRepository

# Draft columns stored as-is; status and advance_ids need conversion.
_AMOUNT_COLUMNS = [
    f.name for f in dataclass_fields(PayrollDraft) if f.name not in ("status", "advance_ids", "employee_id")
]
_INT_COLUMNS = {"user_id", "month", "year", "working_days", "present_days", "absent_days", "leave_days"}

_SELECT = f"""
    SELECT payroll_id, {', '.join(_AMOUNT_COLUMNS)}, employee_id, status, advance_ids,
           processed_by, remarks, created_at
    FROM payrolls
"""


def _to_payroll(r: dict) -> Payroll:
    values = {c: (int(r[c]) if c in _INT_COLUMNS else float(r[c] or 0)) for c in _AMOUNT_COLUMNS}
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=r.get("employee_id"),
        status=PayrollStatus(r["status"]),
        advance_ids=tuple(int(a) for a in load_json(r.get("advance_ids"), [])),
        processed_by=r.get("processed_by"),
        remarks=r.get("remarks"),
        created_at=r.get("created_at"),
        **values,
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_payroll(self, draft: PayrollDraft, *, processed_by: int, remarks: Optional[str] = None) -> int:
        cols = _AMOUNT_COLUMNS + ["employee_id", "status", "advance_ids", "processed_by", "remarks"]
        values = [getattr(draft, c) for c in _AMOUNT_COLUMNS] + [
            draft.employee_id,
            draft.status.value,
            dump_json(list(draft.advance_ids)),
            processed_by,
            remarks,
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO payrolls({','.join(cols)}) VALUES({','.join(['%s'] * len(cols))})",
                tuple(values),
            )
            return int(cur.lastrowid)

    def get_payroll(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE payroll_id=%s", (payroll_id,))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def get_by_user_and_month(self, user_id: int, month: int, year: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE user_id=%s AND month=%s AND year=%s ORDER BY payroll_id LIMIT 1",
                (user_id, month, year),
            )
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def list_payrolls(
        self,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[Payroll]:
        where, params = build_where({"month": month, "year": year, "user_id": user_id})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY year DESC, month DESC, user_id", tuple(params))
            return [_to_payroll(r) for r in fetchall(cur)]

    def update_status(self, payroll_id: int, status: PayrollStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE payrolls SET status=%s WHERE payroll_id=%s", (status.value, payroll_id))
            return cur.rowcount > 0


_SETTINGS_COLUMNS = [f.name for f in dataclass_fields(PayrollSettings)]


class MySQLPayrollSettingsRepository(PayrollSettingsRepository):
    """Single-row settings table (settings_id = 1)."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_settings(self) -> Optional[PayrollSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {', '.join(_SETTINGS_COLUMNS)} FROM payroll_settings WHERE settings_id=1")
            r = fetchone(cur)
            if not r:
                return None
            return PayrollSettings(
                pf_rate=float(r["pf_rate"]),
                esi_rate=float(r["esi_rate"]),
                tds_rate=float(r["tds_rate"]),
                overtime_multiplier=float(r["overtime_multiplier"]),
                standard_working_hours=float(r["standard_working_hours"]),
                standard_working_days=int(r["standard_working_days"]),
                pf_applicable_from_salary=float(r["pf_applicable_from_salary"]),
                esi_applicable_from_salary=float(r["esi_applicable_from_salary"]),
                company_name=r["company_name"],
            )

    def save_settings(self, settings: PayrollSettings, *, updated_by: int) -> None:
        cols = _SETTINGS_COLUMNS + ["updated_by"]
        values = [getattr(settings, c) for c in _SETTINGS_COLUMNS] + [updated_by]
        updates = ", ".join(f"{c}=VALUES({c})" for c in cols)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO payroll_settings(settings_id, {', '.join(cols)})
                VALUES(1, {', '.join(['%s'] * len(cols))})
                ON DUPLICATE KEY UPDATE {updates}
                """,
                tuple(values),
            )
