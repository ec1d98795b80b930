from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import AdvanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import SalaryAdvance, SalaryStructure
from .repository import SalaryAdvanceRepository, SalaryStructureRepository

_STRUCTURE_COLUMNS = """
    structure_id, user_id, employee_id, fixed_salary, basic_salary, hra, allowances,
    variable_component, effective_from, effective_to, is_active
"""


def _to_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        structure_id=int(r["structure_id"]),
        user_id=int(r["user_id"]),
        employee_id=r.get("employee_id"),
        fixed_salary=float(r["fixed_salary"]),
        basic_salary=float(r["basic_salary"]),
        hra=float(r["hra"] or 0),
        allowances=float(r["allowances"] or 0),
        variable_component=float(r["variable_component"] or 0),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        is_active=bool(r["is_active"]),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_user(self, user_id: int) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STRUCTURE_COLUMNS} FROM salary_structures
                WHERE user_id=%s AND is_active=1
                ORDER BY effective_from DESC, structure_id DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_structure(r) if r else None

    def list_structures(self, *, user_id: Optional[int] = None) -> Sequence[SalaryStructure]:
        where, params = build_where({"user_id": user_id})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STRUCTURE_COLUMNS} FROM salary_structures WHERE {where} ORDER BY user_id, effective_from DESC",
                tuple(params),
            )
            return [_to_structure(r) for r in fetchall(cur)]

    def create_structure(self, **fields: Any) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE salary_structures SET is_active=0, effective_to=%s WHERE user_id=%s AND is_active=1",
                (fields["effective_from"], fields["user_id"]),
            )
            cur.execute(
                """
                INSERT INTO salary_structures(
                    user_id, employee_id, fixed_salary, basic_salary, hra, allowances,
                    variable_component, effective_from, effective_to, is_active, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (
                    fields["user_id"],
                    fields.get("employee_id"),
                    fields["fixed_salary"],
                    fields["basic_salary"],
                    fields["hra"],
                    fields["allowances"],
                    fields["variable_component"],
                    fields["effective_from"],
                    fields.get("effective_to"),
                    fields.get("created_by"),
                ),
            )
            return int(cur.lastrowid)


_ADVANCE_COLUMNS = """
    advance_id, user_id, amount, reason, deduction_start_month, deduction_start_year,
    number_of_installments, monthly_deduction, remaining_amount, status,
    requested_at, approved_by, approved_at
"""


def _to_advance(r: dict) -> SalaryAdvance:
    return SalaryAdvance(
        advance_id=int(r["advance_id"]),
        user_id=int(r["user_id"]),
        amount=float(r["amount"]),
        reason=r["reason"],
        deduction_start_month=int(r["deduction_start_month"]),
        deduction_start_year=int(r["deduction_start_year"]),
        number_of_installments=int(r["number_of_installments"]),
        monthly_deduction=float(r["monthly_deduction"]),
        remaining_amount=float(r["remaining_amount"]),
        status=AdvanceStatus(r["status"]),
        requested_at=r.get("requested_at"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
    )


class MySQLSalaryAdvanceRepository(SalaryAdvanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_advance(self, **fields: Any) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_advances(
                    user_id, amount, reason, deduction_start_month, deduction_start_year,
                    number_of_installments, monthly_deduction, remaining_amount, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    fields["user_id"],
                    fields["amount"],
                    fields["reason"],
                    fields["deduction_start_month"],
                    fields["deduction_start_year"],
                    fields["number_of_installments"],
                    fields["monthly_deduction"],
                    fields["remaining_amount"],
                    AdvanceStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_advance(self, advance_id: int) -> Optional[SalaryAdvance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ADVANCE_COLUMNS} FROM salary_advances WHERE advance_id=%s", (advance_id,))
            r = fetchone(cur)
            return _to_advance(r) if r else None

    def list_advances(
        self,
        *,
        user_id: Optional[int] = None,
        status: Optional[AdvanceStatus] = None,
    ) -> Sequence[SalaryAdvance]:
        where, params = build_where({"user_id": user_id, "status": status})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ADVANCE_COLUMNS} FROM salary_advances WHERE {where} ORDER BY requested_at DESC, advance_id DESC",
                tuple(params),
            )
            return [_to_advance(r) for r in fetchall(cur)]

    def decide(self, *, advance_id: int, status: AdvanceStatus, approved_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_advances
                SET status=%s, approved_by=%s, approved_at=NOW()
                WHERE advance_id=%s AND status=%s
                """,
                (status.value, approved_by, advance_id, AdvanceStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def update_balance(self, *, advance_id: int, remaining_amount: float, status: AdvanceStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE salary_advances SET remaining_amount=%s, status=%s WHERE advance_id=%s",
                (remaining_amount, status.value, advance_id),
            )
            return cur.rowcount > 0
