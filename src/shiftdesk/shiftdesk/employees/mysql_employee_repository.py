from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, business_id, first_name, last_name, employee_code, phone, is_active, is_archived"


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        business_id=int(r["business_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        employee_code=r.get("employee_code"),
        phone=r.get("phone"),
        is_active=bool(r["is_active"]),
        is_archived=bool(r["is_archived"]),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active(self, *, business_id: int, employee_ids: Optional[Sequence[int]] = None) -> Sequence[Employee]:
        clauses = ["business_id=%s", "is_active=1", "is_archived=0"]
        params: list[object] = [int(business_id)]
        if employee_ids:
            clauses.append(f"employee_id IN ({', '.join(['%s'] * len(employee_ids))})")
            params.extend(int(e) for e in employee_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE {" AND ".join(clauses)}
                ORDER BY first_name, last_name
                """,
                tuple(params),
            )
            return [_to_employee(r) for r in fetchall(cur)]
