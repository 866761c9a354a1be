from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import NewScheduledShift, ScheduledShift
from .repository import ScheduleRepository

_COLUMNS = "shift_id, business_id, branch_id, employee_id, shift_date, start_time, end_time, status, is_archived"


def _to_shift(r: dict) -> ScheduledShift:
    return ScheduledShift(
        shift_id=int(r["shift_id"]),
        business_id=int(r["business_id"]),
        branch_id=int(r["branch_id"]),
        employee_id=int(r["employee_id"]) if r.get("employee_id") is not None else None,
        shift_date=r["shift_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        status=ShiftStatus(r["status"]),
        is_archived=bool(r["is_archived"]),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[ScheduledShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM scheduled_shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def find_for_employee_on(
        self,
        *,
        employee_id: int,
        shift_date: date,
        branch_id: int,
        exclude_shift_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        clauses = ["employee_id=%s", "shift_date=%s", "branch_id=%s", "is_archived=0"]
        params: list[object] = [int(employee_id), shift_date, int(branch_id)]
        if exclude_shift_id is not None:
            clauses.append("shift_id<>%s")
            params.append(int(exclude_shift_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM scheduled_shifts
                WHERE {" AND ".join(clauses)}
                ORDER BY start_time
                """,
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]

    def has_approved_in_range(self, *, business_id: int, start: date, end: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found
                FROM scheduled_shifts
                WHERE business_id=%s AND shift_date BETWEEN %s AND %s AND status=%s
                LIMIT 1
                """,
                (int(business_id), start, end, ShiftStatus.APPROVED.value),
            )
            return fetchone(cur) is not None

    def create(self, new_shift: NewScheduledShift) -> ScheduledShift:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO scheduled_shifts(
                    business_id, branch_id, employee_id, shift_date, start_time, end_time, status, is_archived
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(new_shift.business_id),
                    int(new_shift.branch_id),
                    new_shift.employee_id,
                    new_shift.shift_date,
                    new_shift.start_time,
                    new_shift.end_time,
                    ShiftStatus.PENDING.value,
                ),
            )
            shift_id = int(cur.lastrowid)

        return ScheduledShift(
            shift_id=shift_id,
            business_id=new_shift.business_id,
            branch_id=new_shift.branch_id,
            employee_id=new_shift.employee_id,
            shift_date=new_shift.shift_date,
            start_time=new_shift.start_time,
            end_time=new_shift.end_time,
        )

    def assign_employee(self, *, shift_id: int, employee_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE scheduled_shifts SET employee_id=%s WHERE shift_id=%s AND is_archived=0",
                (employee_id, int(shift_id)),
            )
            return cur.rowcount > 0

    def archive(self, *, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE scheduled_shifts SET is_archived=1 WHERE shift_id=%s AND is_archived=0",
                (int(shift_id),),
            )
            return cur.rowcount > 0

    def publish_range(self, *, business_id: int, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE scheduled_shifts
                SET status=%s
                WHERE business_id=%s AND shift_date BETWEEN %s AND %s
                  AND status=%s AND employee_id IS NOT NULL AND is_archived=0
                """,
                (ShiftStatus.APPROVED.value, int(business_id), start, end, ShiftStatus.PENDING.value),
            )
            return int(cur.rowcount)

    def list_range(
        self,
        *,
        business_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        branch_id: Optional[int] = None,
        unassigned_only: bool = False,
    ) -> Sequence[ScheduledShift]:
        clauses = ["business_id=%s", "shift_date BETWEEN %s AND %s", "is_archived=0"]
        params: list[object] = [int(business_id), start, end]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if branch_id is not None:
            clauses.append("branch_id=%s")
            params.append(int(branch_id))
        if unassigned_only:
            clauses.append("employee_id IS NULL")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM scheduled_shifts
                WHERE {" AND ".join(clauses)}
                ORDER BY shift_date ASC, start_time ASC
                """,
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]
