from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ShiftStatus, SubmissionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_column
from ..tokens.mysql_token_repository import MARK_USED_SQL
from ..tokens.payloads import SubmittedData, dump_submitted_data
from .model import NewShiftSubmission, ShiftRequest, ShiftSlot, ShiftSubmission
from .repository import SubmissionRepository


class _TokenAlreadyUsed(Exception):
    """Internal signal to roll back the consume-and-insert transaction."""


def _row_to_submission(r: dict) -> ShiftSubmission:
    return ShiftSubmission(
        submission_id=int(r["submission_id"]),
        employee_id=int(r["employee_id"]),
        token_id=r.get("token_id"),
        week_start_date=r["week_start_date"],
        week_end_date=r["week_end_date"],
        shifts=tuple(ShiftSlot.from_dict(s) for s in load_json_column(r.get("shifts")) or []),
        status=SubmissionStatus(r["status"]),
        submitted_at=r["submitted_at"],
        notes=r.get("notes"),
        optional_morning_availability=tuple(load_json_column(r.get("optional_morning_availability")) or []),
    )


class MySQLSubmissionRepository(SubmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_for_week(self, *, employee_id: int, week_start_date: date, week_end_date: date) -> Optional[ShiftSubmission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT submission_id, employee_id, token_id, week_start_date, week_end_date,
                       shifts, notes, optional_morning_availability, status, submitted_at
                FROM shift_submissions
                WHERE employee_id=%s AND week_start_date=%s AND week_end_date=%s
                ORDER BY submitted_at
                LIMIT 1
                """,
                (int(employee_id), week_start_date, week_end_date),
            )
            r = fetchone(cur)
            return _row_to_submission(r) if r else None

    def create_consuming_token(
        self,
        *,
        token_id: int,
        submission: NewShiftSubmission,
        submitted_data: SubmittedData,
        now: datetime,
    ) -> Optional[ShiftSubmission]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # The conditional update takes the row lock first, so a second
                # consumer of the same token blocks here and then sees rowcount 0.
                cur.execute(MARK_USED_SQL, (now, dump_submitted_data(submitted_data), int(token_id)))
                if cur.rowcount == 0:
                    raise _TokenAlreadyUsed()

                cur.execute(
                    """
                    INSERT INTO shift_submissions(
                        employee_id, token_id, week_start_date, week_end_date,
                        shifts, notes, optional_morning_availability, status, submitted_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(submission.employee_id),
                        int(token_id),
                        submission.week_start_date,
                        submission.week_end_date,
                        json.dumps([s.to_dict() for s in submission.shifts], ensure_ascii=False),
                        submission.notes,
                        json.dumps(list(submission.optional_morning_availability)),
                        SubmissionStatus.SUBMITTED.value,
                        now,
                    ),
                )
                submission_id = int(cur.lastrowid)
        except _TokenAlreadyUsed:
            return None

        return ShiftSubmission(
            submission_id=submission_id,
            employee_id=submission.employee_id,
            token_id=int(token_id),
            week_start_date=submission.week_start_date,
            week_end_date=submission.week_end_date,
            shifts=tuple(submission.shifts),
            status=SubmissionStatus.SUBMITTED,
            submitted_at=now,
            notes=submission.notes,
            optional_morning_availability=tuple(submission.optional_morning_availability),
        )

    def create_request_consuming_token(
        self,
        *,
        token_id: int,
        employee_id: int,
        slot: ShiftSlot,
        submitted_data: SubmittedData,
        now: datetime,
    ) -> Optional[ShiftRequest]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(MARK_USED_SQL, (now, dump_submitted_data(submitted_data), int(token_id)))
                if cur.rowcount == 0:
                    raise _TokenAlreadyUsed()

                cur.execute(
                    """
                    INSERT INTO shift_requests(
                        employee_id, token_id, shift_date, start_time, end_time,
                        branch_preference, role_preference, available_shift_id, notes, status, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        int(token_id),
                        slot.shift_date,
                        slot.start_time,
                        slot.end_time,
                        slot.branch_preference,
                        slot.role_preference,
                        slot.available_shift_id,
                        slot.notes,
                        ShiftStatus.PENDING.value,
                        now,
                    ),
                )
                request_id = int(cur.lastrowid)
        except _TokenAlreadyUsed:
            return None

        return ShiftRequest(
            request_id=request_id,
            employee_id=int(employee_id),
            token_id=int(token_id),
            slot=slot,
            status=ShiftStatus.PENDING,
            created_at=now,
        )

    def list_for_week(self, *, business_id: int, week_start_date: date, week_end_date: date) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT e.employee_id, e.first_name, e.last_name, e.employee_code,
                       s.submission_id, s.submitted_at, s.status
                FROM employees e
                LEFT JOIN shift_submissions s
                       ON s.employee_id = e.employee_id
                      AND s.week_start_date = %s
                      AND s.week_end_date = %s
                WHERE e.business_id=%s AND e.is_active=1 AND e.is_archived=0
                ORDER BY e.first_name, e.last_name, s.submitted_at
                """,
                (week_start_date, week_end_date, int(business_id)),
            )
            out: list[dict] = []
            seen: set[int] = set()
            for r in fetchall(cur):
                employee_id = int(r["employee_id"])
                # Duplicate rows are possible (see guard); report the first one.
                if employee_id in seen:
                    continue
                seen.add(employee_id)
                out.append(
                    {
                        "employee_id": employee_id,
                        "employee_name": f"{r['first_name']} {r['last_name']}".strip(),
                        "employee_code": r.get("employee_code"),
                        "has_submitted": r.get("submission_id") is not None,
                        "submission_id": r.get("submission_id"),
                        "submitted_at": r["submitted_at"].strftime("%Y-%m-%d %H:%M") if r.get("submitted_at") else None,
                        "status": r.get("status"),
                    }
                )
            return out
