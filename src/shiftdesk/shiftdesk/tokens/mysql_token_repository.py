from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import mysql.connector

from ..core.enums import TokenKind
from ..core.exceptions import IssuanceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import NewToken, Token
from .payloads import SubmittedData, dump_submitted_data, load_submitted_data
from .repository import TokenRepository

TOKEN_COLUMNS = """
    token_id, employee_id, business_id, token_value, kind, created_at, expires_at,
    is_used, used_at, week_start_date, week_end_date, submitted_data
"""

# Conditional consume: the only concurrency control on tokens.
MARK_USED_SQL = """
    UPDATE employee_tokens
    SET is_used=1, used_at=%s, submitted_data=%s
    WHERE token_id=%s AND is_used=0
"""


def row_to_token(r: dict) -> Token:
    return Token(
        token_id=int(r["token_id"]),
        employee_id=int(r["employee_id"]),
        business_id=int(r["business_id"]),
        token_value=r["token_value"],
        kind=TokenKind(r["kind"]),
        created_at=r["created_at"],
        expires_at=r["expires_at"],
        is_used=bool(r["is_used"]),
        used_at=r.get("used_at"),
        week_start_date=r.get("week_start_date"),
        week_end_date=r.get("week_end_date"),
        submitted_data=load_submitted_data(r.get("submitted_data")),
    )


class MySQLTokenRepository(TokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, new_token: NewToken) -> Token:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employee_tokens(
                        employee_id, business_id, token_value, kind,
                        created_at, expires_at, is_used, week_start_date, week_end_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,0,%s,%s)
                    """,
                    (
                        int(new_token.employee_id),
                        int(new_token.business_id),
                        new_token.token_value,
                        new_token.kind.value,
                        new_token.created_at,
                        new_token.expires_at,
                        new_token.week_start_date,
                        new_token.week_end_date,
                    ),
                )
                token_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            raise IssuanceError(f"Token could not be stored: {e.msg}") from e

        return Token(
            token_id=token_id,
            employee_id=new_token.employee_id,
            business_id=new_token.business_id,
            token_value=new_token.token_value,
            kind=new_token.kind,
            created_at=new_token.created_at,
            expires_at=new_token.expires_at,
            week_start_date=new_token.week_start_date,
            week_end_date=new_token.week_end_date,
        )

    def get_by_value(self, token_value: str) -> Optional[Token]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {TOKEN_COLUMNS} FROM employee_tokens WHERE token_value=%s", (token_value,))
            r = fetchone(cur)
            return row_to_token(r) if r else None

    def find_usable(
        self,
        *,
        employee_id: int,
        kind: TokenKind,
        now: datetime,
        week_start_date: Optional[date] = None,
        week_end_date: Optional[date] = None,
    ) -> Optional[Token]:
        clauses = ["employee_id=%s", "kind=%s", "is_used=0", "expires_at>%s"]
        params: list[object] = [int(employee_id), kind.value, now]
        if week_start_date is not None:
            clauses.append("week_start_date=%s")
            params.append(week_start_date)
        if week_end_date is not None:
            clauses.append("week_end_date=%s")
            params.append(week_end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {TOKEN_COLUMNS}
                FROM employee_tokens
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return row_to_token(r) if r else None

    def mark_used(self, *, token_id: int, used_at: datetime, submitted_data: Optional[SubmittedData]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(MARK_USED_SQL, (used_at, dump_submitted_data(submitted_data), int(token_id)))
            return cur.rowcount > 0
