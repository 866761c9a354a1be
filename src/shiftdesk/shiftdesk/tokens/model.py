from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import TOKEN_LOG_PREFIX
from ..core.enums import TokenKind
from ..employees.model import Employee
from .payloads import SubmittedData


@dataclass(frozen=True)
class Token:
    """A time-boxed, one-time capability bound to one employee.

    ``expires_at`` never changes after creation and ``is_used`` never goes
    back to False.
    """

    token_id: int
    employee_id: int
    business_id: int
    token_value: str
    kind: TokenKind
    created_at: datetime
    expires_at: datetime
    is_used: bool = False
    used_at: Optional[datetime] = None
    week_start_date: Optional[date] = None
    week_end_date: Optional[date] = None
    submitted_data: Optional[SubmittedData] = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_usable(self, now: datetime) -> bool:
        return not self.is_used and not self.is_expired(now)

    @property
    def short_value(self) -> str:
        return self.token_value[:TOKEN_LOG_PREFIX] + "..."


@dataclass(frozen=True)
class NewToken:
    employee_id: int
    business_id: int
    token_value: str
    kind: TokenKind
    created_at: datetime
    expires_at: datetime
    week_start_date: Optional[date] = None
    week_end_date: Optional[date] = None


@dataclass(frozen=True)
class ValidatedToken:
    token: Token
    employee: Employee

    @property
    def employee_id(self) -> int:
        return self.employee.employee_id

    @property
    def business_id(self) -> int:
        return self.employee.business_id


@dataclass(frozen=True)
class IssuedToken:
    employee: Employee
    token: Token


@dataclass(frozen=True)
class IssueFailure:
    employee: Employee
    error: str


@dataclass(frozen=True)
class BulkIssueResult:
    business_id: int
    week_start_date: date
    week_end_date: date
    issued: tuple[IssuedToken, ...]
    failures: tuple[IssueFailure, ...]

    @property
    def total_employees(self) -> int:
        return len(self.issued) + len(self.failures)
