from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import require_date_range, require_positive_id
from ..core.constants import (
    PERMANENT_TOKEN_DAYS,
    REGISTRATION_TOKEN_HOURS,
    SHIFT_TOKEN_TTL_HOURS,
    TOKEN_ISSUE_ATTEMPTS,
    WEEKLY_TOKEN_GRACE_DAYS,
)
from ..core.enums import TokenKind
from ..core.exceptions import IssuanceError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import BulkIssueResult, IssuedToken, IssueFailure, NewToken, Token
from .payloads import RevokedData
from .repository import TokenRepository

logger = logging.getLogger(__name__)


def random_token_value() -> str:
    return uuid.uuid4().hex


class TokenIssuer:
    """Use case: hand out tokens to employees.

    Policy: an employee that already holds a usable token of the same kind
    (and, for weekly tokens, the same week) gets that token back; a new one is
    minted only when none exists. Tokens are never deleted.
    """

    def __init__(
        self,
        tokens: TokenRepository,
        employees: EmployeeRepository,
        *,
        weekly_grace_days: int = WEEKLY_TOKEN_GRACE_DAYS,
        shift_ttl_hours: int = SHIFT_TOKEN_TTL_HOURS,
        permanent_days: int = PERMANENT_TOKEN_DAYS,
        registration_hours: int = REGISTRATION_TOKEN_HOURS,
        max_attempts: int = TOKEN_ISSUE_ATTEMPTS,
        value_factory: Callable[[], str] = random_token_value,
    ):
        self._tokens = tokens
        self._employees = employees
        self._weekly_grace = timedelta(days=weekly_grace_days)
        self._shift_ttl = timedelta(hours=shift_ttl_hours)
        self._permanent_ttl = timedelta(days=permanent_days)
        self._registration_ttl = timedelta(hours=registration_hours)
        self._max_attempts = max(1, int(max_attempts))
        self._value_factory = value_factory

    def issue(
        self,
        employee_id: int,
        ttl: timedelta,
        *,
        kind: TokenKind = TokenKind.SHIFT,
        week_start_date: Optional[date] = None,
        week_end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Token:
        now = now or now_utc()
        if ttl <= timedelta(0):
            raise ValidationError("Token lifetime must be positive")
        if kind == TokenKind.WEEKLY:
            if week_start_date is None or week_end_date is None:
                raise ValidationError("Weekly tokens need a week")
            require_date_range(week_start_date, week_end_date)

        employee = self._employees.get_by_id(require_positive_id(employee_id, "Employee"))
        if not employee or not employee.is_assignable:
            raise IssuanceError(f"Employee {employee_id} is not an active employee")

        existing = self._tokens.find_usable(
            employee_id=employee.employee_id,
            kind=kind,
            now=now,
            week_start_date=week_start_date,
            week_end_date=week_end_date,
        )
        if existing:
            logger.debug("Reusing %s token %s for employee %s", kind.value, existing.short_value, employee.employee_id)
            return existing

        last_error: Optional[IssuanceError] = None
        for attempt in range(1, self._max_attempts + 1):
            new_token = NewToken(
                employee_id=employee.employee_id,
                business_id=employee.business_id,
                token_value=self._value_factory(),
                kind=kind,
                created_at=now,
                expires_at=now + ttl,
                week_start_date=week_start_date,
                week_end_date=week_end_date,
            )
            try:
                token = self._tokens.insert(new_token)
            except IssuanceError as e:
                logger.warning("Token insert collided for employee %s (attempt %s): %s", employee.employee_id, attempt, e)
                last_error = e
                continue

            logger.info("Issued %s token %s for employee %s", kind.value, token.short_value, employee.employee_id)
            return token

        raise IssuanceError(f"Could not issue a token for employee {employee.employee_id}") from last_error

    def issue_weekly(
        self,
        employee_id: int,
        *,
        week_start_date: date,
        week_end_date: date,
        now: Optional[datetime] = None,
    ) -> Token:
        now = now or now_utc()
        # Valid until the grace period after the week ends.
        expires_at = datetime.combine(week_end_date, time.min) + timedelta(days=1) + self._weekly_grace
        return self.issue(
            employee_id,
            expires_at - now,
            kind=TokenKind.WEEKLY,
            week_start_date=week_start_date,
            week_end_date=week_end_date,
            now=now,
        )

    def issue_shift(self, employee_id: int, *, now: Optional[datetime] = None) -> Token:
        return self.issue(employee_id, self._shift_ttl, kind=TokenKind.SHIFT, now=now)

    def issue_permanent(self, employee_id: int, *, now: Optional[datetime] = None) -> Token:
        return self.issue(employee_id, self._permanent_ttl, kind=TokenKind.PERMANENT, now=now)

    def issue_registration(self, employee_id: int, *, now: Optional[datetime] = None) -> Token:
        return self.issue(employee_id, self._registration_ttl, kind=TokenKind.REGISTRATION, now=now)

    def issue_for_business(
        self,
        *,
        business_id: int,
        week_start_date: date,
        week_end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
        now: Optional[datetime] = None,
    ) -> BulkIssueResult:
        require_date_range(week_start_date, week_end_date)
        now = now or now_utc()

        employees = self._employees.list_active(business_id=int(business_id), employee_ids=employee_ids)
        if not employees:
            raise ValidationError("No active employees found")

        issued: list[IssuedToken] = []
        failures: list[IssueFailure] = []
        for employee in employees:
            try:
                token = self.issue_weekly(
                    employee.employee_id,
                    week_start_date=week_start_date,
                    week_end_date=week_end_date,
                    now=now,
                )
            except (IssuanceError, ValidationError) as e:
                failures.append(IssueFailure(employee=employee, error=str(e)))
                continue
            issued.append(IssuedToken(employee=employee, token=token))

        logger.info(
            "Bulk token generation for business %s week %s..%s: %s issued, %s failed",
            business_id,
            week_start_date,
            week_end_date,
            len(issued),
            len(failures),
        )
        return BulkIssueResult(
            business_id=int(business_id),
            week_start_date=week_start_date,
            week_end_date=week_end_date,
            issued=tuple(issued),
            failures=tuple(failures),
        )

    def revoke(
        self,
        token_value: str,
        *,
        business_id: int,
        revoked_by: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> None:
        token = self._tokens.get_by_value((token_value or "").strip())
        if not token or token.business_id != int(business_id):
            raise ValidationError("Token not found")
        if token.is_used:
            raise ValidationError("Token has already been used")

        if not self._tokens.mark_used(
            token_id=token.token_id,
            used_at=now or now_utc(),
            submitted_data=RevokedData(revoked_by=revoked_by),
        ):
            raise ValidationError("Token has already been used")
        logger.info("Revoked token %s", token.short_value)
