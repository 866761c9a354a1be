from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_utc
from ..core.enums import TokenRejectionReason
from ..core.exceptions import TokenRejected
from ..employees.repository import EmployeeRepository
from .model import ValidatedToken
from .repository import TokenRepository

logger = logging.getLogger(__name__)


class TokenValidator:
    """Read-only token check. Never consumes the token."""

    def __init__(self, tokens: TokenRepository, employees: EmployeeRepository):
        self._tokens = tokens
        self._employees = employees

    def validate(self, token_value: str, *, now: Optional[datetime] = None) -> ValidatedToken:
        now = now or now_utc()
        value = (token_value or "").strip()

        token = self._tokens.get_by_value(value) if value else None
        if not token:
            raise TokenRejected(TokenRejectionReason.NOT_FOUND)
        if token.is_used:
            logger.info("Rejected used token %s", token.short_value)
            raise TokenRejected(TokenRejectionReason.USED)
        if token.is_expired(now):
            logger.info("Rejected expired token %s", token.short_value)
            raise TokenRejected(TokenRejectionReason.EXPIRED)

        employee = self._employees.get_by_id(token.employee_id)
        if not employee:
            # Dangling reference; treat the link as unknown.
            raise TokenRejected(TokenRejectionReason.NOT_FOUND)

        return ValidatedToken(token=token, employee=employee)

    def check(self, token_value: str, *, now: Optional[datetime] = None) -> Optional[TokenRejectionReason]:
        try:
            self.validate(token_value, now=now)
        except TokenRejected as e:
            return e.reason
        return None
