from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ..core.enums import TokenKind
from .model import NewToken, Token
from .payloads import SubmittedData


class TokenRepository(Protocol):
    def insert(self, new_token: NewToken) -> Token:
        """Persist a token.

        Raises IssuanceError when ``token_value`` is already taken.
        """

        raise NotImplementedError

    def get_by_value(self, token_value: str) -> Optional[Token]:
        raise NotImplementedError

    def find_usable(
        self,
        *,
        employee_id: int,
        kind: TokenKind,
        now: datetime,
        week_start_date: Optional[date] = None,
        week_end_date: Optional[date] = None,
    ) -> Optional[Token]:
        """Most recent unused, unexpired token of this kind (and week) for the employee."""

        raise NotImplementedError

    def mark_used(self, *, token_id: int, used_at: datetime, submitted_data: Optional[SubmittedData]) -> bool:
        """Flip ``is_used`` only if it is still False. Returns True for the caller that flipped it."""

        raise NotImplementedError
