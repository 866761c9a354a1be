from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..tokens.payloads import SubmittedData
from .model import NewShiftSubmission, ShiftRequest, ShiftSlot, ShiftSubmission


class SubmissionRepository(Protocol):
    def find_for_week(self, *, employee_id: int, week_start_date: date, week_end_date: date) -> Optional[ShiftSubmission]:
        raise NotImplementedError

    def create_consuming_token(
        self,
        *,
        token_id: int,
        submission: NewShiftSubmission,
        submitted_data: SubmittedData,
        now: datetime,
    ) -> Optional[ShiftSubmission]:
        """Mark the token used and store the submission as one unit.

        Returns None (and writes nothing) when the token was already used.
        """

        raise NotImplementedError

    def create_request_consuming_token(
        self,
        *,
        token_id: int,
        employee_id: int,
        slot: ShiftSlot,
        submitted_data: SubmittedData,
        now: datetime,
    ) -> Optional[ShiftRequest]:
        """Same contract as ``create_consuming_token`` for a single shift request."""

        raise NotImplementedError

    def list_for_week(self, *, business_id: int, week_start_date: date, week_end_date: date) -> Sequence[dict]:
        """Per-employee submission overview for the admin dashboard."""

        raise NotImplementedError
