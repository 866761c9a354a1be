from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc, week_bounds
from ..common.validators import require_date_range
from ..core.enums import SubmissionBlockReason, TokenKind, TokenRejectionReason
from ..core.exceptions import SubmissionBlocked, TokenRejected, ValidationError
from ..schedules.repository import ScheduleRepository
from ..tokens.payloads import ShiftRequestData, WeeklySubmissionData
from ..tokens.validator import TokenValidator
from .model import NewShiftSubmission, ShiftRequest, ShiftSlot, ShiftSubmission, SubmissionDecision
from .repository import SubmissionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionStatusView:
    week_start_date: date
    week_end_date: date
    decision: SubmissionDecision

    def to_dict(self) -> dict:
        d = self.decision
        return {
            "canSubmit": d.allowed,
            "isBlocked": not d.allowed,
            "blockReason": d.reason.value if d.reason else None,
            "hasSubmitted": d.has_submitted,
            "isSchedulePublished": d.is_schedule_published,
            "weekStart": self.week_start_date.isoformat(),
            "weekEnd": self.week_end_date.isoformat(),
        }


class ShiftSubmissionGuard:
    """Use case: accept an employee's shift submission through a token.

    The "already submitted" and "schedule published" checks are plain reads
    without locks. Two submissions for the same employee and week made through
    two different tokens at the same moment can both pass them and both be
    stored. A single token is consumed at most once: the consume step is a
    conditional update in the same transaction as the insert.
    """

    def __init__(self, validator: TokenValidator, submissions: SubmissionRepository, schedules: ScheduleRepository):
        self._validator = validator
        self._submissions = submissions
        self._schedules = schedules

    def can_submit(
        self,
        *,
        employee_id: int,
        business_id: int,
        week_start_date: date,
        week_end_date: date,
    ) -> SubmissionDecision:
        existing = self._submissions.find_for_week(
            employee_id=int(employee_id),
            week_start_date=week_start_date,
            week_end_date=week_end_date,
        )
        published = self._schedules.has_approved_in_range(
            business_id=int(business_id),
            start=week_start_date,
            end=week_end_date,
        )

        reason: Optional[SubmissionBlockReason] = None
        if existing:
            reason = SubmissionBlockReason.ALREADY_SUBMITTED
        elif published:
            reason = SubmissionBlockReason.SCHEDULE_PUBLISHED

        return SubmissionDecision(
            allowed=reason is None,
            reason=reason,
            has_submitted=existing is not None,
            is_schedule_published=published,
        )

    def submission_status(
        self,
        token_value: str,
        *,
        week_start_date: Optional[date] = None,
        week_end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> SubmissionStatusView:
        validated = self._validator.validate(token_value, now=now)
        token = validated.token

        if week_start_date is None or week_end_date is None:
            if token.week_start_date is None or token.week_end_date is None:
                raise ValidationError("Week is required for this token")
            week_start_date, week_end_date = token.week_start_date, token.week_end_date
        require_date_range(week_start_date, week_end_date)
        if token.kind == TokenKind.WEEKLY and (
            token.week_start_date != week_start_date or token.week_end_date != week_end_date
        ):
            raise ValidationError("This link does not match the requested week")

        decision = self.can_submit(
            employee_id=validated.employee_id,
            business_id=validated.business_id,
            week_start_date=week_start_date,
            week_end_date=week_end_date,
        )
        return SubmissionStatusView(week_start_date=week_start_date, week_end_date=week_end_date, decision=decision)

    def submit_week(
        self,
        token_value: str,
        *,
        week_start_date: date,
        week_end_date: date,
        shifts: Sequence[ShiftSlot],
        notes: Optional[str] = None,
        optional_morning_availability: Sequence[int] = (),
        now: Optional[datetime] = None,
    ) -> ShiftSubmission:
        now = now or now_utc()
        validated = self._validator.validate(token_value, now=now)
        token = validated.token

        if token.kind != TokenKind.WEEKLY:
            raise ValidationError("This link cannot be used for a weekly submission")
        if token.week_start_date != week_start_date or token.week_end_date != week_end_date:
            raise ValidationError("This link does not match the requested week")

        self._check_slots(shifts, week_start_date, week_end_date)
        for day in optional_morning_availability:
            if not 0 <= int(day) <= 6:
                raise ValidationError("Morning availability days must be 0-6")

        decision = self.can_submit(
            employee_id=validated.employee_id,
            business_id=validated.business_id,
            week_start_date=week_start_date,
            week_end_date=week_end_date,
        )
        if not decision.allowed:
            raise SubmissionBlocked(decision.reason)

        note = (notes or "").strip() or None
        morning = tuple(int(d) for d in optional_morning_availability)
        submission = self._submissions.create_consuming_token(
            token_id=token.token_id,
            submission=NewShiftSubmission(
                employee_id=validated.employee_id,
                week_start_date=week_start_date,
                week_end_date=week_end_date,
                shifts=tuple(shifts),
                notes=note,
                optional_morning_availability=morning,
            ),
            submitted_data=WeeklySubmissionData(
                week_start_date=week_start_date.isoformat(),
                week_end_date=week_end_date.isoformat(),
                shifts=tuple(shifts),
                notes=note,
                optional_morning_availability=morning,
            ),
            now=now,
        )
        if submission is None:
            logger.info("Token %s was consumed concurrently; submission dropped", token.short_value)
            raise TokenRejected(TokenRejectionReason.USED)

        logger.info(
            "Weekly submission %s stored for employee %s (%s shifts, week %s..%s)",
            submission.submission_id,
            validated.employee_id,
            len(submission.shifts),
            week_start_date,
            week_end_date,
        )
        return submission

    def submit_shift_request(
        self,
        token_value: str,
        *,
        slot: ShiftSlot,
        now: Optional[datetime] = None,
    ) -> ShiftRequest:
        now = now or now_utc()
        validated = self._validator.validate(token_value, now=now)
        token = validated.token

        if token.kind != TokenKind.SHIFT:
            raise ValidationError("This link cannot be used for a shift request")

        week_start, week_end = week_bounds(slot.shift_date)
        self._check_slots([slot], week_start, week_end)

        decision = self.can_submit(
            employee_id=validated.employee_id,
            business_id=validated.business_id,
            week_start_date=week_start,
            week_end_date=week_end,
        )
        if not decision.allowed:
            raise SubmissionBlocked(decision.reason)

        request = self._submissions.create_request_consuming_token(
            token_id=token.token_id,
            employee_id=validated.employee_id,
            slot=slot,
            submitted_data=ShiftRequestData(slot=slot),
            now=now,
        )
        if request is None:
            logger.info("Token %s was consumed concurrently; shift request dropped", token.short_value)
            raise TokenRejected(TokenRejectionReason.USED)

        logger.info("Shift request %s stored for employee %s on %s", request.request_id, validated.employee_id, slot.shift_date)
        return request

    def list_week_overview(self, *, business_id: int, week_start_date: date, week_end_date: date):
        require_date_range(week_start_date, week_end_date)
        return self._submissions.list_for_week(
            business_id=int(business_id),
            week_start_date=week_start_date,
            week_end_date=week_end_date,
        )

    @staticmethod
    def _check_slots(shifts: Sequence[ShiftSlot], week_start: date, week_end: date) -> None:
        if not shifts:
            raise ValidationError("At least one shift is required")
        for slot in shifts:
            if not week_start <= slot.shift_date <= week_end:
                raise ValidationError(f"Shift on {slot.shift_date.isoformat()} is outside the week")
            if slot.start_time == slot.end_time:
                raise ValidationError("Shift start and end time must differ")
