from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Optional, Sequence

from ..common.datetime_utils import fmt_clock, parse_clock, parse_iso_date
from ..core.enums import ShiftStatus, SubmissionBlockReason, SubmissionStatus


@dataclass(frozen=True)
class ShiftSlot:
    """One requested shift inside a submission."""

    shift_date: date
    start_time: time
    end_time: time
    branch_preference: str = ""
    role_preference: Optional[str] = None
    notes: Optional[str] = None
    available_shift_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "date": self.shift_date.isoformat(),
            "start_time": fmt_clock(self.start_time),
            "end_time": fmt_clock(self.end_time),
            "branch_preference": self.branch_preference,
            "role_preference": self.role_preference,
            "notes": self.notes,
            "available_shift_id": self.available_shift_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShiftSlot":
        available = data.get("available_shift_id")
        return cls(
            shift_date=parse_iso_date(str(data.get("date") or data.get("shift_date") or "")),
            start_time=parse_clock(str(data.get("start_time") or "")),
            end_time=parse_clock(str(data.get("end_time") or "")),
            branch_preference=str(data.get("branch_preference") or ""),
            role_preference=data.get("role_preference") or None,
            notes=data.get("notes") or None,
            available_shift_id=int(available) if available else None,
        )


@dataclass(frozen=True)
class ShiftSubmission:
    submission_id: int
    employee_id: int
    token_id: Optional[int]
    week_start_date: date
    week_end_date: date
    shifts: Sequence[ShiftSlot]
    status: SubmissionStatus
    submitted_at: datetime
    notes: Optional[str] = None
    optional_morning_availability: Sequence[int] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.submission_id,
            "employee_id": self.employee_id,
            "week_start_date": self.week_start_date.isoformat(),
            "week_end_date": self.week_end_date.isoformat(),
            "shifts": [s.to_dict() for s in self.shifts],
            "notes": self.notes,
            "optional_morning_availability": list(self.optional_morning_availability),
            "status": self.status.value,
            "submitted_at": self.submitted_at.isoformat(),
        }


@dataclass(frozen=True)
class NewShiftSubmission:
    employee_id: int
    week_start_date: date
    week_end_date: date
    shifts: Sequence[ShiftSlot]
    notes: Optional[str] = None
    optional_morning_availability: Sequence[int] = field(default_factory=tuple)


@dataclass(frozen=True)
class ShiftRequest:
    """A single shift request written by the token consumption endpoint."""

    request_id: int
    employee_id: int
    token_id: Optional[int]
    slot: ShiftSlot
    status: ShiftStatus
    created_at: datetime


@dataclass(frozen=True)
class SubmissionDecision:
    allowed: bool
    reason: Optional[SubmissionBlockReason]
    has_submitted: bool
    is_schedule_published: bool
