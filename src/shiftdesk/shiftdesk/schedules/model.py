from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Sequence

from ..common.datetime_utils import fmt_clock
from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class ScheduledShift:
    """A concrete date/time/branch slot; ``employee_id`` is None while unassigned."""

    shift_id: int
    business_id: int
    branch_id: int
    shift_date: date
    start_time: time
    end_time: time
    employee_id: Optional[int] = None
    status: ShiftStatus = ShiftStatus.PENDING
    is_archived: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "business_id": self.business_id,
            "branch_id": self.branch_id,
            "employee_id": self.employee_id,
            "shift_date": self.shift_date.isoformat(),
            "start_time": fmt_clock(self.start_time),
            "end_time": fmt_clock(self.end_time),
            "status": self.status.value,
            "is_archived": self.is_archived,
        }


@dataclass(frozen=True)
class NewScheduledShift:
    business_id: int
    branch_id: int
    shift_date: date
    start_time: time
    end_time: time
    employee_id: Optional[int] = None


@dataclass(frozen=True)
class ConflictContext:
    """What the manager sees before confirming a double booking."""

    employee_id: int
    employee_name: str
    shift_date: date
    branch_id: int
    branch_name: str
    conflicting_shifts: Sequence[ScheduledShift]
    proposed_time: str

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "date": self.shift_date.isoformat(),
            "branchId": self.branch_id,
            "branchName": self.branch_name,
            "conflictingShifts": [
                {"id": s.shift_id, "start_time": fmt_clock(s.start_time), "end_time": fmt_clock(s.end_time)}
                for s in self.conflicting_shifts
            ],
            "currentShiftTime": self.proposed_time,
        }


@dataclass(frozen=True)
class OverrideDecision:
    accepted: bool


@dataclass(frozen=True)
class SkippedDay:
    shift_date: date
    conflicts: Sequence[ScheduledShift]


@dataclass(frozen=True)
class BulkCreateResult:
    created: Sequence[ScheduledShift]
    skipped: Sequence[SkippedDay]
