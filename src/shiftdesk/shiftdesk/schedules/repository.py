from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import NewScheduledShift, ScheduledShift


class ScheduleRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[ScheduledShift]:
        raise NotImplementedError

    def find_for_employee_on(
        self,
        *,
        employee_id: int,
        shift_date: date,
        branch_id: int,
        exclude_shift_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        """Non-archived shifts of the employee on that date at that branch."""

        raise NotImplementedError

    def has_approved_in_range(self, *, business_id: int, start: date, end: date) -> bool:
        raise NotImplementedError

    def create(self, new_shift: NewScheduledShift) -> ScheduledShift:
        raise NotImplementedError

    def assign_employee(self, *, shift_id: int, employee_id: Optional[int]) -> bool:
        """Set (or clear, with None) the employee of a non-archived shift."""

        raise NotImplementedError

    def archive(self, *, shift_id: int) -> bool:
        raise NotImplementedError

    def publish_range(self, *, business_id: int, start: date, end: date) -> int:
        """Approve pending, assigned shifts in the range. Returns the number approved."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        business_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        branch_id: Optional[int] = None,
        unassigned_only: bool = False,
    ) -> Sequence[ScheduledShift]:
        raise NotImplementedError
