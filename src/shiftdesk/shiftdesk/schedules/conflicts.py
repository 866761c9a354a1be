from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..branches.repository import BranchRepository
from ..common.datetime_utils import fmt_clock
from ..employees.repository import EmployeeRepository
from .model import ConflictContext, ScheduledShift
from .repository import ScheduleRepository


class ConflictDetector:
    """Same date + same branch counts as a conflict, whatever the hours."""

    def __init__(self, schedules: ScheduleRepository, employees: EmployeeRepository, branches: BranchRepository):
        self._schedules = schedules
        self._employees = employees
        self._branches = branches

    def find_conflicts(
        self,
        employee_id: int,
        shift_date: date,
        branch_id: int,
        *,
        exclude_shift_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        return list(
            self._schedules.find_for_employee_on(
                employee_id=int(employee_id),
                shift_date=shift_date,
                branch_id=int(branch_id),
                exclude_shift_id=exclude_shift_id,
            )
        )

    def build_context(
        self,
        *,
        employee_id: int,
        shift_date: date,
        branch_id: int,
        start_time: time,
        end_time: time,
        conflicts: Sequence[ScheduledShift],
    ) -> ConflictContext:
        employee = self._employees.get_by_id(int(employee_id))
        branch = self._branches.get_by_id(int(branch_id))
        return ConflictContext(
            employee_id=int(employee_id),
            employee_name=employee.full_name if employee else "",
            shift_date=shift_date,
            branch_id=int(branch_id),
            branch_name=branch.name if branch else "",
            conflicting_shifts=tuple(conflicts),
            proposed_time=f"{fmt_clock(start_time)}-{fmt_clock(end_time)}",
        )
