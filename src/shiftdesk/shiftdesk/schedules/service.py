from __future__ import annotations

import logging
from datetime import date, time
from typing import Callable, Optional, Sequence

from ..branches.repository import BranchRepository
from ..common.datetime_utils import iter_days
from ..common.validators import require_date_range, require_positive_id
from ..core.constants import MAX_BULK_SHIFT_DAYS
from ..core.exceptions import ConflictDetected, OverrideRejected, ValidationError
from ..employees.repository import EmployeeRepository
from .conflicts import ConflictDetector
from .model import BulkCreateResult, NewScheduledShift, ScheduledShift, SkippedDay
from .override import ManagerOverrideFlow
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class AssignmentService:
    """Use case: admins place employees on shifts.

    Every write that puts an employee on a shift runs the conflict check
    first. With a conflict the caller gets ``ConflictDetected`` unless it
    brings a manager code, which then goes through a fresh override flow.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        employees: EmployeeRepository,
        branches: BranchRepository,
        detector: ConflictDetector,
        override_flow_factory: Callable[[], ManagerOverrideFlow],
    ):
        self._schedules = schedules
        self._employees = employees
        self._branches = branches
        self._detector = detector
        self._override_flow_factory = override_flow_factory

    def _get_shift(self, business_id: int, shift_id: int) -> ScheduledShift:
        shift = self._schedules.get_by_id(require_positive_id(shift_id, "Shift"))
        if not shift or shift.business_id != int(business_id):
            raise ValidationError("Shift not found")
        if shift.is_archived:
            raise ValidationError("Shift is archived")
        return shift

    def _check_employee(self, business_id: int, employee_id: int) -> None:
        employee = self._employees.get_by_id(require_positive_id(employee_id, "Employee"))
        if not employee or employee.business_id != int(business_id):
            raise ValidationError("Employee not found")
        if not employee.is_assignable:
            raise ValidationError("Employee is not active")

    def _check_branch(self, business_id: int, branch_id: int) -> None:
        branch = self._branches.get_by_id(require_positive_id(branch_id, "Branch"))
        if not branch or branch.business_id != int(business_id):
            raise ValidationError("Branch not found")

    def _guard_conflicts(
        self,
        *,
        employee_id: int,
        shift_date: date,
        branch_id: int,
        start_time: time,
        end_time: time,
        manager_code: Optional[str],
        exclude_shift_id: Optional[int] = None,
    ) -> bool:
        """Returns True when the write goes ahead on a manager override."""
        conflicts = self._detector.find_conflicts(
            employee_id,
            shift_date,
            branch_id,
            exclude_shift_id=exclude_shift_id,
        )
        if not conflicts:
            return False

        context = self._detector.build_context(
            employee_id=employee_id,
            shift_date=shift_date,
            branch_id=branch_id,
            start_time=start_time,
            end_time=end_time,
            conflicts=conflicts,
        )
        if not (manager_code or "").strip():
            raise ConflictDetected(context)

        flow = self._override_flow_factory()
        flow.request_override(context)
        decision = flow.confirm(manager_code)
        flow.reset()
        if not decision.accepted:
            raise OverrideRejected("Manager code is incorrect")
        return True

    def assign(
        self,
        *,
        business_id: int,
        shift_id: int,
        employee_id: int,
        manager_code: Optional[str] = None,
    ) -> ScheduledShift:
        shift = self._get_shift(business_id, shift_id)
        self._check_employee(business_id, employee_id)

        overridden = self._guard_conflicts(
            employee_id=int(employee_id),
            shift_date=shift.shift_date,
            branch_id=shift.branch_id,
            start_time=shift.start_time,
            end_time=shift.end_time,
            manager_code=manager_code,
            exclude_shift_id=shift.shift_id,
        )

        if not self._schedules.assign_employee(shift_id=shift.shift_id, employee_id=int(employee_id)):
            raise ValidationError("Assigning the shift failed")

        logger.info(
            "Employee %s assigned to shift %s on %s%s",
            employee_id,
            shift.shift_id,
            shift.shift_date,
            " (manager override)" if overridden else "",
        )
        return self._get_shift(business_id, shift.shift_id)

    def unassign(self, *, business_id: int, shift_id: int) -> None:
        shift = self._get_shift(business_id, shift_id)
        if not self._schedules.assign_employee(shift_id=shift.shift_id, employee_id=None):
            raise ValidationError("Unassigning the shift failed")

    def archive(self, *, business_id: int, shift_id: int) -> None:
        shift = self._get_shift(business_id, shift_id)
        if not self._schedules.archive(shift_id=shift.shift_id):
            raise ValidationError("Archiving the shift failed")

    def create_shift(
        self,
        *,
        business_id: int,
        branch_id: int,
        shift_date: date,
        start_time: time,
        end_time: time,
        employee_id: Optional[int] = None,
        manager_code: Optional[str] = None,
    ) -> ScheduledShift:
        if start_time == end_time:
            raise ValidationError("Shift start and end time must differ")
        self._check_branch(business_id, branch_id)

        if employee_id is not None:
            self._check_employee(business_id, employee_id)
            self._guard_conflicts(
                employee_id=int(employee_id),
                shift_date=shift_date,
                branch_id=int(branch_id),
                start_time=start_time,
                end_time=end_time,
                manager_code=manager_code,
            )

        return self._schedules.create(
            NewScheduledShift(
                business_id=int(business_id),
                branch_id=int(branch_id),
                shift_date=shift_date,
                start_time=start_time,
                end_time=end_time,
                employee_id=int(employee_id) if employee_id is not None else None,
            )
        )

    def bulk_create(
        self,
        *,
        business_id: int,
        branch_id: int,
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        weekdays: Optional[Sequence[int]] = None,
        employee_id: Optional[int] = None,
    ) -> BulkCreateResult:
        """Create one shift per selected day; ``weekdays`` uses 0=Sunday..6=Saturday.

        Days that would double-book the employee are skipped and reported.
        """
        require_date_range(start_date, end_date)
        if (end_date - start_date).days > MAX_BULK_SHIFT_DAYS:
            raise ValidationError("Date range is too long")
        if start_time == end_time:
            raise ValidationError("Shift start and end time must differ")
        self._check_branch(business_id, branch_id)
        if employee_id is not None:
            self._check_employee(business_id, employee_id)

        days = set(int(d) for d in weekdays) if weekdays else None
        created: list[ScheduledShift] = []
        skipped: list[SkippedDay] = []
        for day in iter_days(start_date, end_date):
            if days is not None and (day.weekday() + 1) % 7 not in days:
                continue
            if employee_id is not None:
                conflicts = self._detector.find_conflicts(employee_id, day, branch_id)
                if conflicts:
                    skipped.append(SkippedDay(shift_date=day, conflicts=tuple(conflicts)))
                    continue
            created.append(
                self._schedules.create(
                    NewScheduledShift(
                        business_id=int(business_id),
                        branch_id=int(branch_id),
                        shift_date=day,
                        start_time=start_time,
                        end_time=end_time,
                        employee_id=int(employee_id) if employee_id is not None else None,
                    )
                )
            )

        logger.info(
            "Bulk shift creation for branch %s %s..%s: %s created, %s skipped",
            branch_id,
            start_date,
            end_date,
            len(created),
            len(skipped),
        )
        return BulkCreateResult(created=tuple(created), skipped=tuple(skipped))

    def publish_week(self, *, business_id: int, week_start_date: date, week_end_date: date) -> int:
        require_date_range(week_start_date, week_end_date)
        count = self._schedules.publish_range(business_id=int(business_id), start=week_start_date, end=week_end_date)
        logger.info("Published %s shifts for business %s week %s..%s", count, business_id, week_start_date, week_end_date)
        return count

    def list_range(
        self,
        *,
        business_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        branch_id: Optional[int] = None,
    ) -> Sequence[ScheduledShift]:
        require_date_range(start, end)
        return self._schedules.list_range(
            business_id=int(business_id),
            start=start,
            end=end,
            employee_id=employee_id,
            branch_id=branch_id,
        )

    def list_open(self, *, business_id: int, start: date, end: date) -> Sequence[ScheduledShift]:
        """Unassigned, non-archived shifts an employee can pick from."""
        require_date_range(start, end)
        return self._schedules.list_range(business_id=int(business_id), start=start, end=end, unassigned_only=True)
