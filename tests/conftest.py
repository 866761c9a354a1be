from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.shiftdesk.shiftdesk.branches.model import Branch
from src.shiftdesk.shiftdesk.container import wire_services
from src.shiftdesk.shiftdesk.core.enums import ShiftStatus, SubmissionStatus
from src.shiftdesk.shiftdesk.core.exceptions import IssuanceError
from src.shiftdesk.shiftdesk.employees.model import Employee
from src.shiftdesk.shiftdesk.schedules.model import ScheduledShift
from src.shiftdesk.shiftdesk.submissions.model import ShiftRequest, ShiftSubmission
from src.shiftdesk.shiftdesk.tokens.model import Token

MANAGER_CODE = "4321"


class InMemoryEmployees:
    def __init__(self, employees):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(int(employee_id))

    def list_active(self, *, business_id, employee_ids=None):
        out = [e for e in self._by_id.values() if e.business_id == business_id and e.is_assignable]
        if employee_ids:
            wanted = {int(i) for i in employee_ids}
            out = [e for e in out if e.employee_id in wanted]
        return sorted(out, key=lambda e: (e.first_name, e.last_name))


class InMemoryBranches:
    def __init__(self, branches):
        self._by_id = {b.branch_id: b for b in branches}

    def get_by_id(self, branch_id: int) -> Optional[Branch]:
        return self._by_id.get(int(branch_id))


class InMemoryTokens:
    def __init__(self):
        self._by_id: dict[int, Token] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.insert_calls = 0

    def insert(self, new_token) -> Token:
        self.insert_calls += 1
        if any(t.token_value == new_token.token_value for t in self._by_id.values()):
            raise IssuanceError("Duplicate token value")
        token = Token(
            token_id=self._next_id,
            employee_id=new_token.employee_id,
            business_id=new_token.business_id,
            token_value=new_token.token_value,
            kind=new_token.kind,
            created_at=new_token.created_at,
            expires_at=new_token.expires_at,
            week_start_date=new_token.week_start_date,
            week_end_date=new_token.week_end_date,
        )
        self._by_id[token.token_id] = token
        self._next_id += 1
        return token

    def get_by_value(self, token_value: str) -> Optional[Token]:
        for t in self._by_id.values():
            if t.token_value == token_value:
                return t
        return None

    def find_usable(self, *, employee_id, kind, now, week_start_date=None, week_end_date=None):
        for t in sorted(self._by_id.values(), key=lambda t: t.created_at, reverse=True):
            if t.employee_id != employee_id or t.kind != kind or not t.is_usable(now):
                continue
            if week_start_date is not None and (t.week_start_date, t.week_end_date) != (week_start_date, week_end_date):
                continue
            return t
        return None

    def mark_used(self, *, token_id, used_at, submitted_data) -> bool:
        with self._lock:
            token = self._by_id.get(token_id)
            if token is None or token.is_used:
                return False
            self._by_id[token_id] = replace(token, is_used=True, used_at=used_at, submitted_data=submitted_data)
            return True

    def all(self):
        return list(self._by_id.values())


class InMemorySubmissions:
    """Consumes the token first and stores only when that succeeded."""

    def __init__(self, tokens: InMemoryTokens, employees: InMemoryEmployees):
        self._tokens = tokens
        self._employees = employees
        self.submissions: list[ShiftSubmission] = []
        self.requests: list[ShiftRequest] = []

    def find_for_week(self, *, employee_id, week_start_date, week_end_date):
        for s in self.submissions:
            if (s.employee_id, s.week_start_date, s.week_end_date) == (employee_id, week_start_date, week_end_date):
                return s
        return None

    def create_consuming_token(self, *, token_id, submission, submitted_data, now):
        if not self._tokens.mark_used(token_id=token_id, used_at=now, submitted_data=submitted_data):
            return None
        stored = ShiftSubmission(
            submission_id=len(self.submissions) + 1,
            employee_id=submission.employee_id,
            token_id=token_id,
            week_start_date=submission.week_start_date,
            week_end_date=submission.week_end_date,
            shifts=tuple(submission.shifts),
            status=SubmissionStatus.SUBMITTED,
            submitted_at=now,
            notes=submission.notes,
            optional_morning_availability=tuple(submission.optional_morning_availability),
        )
        self.submissions.append(stored)
        return stored

    def create_request_consuming_token(self, *, token_id, employee_id, slot, submitted_data, now):
        if not self._tokens.mark_used(token_id=token_id, used_at=now, submitted_data=submitted_data):
            return None
        stored = ShiftRequest(
            request_id=len(self.requests) + 1,
            employee_id=employee_id,
            token_id=token_id,
            slot=slot,
            status=ShiftStatus.PENDING,
            created_at=now,
        )
        self.requests.append(stored)
        return stored

    def list_for_week(self, *, business_id, week_start_date, week_end_date):
        out = []
        for e in self._employees.list_active(business_id=business_id):
            s = self.find_for_week(employee_id=e.employee_id, week_start_date=week_start_date, week_end_date=week_end_date)
            out.append(
                {
                    "employee_id": e.employee_id,
                    "employee_name": e.full_name,
                    "employee_code": e.employee_code,
                    "has_submitted": s is not None,
                    "submission_id": s.submission_id if s else None,
                    "submitted_at": s.submitted_at.strftime("%Y-%m-%d %H:%M") if s else None,
                    "status": s.status.value if s else None,
                }
            )
        return out


class InMemorySchedules:
    def __init__(self):
        self.shifts: dict[int, ScheduledShift] = {}
        self._next_id = 1

    def add(self, **kwargs) -> ScheduledShift:
        shift = ScheduledShift(shift_id=self._next_id, **kwargs)
        self.shifts[shift.shift_id] = shift
        self._next_id += 1
        return shift

    def get_by_id(self, shift_id):
        return self.shifts.get(int(shift_id))

    def find_for_employee_on(self, *, employee_id, shift_date, branch_id, exclude_shift_id=None):
        return [
            s
            for s in self.shifts.values()
            if s.employee_id == employee_id
            and s.shift_date == shift_date
            and s.branch_id == branch_id
            and not s.is_archived
            and s.shift_id != exclude_shift_id
        ]

    def has_approved_in_range(self, *, business_id, start, end):
        return any(
            s.business_id == business_id and start <= s.shift_date <= end and s.status == ShiftStatus.APPROVED
            for s in self.shifts.values()
        )

    def create(self, new_shift) -> ScheduledShift:
        return self.add(
            business_id=new_shift.business_id,
            branch_id=new_shift.branch_id,
            shift_date=new_shift.shift_date,
            start_time=new_shift.start_time,
            end_time=new_shift.end_time,
            employee_id=new_shift.employee_id,
        )

    def assign_employee(self, *, shift_id, employee_id) -> bool:
        shift = self.shifts.get(shift_id)
        if not shift or shift.is_archived:
            return False
        self.shifts[shift_id] = replace(shift, employee_id=employee_id)
        return True

    def archive(self, *, shift_id) -> bool:
        shift = self.shifts.get(shift_id)
        if not shift:
            return False
        self.shifts[shift_id] = replace(shift, is_archived=True)
        return True

    def publish_range(self, *, business_id, start, end) -> int:
        count = 0
        for s in list(self.shifts.values()):
            if (
                s.business_id == business_id
                and start <= s.shift_date <= end
                and s.status == ShiftStatus.PENDING
                and s.employee_id is not None
                and not s.is_archived
            ):
                self.shifts[s.shift_id] = replace(s, status=ShiftStatus.APPROVED)
                count += 1
        return count

    def list_range(self, *, business_id, start, end, employee_id=None, branch_id=None, unassigned_only=False):
        out = [
            s
            for s in self.shifts.values()
            if s.business_id == business_id and start <= s.shift_date <= end and not s.is_archived
        ]
        if employee_id is not None:
            out = [s for s in out if s.employee_id == employee_id]
        if branch_id is not None:
            out = [s for s in out if s.branch_id == branch_id]
        if unassigned_only:
            out = [s for s in out if s.employee_id is None]
        return sorted(out, key=lambda s: (s.shift_date, s.start_time))


@pytest.fixture
def employees_repo():
    return InMemoryEmployees(
        [
            Employee(employee_id=1, business_id=10, first_name="Alice", last_name="Nguyen"),
            Employee(employee_id=2, business_id=10, first_name="Bao", last_name="Tran"),
            Employee(employee_id=3, business_id=10, first_name="Chi", last_name="Le", is_active=False),
            Employee(employee_id=4, business_id=20, first_name="Dan", last_name="Pham"),
        ]
    )


@pytest.fixture
def branches_repo():
    return InMemoryBranches(
        [
            Branch(branch_id=1, business_id=10, name="Main Street"),
            Branch(branch_id=2, business_id=10, name="Harbor"),
            Branch(branch_id=3, business_id=20, name="Elsewhere"),
        ]
    )


@pytest.fixture
def tokens_repo():
    return InMemoryTokens()


@pytest.fixture
def submissions_repo(tokens_repo, employees_repo):
    return InMemorySubmissions(tokens_repo, employees_repo)


@pytest.fixture
def schedules_repo():
    return InMemorySchedules()


@pytest.fixture
def container(employees_repo, branches_repo, tokens_repo, submissions_repo, schedules_repo):
    return wire_services(
        employees_repo=employees_repo,
        branches_repo=branches_repo,
        tokens_repo=tokens_repo,
        submissions_repo=submissions_repo,
        schedules_repo=schedules_repo,
        manager_code_hash=generate_password_hash(MANAGER_CODE),
    )


@pytest.fixture
def manager_code():
    return MANAGER_CODE
