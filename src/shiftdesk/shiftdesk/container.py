from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .branches.mysql_branch_repository import MySQLBranchRepository
from .branches.repository import BranchRepository
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .schedules.conflicts import ConflictDetector
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.override import ManagerOverrideFlow
from .schedules.repository import ScheduleRepository
from .schedules.service import AssignmentService
from .submissions.guard import ShiftSubmissionGuard
from .submissions.mysql_submission_repository import MySQLSubmissionRepository
from .submissions.repository import SubmissionRepository
from .tokens.issuer import TokenIssuer
from .tokens.mysql_token_repository import MySQLTokenRepository
from .tokens.repository import TokenRepository
from .tokens.validator import TokenValidator


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    branches_repo: BranchRepository
    tokens_repo: TokenRepository
    submissions_repo: SubmissionRepository
    schedules_repo: ScheduleRepository

    token_issuer: TokenIssuer
    token_validator: TokenValidator
    submission_guard: ShiftSubmissionGuard
    conflict_detector: ConflictDetector
    assignment_service: AssignmentService


def wire_services(
    *,
    employees_repo: EmployeeRepository,
    branches_repo: BranchRepository,
    tokens_repo: TokenRepository,
    submissions_repo: SubmissionRepository,
    schedules_repo: ScheduleRepository,
    manager_code_hash: str = "",
    settings: Optional[Any] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of any repository implementations."""

    def setting(name: str):
        return getattr(settings, name, getattr(constants, name))

    token_issuer = TokenIssuer(
        tokens_repo,
        employees_repo,
        weekly_grace_days=int(setting("WEEKLY_TOKEN_GRACE_DAYS")),
        shift_ttl_hours=int(setting("SHIFT_TOKEN_TTL_HOURS")),
        permanent_days=int(setting("PERMANENT_TOKEN_DAYS")),
        registration_hours=int(setting("REGISTRATION_TOKEN_HOURS")),
    )
    token_validator = TokenValidator(tokens_repo, employees_repo)
    submission_guard = ShiftSubmissionGuard(token_validator, submissions_repo, schedules_repo)
    conflict_detector = ConflictDetector(schedules_repo, employees_repo, branches_repo)
    assignment_service = AssignmentService(
        schedules_repo,
        employees_repo,
        branches_repo,
        conflict_detector,
        override_flow_factory=lambda: ManagerOverrideFlow(manager_code_hash),
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        branches_repo=branches_repo,
        tokens_repo=tokens_repo,
        submissions_repo=submissions_repo,
        schedules_repo=schedules_repo,
        token_issuer=token_issuer,
        token_validator=token_validator,
        submission_guard=submission_guard,
        conflict_detector=conflict_detector,
        assignment_service=assignment_service,
    )


def build_container(*, db_config: dict, manager_code_hash: str = "", settings: Optional[Any] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        employees_repo=MySQLEmployeeRepository(conn),
        branches_repo=MySQLBranchRepository(conn),
        tokens_repo=MySQLTokenRepository(conn),
        submissions_repo=MySQLSubmissionRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        manager_code_hash=manager_code_hash,
        settings=settings,
        conn=conn,
    )
