from __future__ import annotations

from typing import TYPE_CHECKING

from .enums import SubmissionBlockReason, TokenRejectionReason

if TYPE_CHECKING:
    from ..schedules.model import ConflictContext


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class IssuanceError(DomainError):
    """Raised when a token could not be created."""


class TokenRejected(DomainError):
    """Raised when a token is unknown, already used or expired."""

    def __init__(self, reason: TokenRejectionReason):
        super().__init__(f"Token rejected: {reason.value}")
        self.reason = reason


class SubmissionBlocked(DomainError):
    """Raised when the week no longer accepts submissions for an employee."""

    def __init__(self, reason: SubmissionBlockReason):
        super().__init__(f"Submission blocked: {reason.value}")
        self.reason = reason


class ConflictDetected(DomainError):
    """The employee already holds a shift on that date at that branch.

    Not a failure: the assignment may proceed once a manager confirms it.
    """

    def __init__(self, context: "ConflictContext"):
        super().__init__("Employee already assigned on this date at this branch")
        self.context = context


class OverrideRejected(DomainError):
    """Raised when the manager code does not match."""
