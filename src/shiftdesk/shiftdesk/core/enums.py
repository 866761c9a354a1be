from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored in the session by the auth provider."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class TokenKind(str, Enum):
    WEEKLY = "weekly"
    SHIFT = "shift"
    PERMANENT = "permanent"
    REGISTRATION = "registration"


class TokenRejectionReason(str, Enum):
    NOT_FOUND = "not_found"
    USED = "used"
    EXPIRED = "expired"


class SubmissionBlockReason(str, Enum):
    ALREADY_SUBMITTED = "already_submitted"
    SCHEDULE_PUBLISHED = "schedule_published"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    REVIEWED = "reviewed"


class ShiftStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class OverrideState(str, Enum):
    IDLE = "idle"
    CONFLICT_DETECTED = "conflict_detected"
    AWAITING_CODE = "awaiting_code"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
