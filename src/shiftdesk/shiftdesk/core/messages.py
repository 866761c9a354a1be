"""User-facing messages returned by the JSON endpoints."""

from __future__ import annotations

from .enums import SubmissionBlockReason, TokenRejectionReason

TOKEN_REJECTION_MESSAGES = {
    TokenRejectionReason.NOT_FOUND: "The link is invalid or has expired",
    TokenRejectionReason.USED: "This link has already been used",
    TokenRejectionReason.EXPIRED: "The link is invalid or has expired",
}

SUBMISSION_BLOCK_MESSAGES = {
    SubmissionBlockReason.ALREADY_SUBMITTED: "You have already submitted your shifts for this week",
    SubmissionBlockReason.SCHEDULE_PUBLISHED: "The schedule for this week has been published; submissions are closed",
}

GENERIC_FAILURE = "Something went wrong, please try again later"
