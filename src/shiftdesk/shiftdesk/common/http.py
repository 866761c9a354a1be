"""Helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictDetected,
    DomainError,
    IssuanceError,
    OverrideRejected,
    SubmissionBlocked,
    TokenRejected,
    ValidationError,
)
from ..core.messages import GENERIC_FAILURE, SUBMISSION_BLOCK_MESSAGES, TOKEN_REJECTION_MESSAGES
from .datetime_utils import parse_clock, parse_iso_date

logger = logging.getLogger(__name__)

ADMIN_ROLES = {Role.ADMIN.value, Role.MANAGER.value}


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "unauthenticated"}), 401
        if session.get("role") not in ADMIN_ROLES or "business_id" not in session:
            return jsonify({"success": False, "error": "forbidden"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_business_id() -> int:
    """The tenant selected for this session; passed explicitly to services."""
    return int(session["business_id"])


def current_user_id() -> Optional[int]:
    return int(session["user_id"]) if "user_id" in session else None


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_field(data: dict, *names: str, required: bool = True) -> Optional[date]:
    for name in names:
        if data.get(name):
            try:
                return parse_iso_date(str(data[name]))
            except ValueError:
                raise ValidationError(f"{name} must be YYYY-MM-DD")
    if required:
        raise ValidationError(f"{names[0]} is required")
    return None


def clock_field(data: dict, name: str):
    try:
        return parse_clock(str(data.get(name) or ""))
    except ValueError:
        raise ValidationError(f"{name} must be HH:MM")


def int_field(data: dict, name: str, *, required: bool = True) -> Optional[int]:
    value = data.get(name)
    if value in (None, ""):
        if required:
            raise ValidationError(f"{name} is required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")


def error_response(e: DomainError) -> tuple[Any, int]:
    if isinstance(e, TokenRejected):
        return jsonify({"success": False, "error": e.reason.value, "message": TOKEN_REJECTION_MESSAGES[e.reason]}), 401
    if isinstance(e, SubmissionBlocked):
        return jsonify({"success": False, "error": e.reason.value, "message": SUBMISSION_BLOCK_MESSAGES[e.reason]}), 409
    if isinstance(e, ConflictDetected):
        return jsonify({"success": False, "error": "conflict", "message": str(e), "conflict": e.context.to_dict()}), 409
    if isinstance(e, OverrideRejected):
        return jsonify({"success": False, "error": "override_rejected", "message": str(e)}), 403
    if isinstance(e, AuthorizationError):
        return jsonify({"success": False, "error": "forbidden", "message": str(e)}), 403
    if isinstance(e, IssuanceError):
        logger.warning("Token issuance failed: %s", e)
        return jsonify({"success": False, "error": "issuance_failed", "message": GENERIC_FAILURE}), 500
    return jsonify({"success": False, "error": "invalid", "message": str(e)}), 400


def unexpected_error_response(action: str) -> tuple[Any, int]:
    logger.exception("Unexpected error while %s", action)
    return jsonify({"success": False, "error": "internal", "message": GENERIC_FAILURE}), 500
