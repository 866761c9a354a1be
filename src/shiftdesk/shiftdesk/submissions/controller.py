from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import next_week_bounds
from ..common.http import (
    admin_required,
    current_business_id,
    date_field,
    error_response,
    json_body,
    unexpected_error_response,
)
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .model import ShiftSlot


# Public forms post camelCase keys.
_SLOT_ALIASES = {
    "shiftDate": "date",
    "startTime": "start_time",
    "endTime": "end_time",
    "branchPreference": "branch_preference",
    "rolePreference": "role_preference",
    "availableShiftId": "available_shift_id",
}


def _parse_slot(raw) -> ShiftSlot:
    if not isinstance(raw, dict):
        raise ValidationError("Each shift must be an object")
    data = {_SLOT_ALIASES.get(k, k): v for k, v in raw.items()}
    try:
        return ShiftSlot.from_dict(data)
    except (TypeError, ValueError):
        raise ValidationError("Each shift needs a date (YYYY-MM-DD), start_time and end_time (HH:MM)")


def _token_from(data: dict) -> str:
    token = str(data.get("token") or "").strip()
    if not token:
        raise ValidationError("token is required")
    return token


def register(app: Flask, container: Container) -> None:
    @app.route("/api/submissions/status", methods=["POST"], endpoint="submissions_status")
    def submissions_status():
        try:
            data = json_body()
            view = container.submission_guard.submission_status(
                _token_from(data),
                week_start_date=date_field(data, "week_start_date", "weekStart", required=False),
                week_end_date=date_field(data, "week_end_date", "weekEnd", required=False),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("checking submission status")
        return jsonify({"success": True, **view.to_dict()})

    @app.route("/api/submissions/weekly", methods=["POST"], endpoint="submissions_weekly")
    def submissions_weekly():
        try:
            data = json_body()
            raw_shifts = data.get("shifts")
            if not isinstance(raw_shifts, list):
                raise ValidationError("shifts must be a list")
            morning = data.get("optional_morning_availability") or []
            if not isinstance(morning, list) or not all(isinstance(d, int) for d in morning):
                raise ValidationError("optional_morning_availability must be a list of weekday numbers")

            submission = container.submission_guard.submit_week(
                _token_from(data),
                week_start_date=date_field(data, "week_start_date", "weekStartDate"),
                week_end_date=date_field(data, "week_end_date", "weekEndDate"),
                shifts=[_parse_slot(s) for s in raw_shifts],
                notes=data.get("notes"),
                optional_morning_availability=morning,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("storing a weekly submission")
        return (
            jsonify({"success": True, "message": "Shifts submitted", "submission": submission.to_dict()}),
            201,
        )

    @app.route("/api/shift-requests", methods=["POST"], endpoint="shift_requests_create")
    def shift_requests_create():
        try:
            data = json_body()
            shift_request = container.submission_guard.submit_shift_request(
                _token_from(data),
                slot=_parse_slot(data.get("shift") or data),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("storing a shift request")
        return (
            jsonify(
                {
                    "success": True,
                    "request": {
                        "id": shift_request.request_id,
                        "employee_id": shift_request.employee_id,
                        "status": shift_request.status.value,
                        **shift_request.slot.to_dict(),
                    },
                }
            ),
            201,
        )

    @app.route("/api/submissions", methods=["GET"], endpoint="submissions_week_overview")
    @admin_required
    def submissions_week_overview():
        try:
            args = request.args.to_dict()
            week_start = date_field(args, "week_start_date", required=False)
            week_end = date_field(args, "week_end_date", required=False)
            if week_start is None or week_end is None:
                week_start, week_end = next_week_bounds()
            rows = container.submission_guard.list_week_overview(
                business_id=current_business_id(),
                week_start_date=week_start,
                week_end_date=week_end,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("listing weekly submissions")
        return jsonify(
            {
                "success": True,
                "week_start_date": week_start.isoformat(),
                "week_end_date": week_end.isoformat(),
                "submissions": rows,
            }
        )
