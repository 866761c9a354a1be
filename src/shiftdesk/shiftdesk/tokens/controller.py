from __future__ import annotations

from datetime import timedelta

from flask import Flask, Response, current_app, jsonify, request

from ..common.datetime_utils import next_week_bounds, now_utc
from ..common.http import (
    admin_required,
    current_business_id,
    current_user_id,
    date_field,
    error_response,
    int_field,
    json_body,
    unexpected_error_response,
)
from ..core.constants import MAX_TOKEN_TTL_HOURS
from ..core.enums import TokenKind
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .links import qr_png, url_for_token
from .model import Token

SHIFTS_LOOKAHEAD_DAYS = 14


def _public_origin() -> str:
    return current_app.config.get("PUBLIC_ORIGIN") or request.host_url


def _token_dict(token: Token) -> dict:
    return {
        "token": token.token_value,
        "kind": token.kind.value,
        "employee_id": token.employee_id,
        "expires_at": token.expires_at.isoformat(),
        "week_start_date": token.week_start_date.isoformat() if token.week_start_date else None,
        "week_end_date": token.week_end_date.isoformat() if token.week_end_date else None,
        "url": url_for_token(_public_origin(), token.kind, token.token_value),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/tokens/bulk", methods=["POST"], endpoint="tokens_bulk")
    @admin_required
    def tokens_bulk():
        try:
            data = json_body()
            week_start = date_field(data, "week_start_date", "weekStartDate", required=False)
            week_end = date_field(data, "week_end_date", "weekEndDate", required=False)
            if week_start is None or week_end is None:
                week_start, week_end = next_week_bounds()

            employee_ids = data.get("employee_ids")
            if employee_ids is not None and not isinstance(employee_ids, list):
                raise ValidationError("employee_ids must be a list")
            try:
                employee_ids = [int(i) for i in employee_ids] if employee_ids else None
            except (TypeError, ValueError):
                raise ValidationError("employee_ids must be a list of numbers")

            result = container.token_issuer.issue_for_business(
                business_id=current_business_id(),
                week_start_date=week_start,
                week_end_date=week_end,
                employee_ids=employee_ids,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("generating weekly tokens")

        tokens = []
        for item in result.issued:
            row = _token_dict(item.token)
            row["employee_name"] = item.employee.full_name
            tokens.append(row)
        return jsonify(
            {
                "success": True,
                "message": f"Generated {len(result.issued)} of {result.total_employees} links",
                "week_start_date": result.week_start_date.isoformat(),
                "week_end_date": result.week_end_date.isoformat(),
                "total_employees": result.total_employees,
                "successful_tokens": len(result.issued),
                "failed_tokens": len(result.failures),
                "tokens": tokens,
                "errors": [
                    {"employee_id": f.employee.employee_id, "employee_name": f.employee.full_name, "error": f.error}
                    for f in result.failures
                ],
            }
        )

    @app.route("/api/tokens", methods=["POST"], endpoint="tokens_issue")
    @admin_required
    def tokens_issue():
        try:
            data = json_body()
            employee_id = int_field(data, "employee_id")
            try:
                kind = TokenKind(str(data.get("kind") or TokenKind.SHIFT.value))
            except ValueError:
                raise ValidationError("Unknown token kind")

            employee = container.employees_repo.get_by_id(employee_id)
            if not employee or employee.business_id != current_business_id():
                raise ValidationError("Employee not found")

            issuer = container.token_issuer
            if kind == TokenKind.WEEKLY:
                week_start = date_field(data, "week_start_date", "weekStartDate", required=False)
                week_end = date_field(data, "week_end_date", "weekEndDate", required=False)
                if week_start is None or week_end is None:
                    week_start, week_end = next_week_bounds()
                token = issuer.issue_weekly(employee_id, week_start_date=week_start, week_end_date=week_end)
            elif kind == TokenKind.PERMANENT:
                token = issuer.issue_permanent(employee_id)
            elif kind == TokenKind.REGISTRATION:
                token = issuer.issue_registration(employee_id)
            else:
                hours = int_field(data, "ttl_hours", required=False)
                if hours is None:
                    token = issuer.issue_shift(employee_id)
                elif not 0 < hours <= MAX_TOKEN_TTL_HOURS:
                    raise ValidationError(f"ttl_hours must be between 1 and {MAX_TOKEN_TTL_HOURS}")
                else:
                    token = issuer.issue(employee_id, timedelta(hours=hours), kind=TokenKind.SHIFT)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("issuing a token")

        return jsonify({"success": True, **_token_dict(token)}), 201

    @app.route("/api/tokens/<token>/revoke", methods=["POST"], endpoint="tokens_revoke")
    @admin_required
    def tokens_revoke(token: str):
        try:
            container.token_issuer.revoke(token, business_id=current_business_id(), revoked_by=current_user_id())
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("revoking a token")
        return jsonify({"success": True})

    @app.route("/api/tokens/<token>", methods=["GET"], endpoint="tokens_lookup")
    def tokens_lookup(token: str):
        try:
            validated = container.token_validator.validate(token)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("looking up a token")

        employee = validated.employee
        return jsonify(
            {
                "success": True,
                "valid": True,
                "kind": validated.token.kind.value,
                "expires_at": validated.token.expires_at.isoformat(),
                "week_start_date": validated.token.week_start_date.isoformat() if validated.token.week_start_date else None,
                "week_end_date": validated.token.week_end_date.isoformat() if validated.token.week_end_date else None,
                "employee": {
                    "id": employee.employee_id,
                    "first_name": employee.first_name,
                    "last_name": employee.last_name,
                    "business_id": employee.business_id,
                },
            }
        )

    @app.route("/api/tokens/<token>/qr.png", methods=["GET"], endpoint="tokens_qr")
    def tokens_qr(token: str):
        try:
            validated = container.token_validator.validate(token)
            png = qr_png(url_for_token(_public_origin(), validated.token.kind, validated.token.token_value))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("rendering a token QR code")
        return Response(png, mimetype="image/png")

    @app.route("/api/tokens/<token>/shifts", methods=["GET"], endpoint="tokens_shifts")
    def tokens_shifts(token: str):
        """Read-only schedule lookup behind a permanent or weekly link."""
        try:
            validated = container.token_validator.validate(token)
            t = validated.token
            if t.kind not in (TokenKind.PERMANENT, TokenKind.WEEKLY):
                raise ValidationError("This link cannot be used to view shifts")
            if t.kind == TokenKind.WEEKLY:
                start, end = t.week_start_date, t.week_end_date
            else:
                start = now_utc().date()
                end = start + timedelta(days=SHIFTS_LOOKAHEAD_DAYS)

            shifts = container.assignment_service.list_range(
                business_id=validated.business_id,
                start=start,
                end=end,
                employee_id=validated.employee_id,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("listing shifts for a token")

        return jsonify(
            {
                "success": True,
                "start": start.isoformat(),
                "end": end.isoformat(),
                "shifts": [s.to_dict() for s in shifts],
            }
        )

    @app.route("/api/tokens/<token>/available-shifts", methods=["GET"], endpoint="tokens_available_shifts")
    def tokens_available_shifts(token: str):
        """Open shifts of the weekly link's week, for picking in the submission form."""
        try:
            validated = container.token_validator.validate(token)
            t = validated.token
            if t.kind != TokenKind.WEEKLY:
                raise ValidationError("This link cannot be used to pick open shifts")
            shifts = container.assignment_service.list_open(
                business_id=validated.business_id,
                start=t.week_start_date,
                end=t.week_end_date,
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("listing open shifts for a token")

        return jsonify(
            {
                "success": True,
                "week_start_date": t.week_start_date.isoformat(),
                "week_end_date": t.week_end_date.isoformat(),
                "shifts": [s.to_dict() for s in shifts],
            }
        )
