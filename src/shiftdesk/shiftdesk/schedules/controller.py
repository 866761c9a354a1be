from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import next_week_bounds
from ..common.http import (
    admin_required,
    clock_field,
    current_business_id,
    date_field,
    error_response,
    int_field,
    json_body,
    unexpected_error_response,
)
from ..core.exceptions import DomainError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedules", methods=["GET"], endpoint="schedules_list")
    @admin_required
    def schedules_list():
        try:
            args = request.args.to_dict()
            start = date_field(args, "start", required=False)
            end = date_field(args, "end", required=False)
            if start is None or end is None:
                start, end = next_week_bounds()
            shifts = container.assignment_service.list_range(
                business_id=current_business_id(),
                start=start,
                end=end,
                employee_id=int_field(args, "employee_id", required=False),
                branch_id=int_field(args, "branch_id", required=False),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("listing shifts")
        return jsonify({"success": True, "shifts": [s.to_dict() for s in shifts]})

    @app.route("/api/schedules/conflicts", methods=["GET"], endpoint="schedules_conflicts")
    @admin_required
    def schedules_conflicts():
        try:
            args = request.args.to_dict()
            employee_id = int_field(args, "employee_id")
            branch_id = int_field(args, "branch_id")
            shift_date = date_field(args, "date", "shift_date")
            exclude = int_field(args, "exclude_shift_id", required=False)

            employee = container.employees_repo.get_by_id(employee_id)
            if not employee or employee.business_id != current_business_id():
                raise ValidationError("Employee not found")

            detector = container.conflict_detector
            conflicts = detector.find_conflicts(employee_id, shift_date, branch_id, exclude_shift_id=exclude)
            context = None
            if conflicts:
                context = detector.build_context(
                    employee_id=employee_id,
                    shift_date=shift_date,
                    branch_id=branch_id,
                    start_time=clock_field(args, "start_time") if args.get("start_time") else conflicts[0].start_time,
                    end_time=clock_field(args, "end_time") if args.get("end_time") else conflicts[0].end_time,
                    conflicts=conflicts,
                )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("checking shift conflicts")
        return jsonify(
            {
                "success": True,
                "hasConflict": bool(conflicts),
                "conflicts": [s.to_dict() for s in conflicts],
                "conflict": context.to_dict() if context else None,
            }
        )

    @app.route("/api/schedules/<int:shift_id>/assign", methods=["POST"], endpoint="schedules_assign")
    @admin_required
    def schedules_assign(shift_id: int):
        try:
            data = json_body()
            shift = container.assignment_service.assign(
                business_id=current_business_id(),
                shift_id=shift_id,
                employee_id=int_field(data, "employee_id"),
                manager_code=data.get("manager_code"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("assigning a shift")
        return jsonify({"success": True, "shift": shift.to_dict()})

    @app.route("/api/schedules/<int:shift_id>/unassign", methods=["POST"], endpoint="schedules_unassign")
    @admin_required
    def schedules_unassign(shift_id: int):
        try:
            container.assignment_service.unassign(business_id=current_business_id(), shift_id=shift_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("unassigning a shift")
        return jsonify({"success": True})

    @app.route("/api/schedules/<int:shift_id>/archive", methods=["POST"], endpoint="schedules_archive")
    @admin_required
    def schedules_archive(shift_id: int):
        try:
            container.assignment_service.archive(business_id=current_business_id(), shift_id=shift_id)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("archiving a shift")
        return jsonify({"success": True})

    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_create")
    @admin_required
    def schedules_create():
        try:
            data = json_body()
            shift = container.assignment_service.create_shift(
                business_id=current_business_id(),
                branch_id=int_field(data, "branch_id"),
                shift_date=date_field(data, "shift_date", "date"),
                start_time=clock_field(data, "start_time"),
                end_time=clock_field(data, "end_time"),
                employee_id=int_field(data, "employee_id", required=False),
                manager_code=data.get("manager_code"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("creating a shift")
        return jsonify({"success": True, "shift": shift.to_dict()}), 201

    @app.route("/api/schedules/bulk", methods=["POST"], endpoint="schedules_bulk")
    @admin_required
    def schedules_bulk():
        try:
            data = json_body()
            weekdays = data.get("weekdays")
            if weekdays is not None:
                if not isinstance(weekdays, list) or any(not isinstance(d, int) or not 0 <= d <= 6 for d in weekdays):
                    raise ValidationError("weekdays must be a list of 0-6 (0 = Sunday)")

            result = container.assignment_service.bulk_create(
                business_id=current_business_id(),
                branch_id=int_field(data, "branch_id"),
                start_date=date_field(data, "start_date"),
                end_date=date_field(data, "end_date"),
                start_time=clock_field(data, "start_time"),
                end_time=clock_field(data, "end_time"),
                weekdays=weekdays,
                employee_id=int_field(data, "employee_id", required=False),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("creating shifts in bulk")
        return (
            jsonify(
                {
                    "success": True,
                    "created": [s.to_dict() for s in result.created],
                    "skipped": [
                        {"date": d.shift_date.isoformat(), "conflicting_shift_ids": [s.shift_id for s in d.conflicts]}
                        for d in result.skipped
                    ],
                }
            ),
            201,
        )

    @app.route("/api/schedules/publish", methods=["POST"], endpoint="schedules_publish")
    @admin_required
    def schedules_publish():
        try:
            data = json_body()
            published = container.assignment_service.publish_week(
                business_id=current_business_id(),
                week_start_date=date_field(data, "week_start_date", "weekStartDate"),
                week_end_date=date_field(data, "week_end_date", "weekEndDate"),
            )
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error_response("publishing a schedule")
        return jsonify({"success": True, "published": published})
