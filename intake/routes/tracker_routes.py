"""
Work Tracker Routes
Admin routes for the employee roster, manual reminders, reminder settings
and work entries; public token routes for the daily tracker form
"""
import json

from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError

from intake import db, limiter
from intake.errors import IntakeError
from intake.middleware.admin_auth import require_admin
from intake.schemas.tracker_schema import (
    EmployeeCreateSchema,
    EmployeeUpdateSchema,
    TrackerSettingsUpdateSchema,
    WorkEntryQuerySchema,
    WorkEntrySubmitSchema,
)
from intake.services.tracker_service import TrackerService

bp = Blueprint("tracker", __name__, url_prefix="/api/tracker")


def error_response(message: str, status: int = 400, details=None):
    """Create a standardized error response."""
    return jsonify({
        "error": "Error",
        "message": message,
        "status": status,
        "details": details,
    }), status


def settings_response(tracker_settings):
    next_fire = TrackerService.next_fire_time(tracker_settings)
    return {
        "settings": tracker_settings.to_dict(),
        "next_run_at": next_fire.isoformat() if next_fire else None,
    }


@bp.route("/employees", methods=["GET"])
@require_admin
def list_employees():
    """
    GET /api/tracker/employees?status=active|inactive|all&search=
    """
    try:
        employees = TrackerService.list_employees(
            status=request.args.get("status", "active"),
            search=request.args.get("search"),
        )
        return jsonify({"employees": [e.to_dict() for e in employees], "count": len(employees)}), 200
    except Exception as e:
        current_app.logger.error(f"Error listing employees: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/employees", methods=["POST"])
@require_admin
def create_employee():
    try:
        data = EmployeeCreateSchema.model_validate(request.get_json(silent=True) or {})
        employee = TrackerService.create_employee(data.model_dump())
        return jsonify({"employee": employee.to_dict()}), 201

    except ValidationError as e:
        return error_response("Validation error", 400, json.loads(e.json(include_url=False)))
    except ValueError as e:
        db.session.rollback()
        if "already exists" in str(e):
            return error_response(str(e), 409)
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating employee: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/employees/<int:employee_id>", methods=["PATCH"])
@require_admin
def update_employee(employee_id: int):
    try:
        data = EmployeeUpdateSchema.model_validate(request.get_json(silent=True) or {})
        employee = TrackerService.update_employee(employee_id, data.model_dump(exclude_unset=True))
        return jsonify({"employee": employee.to_dict()}), 200

    except ValidationError as e:
        return error_response("Validation error", 400, json.loads(e.json(include_url=False)))
    except IntakeError as e:
        return error_response(e.message, e.status_code)
    except ValueError as e:
        db.session.rollback()
        if "already exists" in str(e):
            return error_response(str(e), 409)
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating employee {employee_id}: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/employees/<int:employee_id>", methods=["DELETE"])
@require_admin
def delete_employee(employee_id: int):
    try:
        TrackerService.delete_employee(employee_id)
        return jsonify({"message": "Employee deleted"}), 200
    except IntakeError as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting employee {employee_id}: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/trigger", methods=["POST"])
@require_admin
def trigger_reminders():
    """Send reminders to all active employees now."""
    try:
        results = TrackerService.send_reminders()
        return jsonify(results), 200
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error sending tracker reminders: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/settings", methods=["GET"])
@require_admin
def get_settings():
    try:
        return jsonify(settings_response(TrackerService.get_settings())), 200
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error loading tracker settings: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/settings", methods=["PATCH"])
@require_admin
def update_settings():
    """
    PATCH /api/tracker/settings
    Body: {cron_status?, cron_time?, timezone?, days_active?, email_subject?, additional_recipients?}
    """
    try:
        data = TrackerSettingsUpdateSchema.model_validate(request.get_json(silent=True) or {})
        tracker_settings = TrackerService.update_settings(
            data.model_dump(exclude_unset=True),
            updated_by=request.admin.get("email"),
        )
        return jsonify(settings_response(tracker_settings)), 200

    except ValidationError as e:
        return error_response("Validation error", 400, json.loads(e.json(include_url=False)))
    except ValueError as e:
        db.session.rollback()
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating tracker settings: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/entries", methods=["GET"])
@require_admin
def list_entries():
    """
    GET /api/tracker/entries?startDate=YYYY-MM-DD&endDate=YYYY-MM-DD&employeeId=
    """
    try:
        query = WorkEntryQuerySchema.model_validate(request.args.to_dict())
        entries = TrackerService.list_work_entries(
            start_date=query.startDate,
            end_date=query.endDate,
            employee_id=query.employeeId,
        )
        return jsonify({"entries": [entry.to_dict() for entry in entries], "count": len(entries)}), 200

    except ValidationError as e:
        return error_response("Validation error", 400, json.loads(e.json(include_url=False)))
    except Exception as e:
        current_app.logger.error(f"Error listing work entries: {e}", exc_info=True)
        return error_response("Internal server error", 500)


# Public routes (tracker token from the reminder email)


@bp.route("/form/<token>", methods=["GET"])
@limiter.limit("60 per minute")
def get_form(token: str):
    """
    Load the tracker form for a token.

    GET /api/tracker/form/<token>
    """
    try:
        return jsonify({"form": TrackerService.get_form_context(token)}), 200
    except IntakeError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        current_app.logger.error(f"Error loading tracker form: {e}", exc_info=True)
        return error_response("Internal server error", 500)


@bp.route("/form/<token>", methods=["POST"])
@limiter.limit("20 per minute")
def submit_form(token: str):
    """
    POST /api/tracker/form/<token>
    Body: {arrivalTime, weekday?, date?, entries: [{projectName, docketNumber?, effortType, hours, notes?}]}
    """
    try:
        data = WorkEntrySubmitSchema.model_validate(request.get_json(silent=True) or {})
        work_entry = TrackerService.submit_work_entry(
            token,
            data.to_payload(),
            metadata={
                "ip_address": request.remote_addr,
                "user_agent": request.headers.get("User-Agent"),
            },
        )
        return jsonify({
            "message": "Work entry submitted successfully",
            "entryId": work_entry.id,
            "totalHours": work_entry.total_hours,
            "entry": work_entry.to_client_dict(),
        }), 200

    except ValidationError as e:
        return error_response("Validation error", 400, json.loads(e.json(include_url=False)))
    except IntakeError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code
    except ValueError as e:
        db.session.rollback()
        return error_response(str(e), 400)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error submitting tracker form: {e}", exc_info=True)
        return error_response("Internal server error", 500)
