# Overview: Flask API routes for weekly timesheets; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..services import timesheet_service
from ..services.timesheet_service import TimesheetError
from ..validation import NotFoundError, ValidationError
from pipeworks.time_utils import parse_iso_date

timesheets_bp = Blueprint("timesheets", __name__, url_prefix="/api/timesheets")


@timesheets_bp.get("")
def list_timesheets_route():
    """Query params: staff_id, status"""
    try:
        sheets = timesheet_service.list_timesheets(
            staff_id=request.args.get("staff_id", type=int),
            status=request.args.get("status"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"timesheets": [t.to_dict() for t in sheets], "count": len(sheets)})


@timesheets_bp.post("/generate")
def generate_route():
    """Body: {"staff_id": 1, "week_start": "2024-01-15"}"""
    data = request.get_json(silent=True) or {}
    staff_id = data.get("staff_id")
    if not isinstance(staff_id, int) or isinstance(staff_id, bool):
        return jsonify({"error": "staff_id is required"}), 400
    raw_week_start = data.get("week_start")
    if not isinstance(raw_week_start, str):
        return jsonify({"error": "week_start is required"}), 400
    try:
        week_start = parse_iso_date(raw_week_start)
    except ValueError:
        return jsonify({"error": "week_start must be an ISO-8601 date"}), 400
    if week_start is None:
        return jsonify({"error": "week_start is required"}), 400

    try:
        sheet = timesheet_service.generate_timesheet(staff_id=staff_id, week_start=week_start)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except TimesheetError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"timesheet": sheet.to_dict()}), 201


@timesheets_bp.post("/<int:timesheet_id>/submit")
def submit_route(timesheet_id: int):
    try:
        sheet = timesheet_service.submit_timesheet(timesheet_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except TimesheetError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"timesheet": sheet.to_dict()})


@timesheets_bp.post("/<int:timesheet_id>/approve")
def approve_route(timesheet_id: int):
    data = request.get_json(silent=True) or {}
    try:
        sheet = timesheet_service.approve_timesheet(timesheet_id, approved_by=data.get("approved_by"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, TimesheetError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"timesheet": sheet.to_dict()})


@timesheets_bp.post("/<int:timesheet_id>/reject")
def reject_route(timesheet_id: int):
    data = request.get_json(silent=True) or {}
    reason = data.get("reason")
    if reason is not None and not isinstance(reason, str):
        return jsonify({"error": "reason must be a string"}), 400
    try:
        sheet = timesheet_service.reject_timesheet(
            timesheet_id,
            reason=reason,
            rejected_by=data.get("rejected_by"),
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, TimesheetError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"timesheet": sheet.to_dict()})
