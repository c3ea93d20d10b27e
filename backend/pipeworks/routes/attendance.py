# Overview: Flask API routes for attendance; parses input and returns JSON responses.

"""
Attendance Routes

Clock in/out and breaks act on the caller-supplied staff_id for the
current UTC day. Manual entries and corrections go through the
create/update endpoints and always re-derive hours.
"""

from flask import Blueprint, jsonify, request

from ..extensions import db
from ..models import AttendanceRecord
from ..services import attendance_service
from ..services.attendance_service import ATTENDANCE_POLICY, AttendanceError
from ..services.filter_service import AttendanceFilters
from ..validation import NotFoundError, ValidationError, validate_payload

attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/attendance")


def _staff_id(data: dict) -> int:
    staff_id = data.get("staff_id")
    if not isinstance(staff_id, int) or isinstance(staff_id, bool):
        raise ValidationError("staff_id is required")
    return staff_id


@attendance_bp.get("")
def list_attendance_route():
    """Query params: staff_id, status, department (repeat or comma-separate), date_from, date_to"""
    try:
        filters = AttendanceFilters.from_args(request.args)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    records = attendance_service.list_attendance(filters)
    return jsonify({"records": [r.to_dict() for r in records], "count": len(records)})


@attendance_bp.get("/today")
def today_route():
    records = attendance_service.get_today_attendance()
    return jsonify({"records": [r.to_dict() for r in records], "count": len(records)})


@attendance_bp.get("/status/<int:staff_id>")
def status_route(staff_id: int):
    try:
        return jsonify(attendance_service.get_current_status(staff_id))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@attendance_bp.post("/clock-in")
def clock_in_route():
    data = request.get_json(silent=True) or {}
    try:
        record = attendance_service.clock_in(staff_id=_staff_id(data), location=data.get("location"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, AttendanceError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"record": record.to_dict()}), 201


@attendance_bp.post("/clock-out")
def clock_out_route():
    data = request.get_json(silent=True) or {}
    try:
        record = attendance_service.clock_out(staff_id=_staff_id(data))
    except (ValidationError, AttendanceError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"record": record.to_dict()})


@attendance_bp.post("/break/start")
def start_break_route():
    data = request.get_json(silent=True) or {}
    try:
        record = attendance_service.start_break(staff_id=_staff_id(data))
    except (ValidationError, AttendanceError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"record": record.to_dict()})


@attendance_bp.post("/break/end")
def end_break_route():
    data = request.get_json(silent=True) or {}
    try:
        record = attendance_service.end_break(staff_id=_staff_id(data))
    except (ValidationError, AttendanceError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"record": record.to_dict()})


@attendance_bp.post("")
def create_record_route():
    data = request.get_json(silent=True) or {}
    payload = {k: v for k, v in data.items() if k != "approved_by"}
    try:
        patch = validate_payload(model=AttendanceRecord, payload=payload, policy=ATTENDANCE_POLICY, partial=False)
        record = attendance_service.add_attendance_record(patch=patch, approved_by=data.get("approved_by"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, AttendanceError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    return jsonify({"record": record.to_dict()}), 201


@attendance_bp.put("/<int:record_id>")
def update_record_route(record_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=AttendanceRecord, payload=payload, policy=ATTENDANCE_POLICY, partial=True)
        record = attendance_service.update_attendance_record(record_id, patch=patch)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, AttendanceError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    return jsonify({"record": record.to_dict()})
