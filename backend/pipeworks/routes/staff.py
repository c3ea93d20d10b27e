# Overview: Flask API routes for staff and roles; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..models import Staff
from ..services import attendance_service, staff_service, statistics_service
from ..services.filter_service import StaffFilters
from ..services.staff_service import STAFF_POLICY, StaffError
from ..validation import ConflictError, NotFoundError, ValidationError, validate_payload
from pipeworks.time_utils import today

staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


def _period_days(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        period_days = int(raw.strip())
    except ValueError:
        raise ValidationError("period_days must be an integer")
    if period_days < 1:
        raise ValidationError("period_days must be >= 1")
    return period_days


def _role_ids(value) -> list[int] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise ValidationError("role_ids must be a list of integers")
    return value


@staff_bp.get("")
def list_staff_route():
    """
    Query params: role, department, status (repeat or comma-separate),
    manager_id, search, hired_after, hired_before, salary_min_cents,
    salary_max_cents
    """
    try:
        filters = StaffFilters.from_args(request.args)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    staff = staff_service.list_staff(filters)
    return jsonify({"staff": [s.to_dict() for s in staff], "count": len(staff)})


@staff_bp.get("/stats")
def staff_stats_route():
    day = today()
    stats = statistics_service.staff_stats(
        staff_service.list_staff(),
        attendance_service.get_today_attendance(day),
        today=day,
    )
    return jsonify(stats)


@staff_bp.get("/roles")
def list_roles_route():
    return jsonify({"roles": [r.to_dict() for r in staff_service.list_roles()]})


@staff_bp.get("/by-role/<role>")
def staff_by_role_route(role: str):
    staff = staff_service.get_staff_by_role(role)
    return jsonify({"staff": [s.to_dict() for s in staff], "count": len(staff)})


@staff_bp.get("/by-department/<department>")
def staff_by_department_route(department: str):
    staff = staff_service.get_staff_by_department(department)
    return jsonify({"staff": [s.to_dict() for s in staff], "count": len(staff)})


@staff_bp.get("/<int:staff_id>")
def get_staff_route(staff_id: int):
    member = staff_service.get_staff(staff_id)
    if member is None:
        return jsonify({"error": "Staff member not found"}), 404
    return jsonify(member.to_dict())


@staff_bp.get("/<int:staff_id>/attendance-stats")
def attendance_stats_route(staff_id: int):
    """Query params: period_days (optional trailing window)."""
    if staff_service.get_staff(staff_id) is None:
        return jsonify({"error": "Staff member not found"}), 404
    try:
        period_days = _period_days(request.args.get("period_days"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    records = attendance_service.get_attendance_by_staff(staff_id)
    return jsonify(statistics_service.staff_attendance_stats(records, period_days=period_days))


@staff_bp.post("")
def create_staff_route():
    data = request.get_json(silent=True) or {}
    payload = {k: v for k, v in data.items() if k != "role_ids"}
    try:
        patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=False)
        member = staff_service.create_staff(patch=patch, role_ids=_role_ids(data.get("role_ids")))
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except (ValidationError, StaffError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create staff member")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(member.to_dict()), 201


@staff_bp.put("/<int:staff_id>")
def update_staff_route(staff_id: int):
    data = request.get_json(silent=True) or {}
    payload = {k: v for k, v in data.items() if k != "role_ids"}
    try:
        patch = validate_payload(model=Staff, payload=payload, policy=STAFF_POLICY, partial=True)
        member = staff_service.update_staff(staff_id, patch=patch, role_ids=_role_ids(data.get("role_ids")))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except (ValidationError, StaffError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    return jsonify(member.to_dict())


@staff_bp.patch("/<int:staff_id>/status")
def update_status_route(staff_id: int):
    data = request.get_json(silent=True) or {}
    try:
        member = staff_service.update_staff_status(staff_id, status=data.get("status"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(member.to_dict())


@staff_bp.put("/<int:staff_id>/roles")
def assign_roles_route(staff_id: int):
    data = request.get_json(silent=True) or {}
    try:
        role_ids = _role_ids(data.get("role_ids"))
        if role_ids is None:
            raise ValidationError("role_ids is required")
        member = staff_service.assign_roles(staff_id, role_ids=role_ids)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(member.to_dict())


@staff_bp.post("/bulk")
def bulk_action_route():
    """
    Body: {"action": "update_status" | "change_department" | "assign_role" | "update_manager",
           "value": ..., "staff_ids": [1, 2, 3]}
    """
    data = request.get_json(silent=True) or {}
    staff_ids = data.get("staff_ids")
    if not isinstance(staff_ids, list) or not all(isinstance(v, int) and not isinstance(v, bool) for v in staff_ids):
        return jsonify({"error": "staff_ids must be a list of integers"}), 400
    try:
        result = staff_service.perform_bulk_action(
            action=data.get("action"),
            value=data.get("value"),
            staff_ids=staff_ids,
        )
    except (ValidationError, StaffError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to apply bulk staff action")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(result)


@staff_bp.delete("/<int:staff_id>")
def delete_staff_route(staff_id: int):
    try:
        staff_service.delete_staff(staff_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True})
