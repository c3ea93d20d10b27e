# Overview: Service-layer operations for staff records and access roles.

from __future__ import annotations

import re

from ..extensions import db
from ..models import Role, Staff, DEPARTMENTS, EMPLOYMENT_STATUSES, SHIFT_TYPES, STAFF_ROLES
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_staff,
    require_choice,
)
from .filter_service import StaffFilters, apply_staff_filters
from pipeworks.time_utils import utcnow


class StaffError(ValueError):
    """Raised for invalid staff operations."""
    pass


STAFF_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "employee_id", "first_name", "last_name", "email", "phone", "avatar",
        "role", "department", "job_title", "hire_date", "salary_cents", "status",
        "street", "city", "state", "zip_code", "country",
        "emergency_contact_name", "emergency_contact_relationship", "emergency_contact_phone",
        "manager_id", "shift", "work_start_time", "work_end_time", "break_duration_minutes",
        "notes",
    }),
    required_on_create=frozenset({"first_name", "last_name", "email", "role", "department", "job_title", "hire_date"}),
    choices={
        "role": STAFF_ROLES,
        "department": DEPARTMENTS,
        "status": EMPLOYMENT_STATUSES,
        "shift": SHIFT_TYPES,
    },
)

BULK_ACTIONS = ("update_status", "change_department", "assign_role", "update_manager")

DEFAULT_ROLES = (
    {
        "name": "Administrator",
        "description": "Full system access",
        "level": 10,
        "can_manage_staff": True,
        "can_view_reports": True,
        "can_modify_inventory": True,
        "can_process_orders": True,
    },
    {
        "name": "Production Manager",
        "description": "Manages production operations",
        "level": 8,
        "can_manage_staff": True,
        "can_view_reports": True,
        "can_modify_inventory": True,
        "can_process_orders": True,
    },
    {
        "name": "Quality Inspector",
        "description": "Quality control and inspection",
        "level": 6,
        "can_manage_staff": False,
        "can_view_reports": True,
        "can_modify_inventory": False,
        "can_process_orders": False,
    },
    {
        "name": "Machine Operator",
        "description": "Operates manufacturing equipment",
        "level": 4,
        "can_manage_staff": False,
        "can_view_reports": False,
        "can_modify_inventory": False,
        "can_process_orders": False,
    },
)

_EMPLOYEE_ID = re.compile(r"^EMP(\d+)$")


# =============================================================================
# ROLES
# =============================================================================

def list_roles() -> list[Role]:
    return db.session.query(Role).order_by(Role.level.desc(), Role.id.asc()).all()


def ensure_default_roles() -> int:
    """Create any missing default role. Returns how many were added."""
    existing = {name for (name,) in db.session.query(Role.name).all()}
    added = 0
    for spec in DEFAULT_ROLES:
        if spec["name"] in existing:
            continue
        db.session.add(Role(**spec))
        added += 1
    if added:
        db.session.commit()
    return added


def _resolve_roles(role_ids) -> list[Role]:
    ids = list(dict.fromkeys(role_ids or []))
    if not ids:
        return []
    roles = db.session.query(Role).filter(Role.id.in_(ids)).all()
    found = {r.id for r in roles}
    missing = [rid for rid in ids if rid not in found]
    if missing:
        raise ValidationError(f"Unknown role id(s): {', '.join(str(m) for m in missing)}")
    return sorted(roles, key=lambda r: r.id)


# =============================================================================
# STAFF
# =============================================================================

def list_staff(filters: StaffFilters | None = None) -> list[Staff]:
    staff = (
        db.session.query(Staff)
        .order_by(Staff.last_name.asc(), Staff.first_name.asc(), Staff.id.asc())
        .all()
    )
    if filters is None:
        return staff
    return apply_staff_filters(filters, staff)


def get_staff(staff_id: int) -> Staff | None:
    return db.session.get(Staff, staff_id)


def _require_staff(staff_id: int) -> Staff:
    member = get_staff(staff_id)
    if member is None:
        raise NotFoundError("Staff member not found")
    return member


def get_staff_by_role(role: str) -> list[Staff]:
    return list_staff(StaffFilters(role=(role,)))


def get_staff_by_department(department: str) -> list[Staff]:
    return list_staff(StaffFilters(department=(department,)))


def next_employee_id() -> str:
    """EMP###, one past the highest numeric suffix in use."""
    highest = 0
    for (employee_id,) in db.session.query(Staff.employee_id).all():
        match = _EMPLOYEE_ID.match(employee_id or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"EMP{highest + 1:03d}"


def _check_employee_id(employee_id: str, *, exclude_id: int | None = None) -> None:
    query = db.session.query(Staff).filter_by(employee_id=employee_id)
    if exclude_id is not None:
        query = query.filter(Staff.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Employee ID {employee_id} already exists")


def _check_manager(manager_id: int | None, *, staff_id: int | None = None) -> None:
    if manager_id is None:
        return
    if staff_id is not None and manager_id == staff_id:
        raise StaffError("A staff member cannot be their own manager")
    if get_staff(manager_id) is None:
        raise ValidationError(f"Manager {manager_id} not found")


def create_staff(*, patch: dict, role_ids=None, created_by: str = "system") -> Staff:
    enforce_rules_staff(patch)
    _check_manager(patch.get("manager_id"))

    employee_id = patch.get("employee_id") or next_employee_id()
    _check_employee_id(employee_id)

    member = Staff(**{**patch, "employee_id": employee_id})
    member.created_by = created_by
    member.roles = _resolve_roles(role_ids)

    db.session.add(member)
    db.session.commit()
    return member


def update_staff(staff_id: int, *, patch: dict, role_ids=None) -> Staff:
    member = _require_staff(staff_id)
    enforce_rules_staff(patch)
    if "manager_id" in patch:
        _check_manager(patch["manager_id"], staff_id=member.id)
    if patch.get("employee_id"):
        _check_employee_id(patch["employee_id"], exclude_id=member.id)

    for k, v in patch.items():
        if k not in STAFF_POLICY.writable_fields:
            continue
        if k == "employee_id" and not v:
            continue
        setattr(member, k, v)
    if role_ids is not None:
        member.roles = _resolve_roles(role_ids)

    member.updated_at = utcnow()
    db.session.commit()
    return member


def update_staff_status(staff_id: int, *, status: str) -> Staff:
    require_choice("status", status, EMPLOYMENT_STATUSES)
    member = _require_staff(staff_id)
    member.status = status
    member.updated_at = utcnow()
    db.session.commit()
    return member


def assign_roles(staff_id: int, *, role_ids) -> Staff:
    member = _require_staff(staff_id)
    member.roles = _resolve_roles(role_ids)
    member.updated_at = utcnow()
    db.session.commit()
    return member


def perform_bulk_action(*, action: str, value, staff_ids: list[int]) -> dict:
    """
    Apply one action to many staff records in a single commit.

    Unknown ids are reported back rather than failing the batch.
    """
    if action not in BULK_ACTIONS:
        raise StaffError(f"action must be one of: {', '.join(BULK_ACTIONS)}")
    if not staff_ids:
        raise ValidationError("staff_ids must be a non-empty list")

    if action == "update_status":
        require_choice("status", value, EMPLOYMENT_STATUSES)
    elif action == "change_department":
        require_choice("department", value, DEPARTMENTS)
    elif action == "assign_role":
        require_choice("role", value, STAFF_ROLES)
    else:
        if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
            raise ValidationError("manager_id must be an integer or null")
        if value is not None and value in staff_ids:
            raise StaffError("A staff member cannot be their own manager")
        _check_manager(value)

    members = db.session.query(Staff).filter(Staff.id.in_(staff_ids)).all()
    found = {m.id for m in members}
    missing = [sid for sid in staff_ids if sid not in found]

    now = utcnow()
    for member in members:
        if action == "update_status":
            member.status = value
        elif action == "change_department":
            member.department = value
        elif action == "assign_role":
            member.role = value
        else:
            member.manager_id = value
        member.updated_at = now

    db.session.commit()
    return {"action": action, "updated": len(members), "missing": missing}


def delete_staff(staff_id: int) -> None:
    """
    Remove a staff record. Attendance rows keep their staff_id and later
    show up as "Unknown" in roll-ups; direct reports lose their manager.
    """
    member = _require_staff(staff_id)
    db.session.query(Staff).filter_by(manager_id=member.id).update({"manager_id": None})
    db.session.delete(member)
    db.session.commit()
