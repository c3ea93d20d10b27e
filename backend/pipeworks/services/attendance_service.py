# Overview: Service-layer operations for daily attendance; clock in/out, breaks and manual entries.

"""
Attendance Service

One AttendanceRecord per staff member per working session, dated by the
clock-in day.

DERIVED on every write:
- total_hours    = round((clock_out - clock_in) in hours, 2), else 0
- overtime_hours = max(0, total_hours - STANDARD_SHIFT_HOURS)

Breaks are recorded but not subtracted from total_hours; timesheets report
them separately.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from flask import current_app

from ..extensions import db
from ..models import AttendanceRecord, Staff, ATTENDANCE_STATUSES
from ..validation import ModelValidationPolicy, NotFoundError, enforce_rules_attendance
from .filter_service import AttendanceFilters, apply_attendance_filters
from pipeworks.time_utils import hours_between, today, utcnow


class AttendanceError(ValueError):
    """Raised for invalid attendance operations."""
    pass


ATTENDANCE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "staff_id", "date", "clock_in", "clock_out", "break_start", "break_end",
        "status", "notes", "location",
    }),
    required_on_create=frozenset({"staff_id", "date"}),
    choices={"status": ATTENDANCE_STATUSES},
)


def _standard_hours() -> float:
    return float(current_app.config.get("STANDARD_SHIFT_HOURS", 8))


def derive_hours(record: AttendanceRecord) -> None:
    record.total_hours = hours_between(record.clock_in, record.clock_out)
    record.overtime_hours = round(max(0.0, record.total_hours - _standard_hours()), 2)


def _shift_start(member: Staff) -> time:
    hours, minutes = (member.work_start_time or "08:00").split(":")
    return time(int(hours), int(minutes))


def is_late(member: Staff, clock_in: datetime) -> bool:
    grace = int(current_app.config.get("LATE_GRACE_MINUTES", 0))
    threshold = datetime.combine(clock_in.date(), _shift_start(member)) + timedelta(minutes=grace)
    return clock_in > threshold


def _require_staff(staff_id: int) -> Staff:
    member = db.session.get(Staff, staff_id)
    if member is None:
        raise NotFoundError("Staff member not found")
    return member


def _open_record(staff_id: int, day: date) -> AttendanceRecord | None:
    return (
        db.session.query(AttendanceRecord)
        .filter_by(staff_id=staff_id, date=day, clock_out=None)
        .filter(AttendanceRecord.clock_in.isnot(None))
        .order_by(AttendanceRecord.id.desc())
        .first()
    )


# =============================================================================
# CLOCK / BREAKS
# =============================================================================

def clock_in(*, staff_id: int, location: str | None = None, at: datetime | None = None) -> AttendanceRecord:
    member = _require_staff(staff_id)
    if not member.is_active:
        raise AttendanceError("Only active staff can clock in")

    at = at or utcnow()
    if _open_record(staff_id, at.date()):
        raise AttendanceError("Staff member is already clocked in")

    record = AttendanceRecord(
        staff_id=staff_id,
        date=at.date(),
        clock_in=at,
        status="late" if is_late(member, at) else "present",
        location=location,
        is_manual_entry=False,
    )
    derive_hours(record)
    db.session.add(record)
    db.session.commit()
    return record


def clock_out(*, staff_id: int, at: datetime | None = None) -> AttendanceRecord:
    at = at or utcnow()
    record = _open_record(staff_id, at.date())
    if record is None:
        raise AttendanceError("Staff member is not clocked in")
    if record.on_break:
        raise AttendanceError("Cannot clock out while on break")
    if at < record.clock_in:
        raise AttendanceError("Clock-out cannot precede clock-in")

    record.clock_out = at
    derive_hours(record)
    db.session.commit()
    return record


def start_break(*, staff_id: int, at: datetime | None = None) -> AttendanceRecord:
    at = at or utcnow()
    record = _open_record(staff_id, at.date())
    if record is None:
        raise AttendanceError("Staff member is not clocked in")
    if record.on_break:
        raise AttendanceError("Break already in progress")
    if record.break_end is not None:
        raise AttendanceError("Break already taken for this shift")

    record.break_start = at
    db.session.commit()
    return record


def end_break(*, staff_id: int, at: datetime | None = None) -> AttendanceRecord:
    at = at or utcnow()
    record = _open_record(staff_id, at.date())
    if record is None or not record.on_break:
        raise AttendanceError("No break in progress")

    record.break_end = at
    db.session.commit()
    return record


# =============================================================================
# MANUAL ENTRIES
# =============================================================================

def add_attendance_record(*, patch: dict, approved_by: str | None = None) -> AttendanceRecord:
    """
    Manual entry. Without an explicit status the record is "absent" when
    there is no clock-in, otherwise late/present against the shift start.
    """
    member = _require_staff(patch["staff_id"])
    enforce_rules_attendance(patch)

    record = AttendanceRecord(**patch)
    record.is_manual_entry = True
    record.approved_by = approved_by
    if not patch.get("status"):
        if record.clock_in is None:
            record.status = "absent"
        else:
            record.status = "late" if is_late(member, record.clock_in) else "present"
    derive_hours(record)

    db.session.add(record)
    db.session.commit()
    return record


def update_attendance_record(record_id: int, *, patch: dict) -> AttendanceRecord:
    record = db.session.get(AttendanceRecord, record_id)
    if record is None:
        raise NotFoundError("Attendance record not found")
    if "staff_id" in patch:
        _require_staff(patch["staff_id"])

    merged = {
        "clock_in": record.clock_in,
        "clock_out": record.clock_out,
        "break_start": record.break_start,
        "break_end": record.break_end,
        **patch,
    }
    enforce_rules_attendance(merged)

    for k, v in patch.items():
        if k not in ATTENDANCE_POLICY.writable_fields:
            continue
        setattr(record, k, v)
    derive_hours(record)
    db.session.commit()
    return record


# =============================================================================
# QUERIES
# =============================================================================

def list_attendance(filters: AttendanceFilters | None = None) -> list[AttendanceRecord]:
    records = (
        db.session.query(AttendanceRecord)
        .order_by(AttendanceRecord.date.desc(), AttendanceRecord.id.asc())
        .all()
    )
    if filters is None:
        return records
    staff_by_id = None
    if filters.department:
        staff_by_id = {s.id: s for s in db.session.query(Staff).all()}
    return apply_attendance_filters(filters, records, staff_by_id)


def get_attendance_by_staff(
    staff_id: int,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[AttendanceRecord]:
    return list_attendance(AttendanceFilters(staff_ids=(staff_id,), date_from=date_from, date_to=date_to))


def get_today_attendance(day: date | None = None) -> list[AttendanceRecord]:
    day = day or today()
    return list_attendance(AttendanceFilters(date_from=day, date_to=day))


def get_current_status(staff_id: int, *, at: datetime | None = None) -> dict:
    _require_staff(staff_id)
    at = at or utcnow()
    record = _open_record(staff_id, at.date())
    return {
        "staff_id": staff_id,
        "clocked_in": record is not None,
        "on_break": bool(record and record.on_break),
        "record": record.to_dict() if record else None,
    }
