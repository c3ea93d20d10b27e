# Overview: Service-layer operations for weekly timesheets built from attendance.

"""
Timesheet Service

LIFECYCLE: draft -> submitted -> approved | rejected

- generate_timesheet rebuilds a draft (or rejected) sheet from the week's
  attendance; submitted and approved sheets are frozen
- only draft or submitted sheets can be approved or rejected
"""

from __future__ import annotations

from datetime import date, timedelta

from ..extensions import db
from ..models import AttendanceRecord, Staff, TimeSheet, TIMESHEET_STATUSES
from ..validation import NotFoundError, ValidationError, require_choice
from pipeworks.time_utils import hours_between, utcnow


class TimesheetError(ValueError):
    """Raised for invalid timesheet transitions."""
    pass


REVIEWABLE_STATUSES = ("draft", "submitted")


def _require_timesheet(timesheet_id: int) -> TimeSheet:
    sheet = db.session.get(TimeSheet, timesheet_id)
    if sheet is None:
        raise NotFoundError("Timesheet not found")
    return sheet


def list_timesheets(*, staff_id: int | None = None, status: str | None = None) -> list[TimeSheet]:
    query = db.session.query(TimeSheet)
    if staff_id is not None:
        query = query.filter_by(staff_id=staff_id)
    if status:
        require_choice("status", status, TIMESHEET_STATUSES)
        query = query.filter_by(status=status)
    return query.order_by(TimeSheet.week_start_date.desc(), TimeSheet.id.asc()).all()


def generate_timesheet(*, staff_id: int, week_start: date) -> TimeSheet:
    if db.session.get(Staff, staff_id) is None:
        raise NotFoundError("Staff member not found")

    week_end = week_start + timedelta(days=6)
    sheet = (
        db.session.query(TimeSheet)
        .filter_by(staff_id=staff_id, week_start_date=week_start)
        .first()
    )
    if sheet is not None and sheet.status not in ("draft", "rejected"):
        raise TimesheetError(f"Timesheet is already {sheet.status}")

    records = (
        db.session.query(AttendanceRecord)
        .filter(
            AttendanceRecord.staff_id == staff_id,
            AttendanceRecord.date >= week_start,
            AttendanceRecord.date <= week_end,
        )
        .all()
    )

    overtime = sum(r.overtime_hours or 0 for r in records)
    total = sum(r.total_hours or 0 for r in records)

    if sheet is None:
        sheet = TimeSheet(staff_id=staff_id, week_start_date=week_start)
        db.session.add(sheet)

    sheet.week_end_date = week_end
    sheet.total_regular_hours = round(total - overtime, 2)
    sheet.total_overtime_hours = round(overtime, 2)
    sheet.total_break_hours = round(sum(hours_between(r.break_start, r.break_end) for r in records), 2)
    sheet.days_present = sum(1 for r in records if r.status != "absent")
    sheet.days_absent = sum(1 for r in records if r.status == "absent")
    sheet.days_late = sum(1 for r in records if r.status == "late")
    sheet.status = "draft"
    sheet.submitted_at = None
    sheet.approved_at = None
    sheet.approved_by = None

    db.session.commit()
    return sheet


def submit_timesheet(timesheet_id: int) -> TimeSheet:
    sheet = _require_timesheet(timesheet_id)
    if sheet.status not in ("draft", "rejected"):
        raise TimesheetError(f"Cannot submit a timesheet that is {sheet.status}")
    sheet.status = "submitted"
    sheet.submitted_at = utcnow()
    db.session.commit()
    return sheet


def approve_timesheet(timesheet_id: int, *, approved_by: str) -> TimeSheet:
    if not approved_by:
        raise ValidationError("approved_by is required")
    sheet = _require_timesheet(timesheet_id)
    if sheet.status not in REVIEWABLE_STATUSES:
        raise TimesheetError(f"Cannot approve a timesheet that is {sheet.status}")
    sheet.status = "approved"
    sheet.approved_at = utcnow()
    sheet.approved_by = approved_by
    db.session.commit()
    return sheet


def reject_timesheet(timesheet_id: int, *, reason: str, rejected_by: str | None = None) -> TimeSheet:
    if not reason or not reason.strip():
        raise ValidationError("reason is required")
    sheet = _require_timesheet(timesheet_id)
    if sheet.status not in REVIEWABLE_STATUSES:
        raise TimesheetError(f"Cannot reject a timesheet that is {sheet.status}")
    sheet.status = "rejected"
    sheet.comments = reason.strip()
    sheet.approved_by = rejected_by
    db.session.commit()
    return sheet
