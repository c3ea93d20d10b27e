from __future__ import annotations

from ..extensions import db
from pipeworks.time_utils import to_iso_date, to_utc_z, utcnow

ATTENDANCE_STATUSES = ("present", "absent", "late", "early_leave", "half_day", "overtime")
TIMESHEET_STATUSES = ("draft", "submitted", "approved", "rejected")


class AttendanceRecord(db.Model):
    """
    One staff member's attendance for one day.

    DERIVED (attendance_service keeps these in sync):
    - total_hours = round(clock_out - clock_in in hours, 2) when both exist, else 0
    - overtime_hours = max(0, total_hours - STANDARD_SHIFT_HOURS)

    staff_id is a reference, not ownership.
    """
    __tablename__ = "attendance_records"
    __table_args__ = (
        db.Index("ix_attendance_staff_date", "staff_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)

    clock_in = db.Column(db.DateTime, nullable=True)
    clock_out = db.Column(db.DateTime, nullable=True)
    break_start = db.Column(db.DateTime, nullable=True)
    break_end = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="present")
    total_hours = db.Column(db.Float, nullable=False, default=0.0)
    overtime_hours = db.Column(db.Float, nullable=False, default=0.0)

    notes = db.Column(db.Text, nullable=True)
    approved_by = db.Column(db.String(128), nullable=True)
    is_manual_entry = db.Column(db.Boolean, nullable=False, default=False)
    location = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    @property
    def on_break(self) -> bool:
        return self.break_start is not None and self.break_end is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "date": to_iso_date(self.date),
            "clock_in": to_utc_z(self.clock_in),
            "clock_out": to_utc_z(self.clock_out),
            "break_start": to_utc_z(self.break_start),
            "break_end": to_utc_z(self.break_end),
            "status": self.status,
            "total_hours": self.total_hours,
            "overtime_hours": self.overtime_hours,
            "notes": self.notes,
            "approved_by": self.approved_by,
            "is_manual_entry": self.is_manual_entry,
            "location": self.location,
        }


class TimeSheet(db.Model):
    """
    Weekly roll-up of a staff member's attendance.

    LIFECYCLE: draft -> submitted -> approved | rejected
    """
    __tablename__ = "timesheets"
    __table_args__ = (
        db.UniqueConstraint("staff_id", "week_start_date", name="uq_timesheet_staff_week"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, nullable=False, index=True)
    week_start_date = db.Column(db.Date, nullable=False)
    week_end_date = db.Column(db.Date, nullable=False)

    total_regular_hours = db.Column(db.Float, nullable=False, default=0.0)
    total_overtime_hours = db.Column(db.Float, nullable=False, default=0.0)
    total_break_hours = db.Column(db.Float, nullable=False, default=0.0)
    days_present = db.Column(db.Integer, nullable=False, default=0)
    days_absent = db.Column(db.Integer, nullable=False, default=0)
    days_late = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="draft")
    submitted_at = db.Column(db.DateTime, nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    approved_by = db.Column(db.String(128), nullable=True)
    comments = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "week_start_date": to_iso_date(self.week_start_date),
            "week_end_date": to_iso_date(self.week_end_date),
            "total_regular_hours": self.total_regular_hours,
            "total_overtime_hours": self.total_overtime_hours,
            "total_break_hours": self.total_break_hours,
            "days_present": self.days_present,
            "days_absent": self.days_absent,
            "days_late": self.days_late,
            "status": self.status,
            "submitted_at": to_utc_z(self.submitted_at),
            "approved_at": to_utc_z(self.approved_at),
            "approved_by": self.approved_by,
            "comments": self.comments,
        }
