from __future__ import annotations

from ..extensions import db
from pipeworks.time_utils import to_iso_date, to_utc_z, utcnow

STAFF_ROLES = (
    "admin",
    "manager",
    "supervisor",
    "production_lead",
    "machine_operator",
    "quality_inspector",
    "warehouse_staff",
    "maintenance",
    "shipping_clerk",
    "sales_rep",
    "hr",
    "accountant",
)
DEPARTMENTS = (
    "administration",
    "production",
    "quality_control",
    "warehouse",
    "maintenance",
    "shipping",
    "sales",
    "hr",
    "finance",
)
EMPLOYMENT_STATUSES = ("active", "inactive", "on_leave", "terminated")
SHIFT_TYPES = ("day", "night", "rotating", "flexible")


staff_roles = db.Table(
    "staff_roles",
    db.Column("staff_id", db.Integer, db.ForeignKey("staff.id"), primary_key=True),
    db.Column("role_id", db.Integer, db.ForeignKey("roles.id"), primary_key=True),
)


class Role(db.Model):
    """System access role. Level 1-10, higher = more access."""
    __tablename__ = "roles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True)
    description = db.Column(db.String(255), nullable=False, default="")
    level = db.Column(db.Integer, nullable=False, default=1)
    can_manage_staff = db.Column(db.Boolean, nullable=False, default=False)
    can_view_reports = db.Column(db.Boolean, nullable=False, default=False)
    can_modify_inventory = db.Column(db.Boolean, nullable=False, default=False)
    can_process_orders = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "level": self.level,
            "can_manage_staff": self.can_manage_staff,
            "can_view_reports": self.can_view_reports,
            "can_modify_inventory": self.can_modify_inventory,
            "can_process_orders": self.can_process_orders,
        }


class Staff(db.Model):
    """
    Employee record.

    Nested contact data (address, emergency contact, working hours) is
    flattened into explicit columns so every settable field is enumerated.
    """
    __tablename__ = "staff"
    __table_args__ = (
        db.Index("ix_staff_department_status", "department", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(16), nullable=False, unique=True)
    first_name = db.Column(db.String(64), nullable=False)
    last_name = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(128), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    avatar = db.Column(db.Text, nullable=True)

    # Employment
    role = db.Column(db.String(32), nullable=False)
    department = db.Column(db.String(32), nullable=False, index=True)
    job_title = db.Column(db.String(128), nullable=False)
    hire_date = db.Column(db.Date, nullable=False)
    salary_cents = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="active")

    # Address
    street = db.Column(db.String(128), nullable=True)
    city = db.Column(db.String(64), nullable=True)
    state = db.Column(db.String(64), nullable=True)
    zip_code = db.Column(db.String(16), nullable=True)
    country = db.Column(db.String(64), nullable=True)

    # Emergency contact
    emergency_contact_name = db.Column(db.String(128), nullable=True)
    emergency_contact_relationship = db.Column(db.String(64), nullable=True)
    emergency_contact_phone = db.Column(db.String(32), nullable=True)

    # Work details
    manager_id = db.Column(db.Integer, nullable=True)
    shift = db.Column(db.String(16), nullable=False, default="day")
    work_start_time = db.Column(db.String(5), nullable=False, default="08:00")
    work_end_time = db.Column(db.String(5), nullable=False, default="17:00")
    break_duration_minutes = db.Column(db.Integer, nullable=False, default=60)

    last_login = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.String(64), nullable=False, default="system")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    roles = db.relationship("Role", secondary=staff_roles, lazy="subquery", order_by="Role.id")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "avatar": self.avatar,
            "role": self.role,
            "department": self.department,
            "job_title": self.job_title,
            "hire_date": to_iso_date(self.hire_date),
            "salary_cents": self.salary_cents,
            "status": self.status,
            "address": {
                "street": self.street,
                "city": self.city,
                "state": self.state,
                "zip_code": self.zip_code,
                "country": self.country,
            },
            "emergency_contact": {
                "name": self.emergency_contact_name,
                "relationship": self.emergency_contact_relationship,
                "phone": self.emergency_contact_phone,
            },
            "manager_id": self.manager_id,
            "shift": self.shift,
            "working_hours": {
                "start_time": self.work_start_time,
                "end_time": self.work_end_time,
                "break_duration": self.break_duration_minutes,
            },
            "roles": [r.to_dict() for r in self.roles],
            "last_login": to_utc_z(self.last_login),
            "is_active": self.is_active,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
