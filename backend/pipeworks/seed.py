# Overview: Sample catalogue, staff, attendance and orders for demos and manual testing.

from __future__ import annotations

from datetime import date, datetime

from .extensions import db
from .models import AttendanceRecord, Item, Order, Staff
from .services import attendance_service, items_service, orders_service, staff_service


DEMO_ITEMS = (
    {
        "name": "Steel Pipe Standard",
        "description": "High-quality carbon steel pipe for industrial applications",
        "category": "steel",
        "diameter_mm": 25.0,
        "length_m": 6.0,
        "thickness_mm": 3.2,
        "price_cents": 4550,
        "stock_quantity": 150,
        "minimum_stock": 20,
        "material": "Carbon Steel",
        "grade": "Grade A",
        "pressure": "300 PSI",
        "supplier": "SteelCorp Industries",
    },
    {
        "name": "PVC Pipe Residential",
        "description": "Lightweight PVC pipe for residential plumbing",
        "category": "pvc",
        "diameter_mm": 32.0,
        "length_m": 4.0,
        "thickness_mm": 2.4,
        "price_cents": 1275,
        "stock_quantity": 300,
        "minimum_stock": 50,
        "material": "PVC",
        "grade": "Schedule 40",
        "pressure": "150 PSI",
        "supplier": "PlasticPro Ltd",
    },
    {
        "name": "Copper Pipe Type L",
        "description": "Medium-wall copper tubing for water distribution",
        "category": "copper",
        "diameter_mm": 19.0,
        "length_m": 3.0,
        "price_cents": 3899,
        "stock_quantity": 12,
        "minimum_stock": 40,
        "material": "Copper",
        "grade": "Type L",
        "pressure": "200 PSI",
        "supplier": "Metro Metals",
    },
)

DEMO_STAFF = (
    {
        "first_name": "John",
        "last_name": "Wilson",
        "email": "john.wilson@pipesmanufacturing.com",
        "phone": "+1 (555) 123-4567",
        "role": "manager",
        "department": "production",
        "job_title": "Production Manager",
        "hire_date": date(2020, 3, 15),
        "salary_cents": 7_500_000,
        "status": "active",
        "city": "Springfield",
        "state": "IL",
        "country": "USA",
        "emergency_contact_name": "Jane Wilson",
        "emergency_contact_relationship": "Spouse",
        "emergency_contact_phone": "+1 (555) 123-4568",
    },
    {
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah.johnson@pipesmanufacturing.com",
        "role": "quality_inspector",
        "department": "quality_control",
        "job_title": "Senior Quality Inspector",
        "hire_date": date(2021, 6, 1),
        "salary_cents": 5_500_000,
        "status": "active",
        "work_start_time": "07:30",
        "work_end_time": "16:30",
    },
    {
        "first_name": "Mike",
        "last_name": "Chen",
        "email": "mike.chen@pipesmanufacturing.com",
        "role": "machine_operator",
        "department": "production",
        "job_title": "CNC Machine Operator",
        "hire_date": date(2022, 1, 10),
        "salary_cents": 4_500_000,
        "status": "active",
    },
    {
        "first_name": "Emma",
        "last_name": "Davis",
        "email": "emma.davis@pipesmanufacturing.com",
        "role": "warehouse_staff",
        "department": "warehouse",
        "job_title": "Warehouse Associate",
        "hire_date": date(2023, 2, 20),
        "salary_cents": 4_200_000,
        "status": "on_leave",
    },
)

DEMO_ATTENDANCE = (
    # (staff index, clock in, clock out)
    (0, datetime(2024, 1, 16, 8, 0), datetime(2024, 1, 16, 17, 0)),
    (1, datetime(2024, 1, 16, 7, 45), datetime(2024, 1, 16, 16, 30)),
    (2, datetime(2024, 1, 16, 8, 15), None),
)


def seed_demo_data() -> dict:
    """
    Insert the demo records unless staff already exist. Returns the number
    of rows created per entity.
    """
    if db.session.query(Staff).count():
        return {"staff": 0, "items": 0, "orders": 0, "attendance": 0}

    staff_service.ensure_default_roles()
    roles = {r.name: r.id for r in staff_service.list_roles()}

    members = []
    for spec in DEMO_STAFF:
        role_name = "Production Manager" if spec["role"] == "manager" else None
        role_ids = [roles[role_name]] if role_name in roles else []
        members.append(staff_service.create_staff(patch=dict(spec), role_ids=role_ids, created_by="seed"))

    for member in members[1:3]:
        staff_service.update_staff(member.id, patch={"manager_id": members[0].id})

    items = [items_service.create_item(patch=dict(spec)) for spec in DEMO_ITEMS]

    for idx, started, finished in DEMO_ATTENDANCE:
        attendance_service.add_attendance_record(
            patch={
                "staff_id": members[idx].id,
                "date": started.date(),
                "clock_in": started,
                "clock_out": finished,
                "location": "Main Factory",
            },
            approved_by="seed",
        )

    order = orders_service.create_order(
        patch={
            "customer_name": "John Smith",
            "customer_email": "john.smith@abcconstruction.com",
            "customer_phone": "+1 (555) 987-6543",
            "customer_company": "ABC Construction Ltd.",
            "customer_city": "Chicago",
            "customer_state": "IL",
            "customer_country": "USA",
            "priority": "high",
            "payment_status": "paid",
            "tax_cents": 19575,
            "shipping_cost_cents": 5000,
            "shipping_method": "Ground",
            "assigned_to": "Mike Wilson",
            "tags": ["construction", "bulk-order"],
        },
        lines=[{"item_id": items[0].id, "quantity": 50}],
        created_by="seed",
    )
    orders_service.update_order_status(order.id, status="confirmed", updated_by="seed")
    orders_service.update_order_status(order.id, status="processing", updated_by="seed")

    orders_service.create_order(
        patch={
            "customer_name": "Maria Garcia",
            "customer_company": "Garcia Plumbing",
            "priority": "medium",
        },
        lines=[{"item_id": items[1].id, "quantity": 120}, {"item_id": items[2].id, "quantity": 10}],
        created_by="seed",
    )

    return {
        "staff": len(members),
        "items": db.session.query(Item).count(),
        "orders": db.session.query(Order).count(),
        "attendance": db.session.query(AttendanceRecord).count(),
    }
