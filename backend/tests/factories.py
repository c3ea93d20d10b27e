"""Transient model instances for pure aggregation and report tests; never persisted."""

from datetime import date, datetime

from pipeworks.models import AttendanceRecord, Item, Order, OrderLine, OrderStatusHistory, Staff


def order_record(**fields) -> Order:
    values = {
        "id": 1,
        "order_number": "ORD-2024-001",
        "customer_name": "John Smith",
        "customer_company": "ABC Construction Ltd.",
        "status": "pending",
        "priority": "medium",
        "payment_status": "pending",
        "total_amount_cents": 10000,
        "assigned_to": None,
        "tags": [],
        "created_at": datetime(2024, 1, 15, 10, 30),
        "updated_at": datetime(2024, 1, 15, 10, 30),
    }
    line_count = fields.pop("line_count", 1)
    history = fields.pop("history", ())
    values.update(fields)
    order = Order(**values)
    for i in range(line_count):
        order.lines.append(OrderLine(name=f"Pipe {i}", quantity=1, unit_price_cents=100, total_price_cents=100))
    for status, timestamp in history:
        order.status_history.append(OrderStatusHistory(status=status, timestamp=timestamp, updated_by="tester"))
    return order


def staff_record(**fields) -> Staff:
    values = {
        "id": 1,
        "employee_id": "EMP001",
        "first_name": "John",
        "last_name": "Wilson",
        "email": "john.wilson@example.com",
        "role": "manager",
        "department": "production",
        "job_title": "Production Manager",
        "hire_date": date(2020, 3, 15),
        "salary_cents": 7_500_000,
        "status": "active",
        "manager_id": None,
    }
    values.update(fields)
    return Staff(**values)


def item_record(**fields) -> Item:
    values = {
        "id": 1,
        "name": "Steel Pipe Standard",
        "description": "Carbon steel pipe",
        "category": "steel",
        "diameter_mm": 25.0,
        "length_m": 6.0,
        "price_cents": 4550,
        "stock_quantity": 150,
        "minimum_stock": 20,
        "material": "Carbon Steel",
        "status": "active",
    }
    values.update(fields)
    return Item(**values)


def attendance_record(**fields) -> AttendanceRecord:
    values = {
        "staff_id": 1,
        "date": date(2024, 1, 16),
        "status": "present",
        "total_hours": 8.0,
        "overtime_hours": 0.0,
    }
    values.update(fields)
    return AttendanceRecord(**values)
