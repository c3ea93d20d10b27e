# Overview: Pure aggregate statistics for orders, staff, attendance, items and the dashboard.

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from pipeworks.time_utils import today as _today

PENDING_STATUSES = frozenset({"pending"})
PROCESSING_STATUSES = frozenset({"confirmed", "processing", "manufacturing", "quality_check", "ready_to_ship"})
SHIPPED_STATUSES = frozenset({"shipped", "in_transit", "out_for_delivery"})
DELIVERED_STATUSES = frozenset({"delivered"})
CANCELLED_STATUSES = frozenset({"cancelled", "returned"})

STATUS_BUCKETS = {
    "pending": PENDING_STATUSES,
    "processing": PROCESSING_STATUSES,
    "shipped": SHIPPED_STATUSES,
    "delivered": DELIVERED_STATUSES,
    "cancelled": CANCELLED_STATUSES,
}


def _rate(numerator: float, denominator: float) -> float:
    """Percentage, or 0 when there is nothing to divide by."""
    if not denominator:
        return 0.0
    return numerator / denominator * 100.0


def status_bucket(status: str) -> str | None:
    for bucket, members in STATUS_BUCKETS.items():
        if status in members:
            return bucket
    return None


# =============================================================================
# ORDERS
# =============================================================================

def order_stats(orders: Iterable[Any]) -> dict:
    """
    Counts per coarse status bucket plus paid revenue.

    average_order_value_cents = total_revenue_cents / max(paid_count, 1)
    """
    orders = list(orders)
    counts = Counter(status_bucket(o.status) for o in orders)
    paid = [o for o in orders if o.payment_status == "paid"]
    total_revenue = sum(o.total_amount_cents or 0 for o in paid)

    return {
        "total": len(orders),
        "pending": counts["pending"],
        "processing": counts["processing"],
        "shipped": counts["shipped"],
        "delivered": counts["delivered"],
        "cancelled": counts["cancelled"],
        "total_revenue_cents": total_revenue,
        "average_order_value_cents": total_revenue / max(len(paid), 1),
    }


# =============================================================================
# STAFF
# =============================================================================

def staff_stats(
    staff: Iterable[Any],
    attendance: Iterable[Any] = (),
    *,
    today: date | None = None,
) -> dict:
    """
    Headcount summary plus today's attendance breakdown.

    absent_today is active_staff - len(today's records). Records for
    inactive staff, or several records for one person, skew it and it
    can go negative.
    """
    staff = list(staff)
    day = today or _today()

    active = sum(1 for s in staff if s.status == "active")
    on_leave = sum(1 for s in staff if s.status == "on_leave")
    inactive = sum(1 for s in staff if s.status == "inactive")
    new_hires = sum(
        1
        for s in staff
        if s.hire_date is not None
        and s.hire_date.year == day.year
        and s.hire_date.month == day.month
    )
    departments = len({s.department for s in staff})

    todays = [r for r in attendance if r.date == day]
    present_today = sum(1 for r in todays if r.status == "present")
    late_today = sum(1 for r in todays if r.status == "late")
    on_break_today = sum(1 for r in todays if r.break_start is not None and r.break_end is None)

    total_salary = sum(s.salary_cents or 0 for s in staff)

    return {
        "total_staff": len(staff),
        "active_staff": active,
        "on_leave": on_leave,
        "inactive": inactive,
        "new_hires": new_hires,
        "total_departments": departments,
        "present_today": present_today,
        "absent_today": active - len(todays),
        "late_today": late_today,
        "on_break_today": on_break_today,
        "avg_attendance": _rate(present_today, active),
        "avg_salary_cents": total_salary / len(staff) if staff else 0,
    }


def staff_attendance_stats(
    records: Iterable[Any],
    *,
    period_days: int | None = None,
    as_of: date | None = None,
) -> dict:
    """
    Per-staff attendance figures over an optional trailing window.

    period_days=None uses every record supplied. With a window, records
    dated on or after (as_of - period_days) are counted.
    """
    records = list(records)
    if period_days is not None:
        cutoff = (as_of or _today()) - timedelta(days=period_days)
        records = [r for r in records if r.date >= cutoff]

    total_days = len(records)
    present_days = sum(1 for r in records if r.status == "present")
    late_days = sum(1 for r in records if r.status == "late")
    absent_days = sum(1 for r in records if r.status == "absent")
    overtime_days = sum(1 for r in records if (r.overtime_hours or 0) > 0)
    total_hours = sum(r.total_hours or 0 for r in records)
    total_overtime = sum(r.overtime_hours or 0 for r in records)

    return {
        "total_days": total_days,
        "present_days": present_days,
        "late_days": late_days,
        "absent_days": absent_days,
        "overtime_days": overtime_days,
        "total_hours": round(total_hours, 2),
        "total_overtime_hours": round(total_overtime, 2),
        "avg_hours": total_hours / total_days if total_days else 0.0,
        "attendance_rate": _rate(present_days, total_days),
        "punctuality_rate": _rate(present_days - late_days, total_days),
    }


def attendance_rollup(records: Iterable[Any], staff: Iterable[Any]) -> list[dict]:
    """Group attendance by staff id, in first-seen order."""
    staff_by_id = {s.id: s for s in staff}
    grouped: dict[int, list[Any]] = {}
    for record in records:
        grouped.setdefault(record.staff_id, []).append(record)

    rows = []
    for staff_id, staff_records in grouped.items():
        member = staff_by_id.get(staff_id)
        rows.append(
            {
                "staff_id": staff_id,
                "name": member.full_name if member else "Unknown",
                "employee_id": member.employee_id if member else "N/A",
                "days_present": sum(1 for r in staff_records if r.status == "present"),
                "days_absent": sum(1 for r in staff_records if r.status == "absent"),
                "total_hours": sum(r.total_hours or 0 for r in staff_records),
                "late_days": sum(1 for r in staff_records if r.status == "late"),
            }
        )
    return rows


# =============================================================================
# ITEMS / DASHBOARD
# =============================================================================

def low_stock_priority(item: Any) -> str:
    minimum = item.minimum_stock or 0
    stock = item.stock_quantity or 0
    if minimum <= 0:
        return "high" if stock <= 0 else "low"
    ratio = stock / minimum
    if ratio <= 1 / 3:
        return "high"
    if ratio <= 2 / 3:
        return "medium"
    return "low"


def item_stats(items: Iterable[Any]) -> dict:
    items = list(items)
    return {
        "total_items": len(items),
        "low_stock": sum(1 for i in items if i.is_low_stock),
        "out_of_stock": sum(1 for i in items if (i.stock_quantity or 0) <= 0),
        "inventory_value_cents": sum((i.price_cents or 0) * (i.stock_quantity or 0) for i in items),
        "by_category": dict(Counter(i.category for i in items)),
    }


def _order_summary(order: Any) -> dict:
    lines = list(order.lines or [])
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer": order.customer_company or order.customer_name,
        "items": ", ".join(f"{line.name} x {line.quantity}" for line in lines),
        "status": order.status,
        "priority": order.priority,
        "date": order.created_at.date().isoformat() if order.created_at else None,
        "amount_cents": order.total_amount_cents,
    }


def _delivered_on(order: Any) -> date | None:
    if order.actual_delivery is not None:
        return order.actual_delivery
    for entry in reversed(list(order.status_history or [])):
        if entry.status == "delivered":
            return entry.timestamp.date()
    return order.updated_at.date() if order.updated_at else None


def dashboard_metrics(
    orders: Sequence[Any],
    items: Sequence[Any],
    *,
    today: date | None = None,
) -> dict:
    day = today or _today()
    newest_first = sorted(orders, key=lambda o: (o.created_at or datetime.min, o.id or 0), reverse=True)
    stats = order_stats(orders)
    low_stock = [i for i in items if i.is_low_stock]

    customers = {
        (o.customer_email or o.customer_company or o.customer_name or "").lower()
        for o in orders
    }
    customers.discard("")

    delivered = [o for o in orders if o.status == "delivered"]
    delivered.sort(key=lambda o: (_delivered_on(o) or date.min), reverse=True)

    return {
        "metrics": {
            "total_orders": stats["total"],
            "total_shipped": stats["shipped"],
            "total_complete": stats["delivered"],
            "total_customers": len(customers),
            "today_orders": sum(1 for o in orders if o.created_at and o.created_at.date() == day),
            "pending_orders": stats["pending"],
            "low_stock_count": len(low_stock),
            "revenue_cents": stats["total_revenue_cents"],
        },
        "low_stock_items": [
            {
                "id": i.id,
                "name": i.name,
                "current_stock": i.stock_quantity,
                "minimum_stock": i.minimum_stock,
                "category": i.category,
                "priority": low_stock_priority(i),
            }
            for i in low_stock
        ],
        "new_orders": [
            _order_summary(o) for o in newest_first if o.status in ("pending", "confirmed")
        ][:5],
        "recent_orders": [_order_summary(o) for o in newest_first[:5]],
        "completed_deliveries": [
            {
                "id": o.id,
                "order_number": o.order_number,
                "customer": o.customer_company or o.customer_name,
                "delivered_date": (_delivered_on(o) or day).isoformat(),
                "amount_cents": o.total_amount_cents,
            }
            for o in delivered[:4]
        ],
    }

