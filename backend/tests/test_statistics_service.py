from datetime import date, datetime

import pytest

from factories import attendance_record, item_record, order_record, staff_record
from pipeworks.models import ORDER_STATUSES
from pipeworks.services import statistics_service
from pipeworks.services.statistics_service import (
    attendance_rollup,
    dashboard_metrics,
    low_stock_priority,
    order_stats,
    staff_attendance_stats,
    staff_stats,
)


class TestOrderStats:
    def test_empty_input_is_all_zero(self):
        stats = order_stats([])
        assert stats == {
            "total": 0,
            "pending": 0,
            "processing": 0,
            "shipped": 0,
            "delivered": 0,
            "cancelled": 0,
            "total_revenue_cents": 0,
            "average_order_value_cents": 0,
        }

    def test_buckets_partition_every_status(self):
        orders = [order_record(id=i, status=s) for i, s in enumerate(ORDER_STATUSES, start=1)]
        stats = order_stats(orders)
        buckets = stats["pending"] + stats["processing"] + stats["shipped"] + stats["delivered"] + stats["cancelled"]
        assert buckets == stats["total"] == len(ORDER_STATUSES)
        assert stats["processing"] == 5
        assert stats["shipped"] == 3
        assert stats["cancelled"] == 2

    def test_revenue_counts_only_paid_orders(self):
        orders = [
            order_record(id=1, payment_status="paid", total_amount_cents=252075),
            order_record(id=2, payment_status="paid", total_amount_cents=47925),
            order_record(id=3, payment_status="pending", total_amount_cents=99999),
        ]
        stats = order_stats(orders)
        assert stats["total_revenue_cents"] == 300000
        assert stats["average_order_value_cents"] == 150000


class TestStaffStats:
    def test_headcount_and_today(self):
        today = date(2024, 1, 16)
        staff = [
            staff_record(id=1, status="active", department="production", salary_cents=6_000_000,
                         hire_date=date(2024, 1, 2)),
            staff_record(id=2, status="active", department="quality_control", salary_cents=4_000_000),
            staff_record(id=3, status="on_leave", department="warehouse", salary_cents=5_000_000),
            staff_record(id=4, status="inactive", department="production", salary_cents=5_000_000,
                         hire_date=date(2023, 1, 20)),
        ]
        attendance = [
            attendance_record(staff_id=1, date=today, status="present",
                              break_start=datetime(2024, 1, 16, 12, 0)),
            attendance_record(staff_id=2, date=date(2024, 1, 15), status="late"),
        ]
        stats = staff_stats(staff, attendance, today=today)

        assert stats["total_staff"] == 4
        assert stats["active_staff"] == 2
        assert stats["on_leave"] == 1
        assert stats["inactive"] == 1
        assert stats["new_hires"] == 1
        assert stats["total_departments"] == 3
        assert stats["present_today"] == 1
        assert stats["absent_today"] == 1
        assert stats["late_today"] == 0
        assert stats["on_break_today"] == 1
        assert stats["avg_attendance"] == pytest.approx(50.0)
        assert stats["avg_salary_cents"] == 5_000_000

    def test_absent_today_can_go_negative(self):
        today = date(2024, 1, 16)
        staff = [staff_record(id=1, status="active")]
        attendance = [
            attendance_record(staff_id=1, date=today),
            attendance_record(staff_id=1, date=today),
            attendance_record(staff_id=2, date=today),
        ]
        assert staff_stats(staff, attendance, today=today)["absent_today"] == -2

    def test_no_staff_yields_zero_rates(self):
        stats = staff_stats([], [], today=date(2024, 1, 16))
        assert stats["avg_attendance"] == 0
        assert stats["avg_salary_cents"] == 0


class TestAttendanceStats:
    def test_no_records_yields_zero_rates(self):
        stats = staff_attendance_stats([])
        assert stats["total_days"] == 0
        assert stats["attendance_rate"] == 0
        assert stats["punctuality_rate"] == 0
        assert stats["avg_hours"] == 0

    def test_rates_and_totals(self):
        records = [
            attendance_record(date=date(2024, 1, 15), status="present", total_hours=9.0, overtime_hours=1.0),
            attendance_record(date=date(2024, 1, 16), status="present", total_hours=8.0),
            attendance_record(date=date(2024, 1, 17), status="late", total_hours=7.0),
            attendance_record(date=date(2024, 1, 18), status="absent", total_hours=0.0),
        ]
        stats = staff_attendance_stats(records)
        assert stats["total_days"] == 4
        assert stats["present_days"] == 2
        assert stats["late_days"] == 1
        assert stats["absent_days"] == 1
        assert stats["overtime_days"] == 1
        assert stats["total_hours"] == 24.0
        assert stats["total_overtime_hours"] == 1.0
        assert stats["avg_hours"] == pytest.approx(6.0)
        assert stats["attendance_rate"] == pytest.approx(50.0)
        assert stats["punctuality_rate"] == pytest.approx(25.0)

    def test_period_window(self):
        records = [
            attendance_record(date=date(2024, 1, 1)),
            attendance_record(date=date(2024, 1, 20)),
        ]
        stats = staff_attendance_stats(records, period_days=7, as_of=date(2024, 1, 21))
        assert stats["total_days"] == 1


def test_attendance_rollup_groups_in_first_seen_order():
    staff = [staff_record(id=1, employee_id="EMP001", first_name="John", last_name="Wilson")]
    records = [
        attendance_record(staff_id=7, status="absent", total_hours=0.0),
        attendance_record(staff_id=1, status="present", total_hours=9.0),
        attendance_record(staff_id=1, status="late", total_hours=7.5),
    ]
    rows = attendance_rollup(records, staff)
    assert [r["staff_id"] for r in rows] == [7, 1]
    assert rows[0]["name"] == "Unknown"
    assert rows[0]["employee_id"] == "N/A"
    assert rows[0]["days_absent"] == 1
    assert rows[1] == {
        "staff_id": 1,
        "name": "John Wilson",
        "employee_id": "EMP001",
        "days_present": 1,
        "days_absent": 0,
        "total_hours": 16.5,
        "late_days": 1,
    }


@pytest.mark.parametrize(
    "stock, minimum, expected",
    [(5, 30, "high"), (10, 30, "high"), (15, 30, "medium"), (20, 30, "medium"), (25, 30, "low"), (0, 0, "high")],
)
def test_low_stock_priority(stock, minimum, expected):
    assert low_stock_priority(item_record(stock_quantity=stock, minimum_stock=minimum)) == expected


def test_item_stats():
    items = [
        item_record(id=1, price_cents=1000, stock_quantity=5, minimum_stock=10),
        item_record(id=2, category="pvc", price_cents=200, stock_quantity=0, minimum_stock=10),
        item_record(id=3, price_cents=300, stock_quantity=100, minimum_stock=10),
    ]
    stats = statistics_service.item_stats(items)
    assert stats["total_items"] == 3
    assert stats["low_stock"] == 2
    assert stats["out_of_stock"] == 1
    assert stats["inventory_value_cents"] == 5000 + 30000
    assert stats["by_category"] == {"steel": 2, "pvc": 1}


def test_dashboard_metrics():
    today = date(2024, 1, 16)
    orders = [
        order_record(id=1, status="pending", customer_company="ABC", created_at=datetime(2024, 1, 16, 9, 0)),
        order_record(id=2, status="shipped", customer_company="ABC", created_at=datetime(2024, 1, 14, 9, 0)),
        order_record(id=3, status="delivered", customer_company="XYZ", payment_status="paid",
                     total_amount_cents=5000, created_at=datetime(2024, 1, 10, 9, 0),
                     history=[("delivered", datetime(2024, 1, 12, 15, 0))]),
    ]
    items = [item_record(id=1, stock_quantity=5, minimum_stock=30)]

    result = dashboard_metrics(orders, items, today=today)

    assert result["metrics"] == {
        "total_orders": 3,
        "total_shipped": 1,
        "total_complete": 1,
        "total_customers": 2,
        "today_orders": 1,
        "pending_orders": 1,
        "low_stock_count": 1,
        "revenue_cents": 5000,
    }
    assert [o["id"] for o in result["recent_orders"]] == [1, 2, 3]
    assert [o["id"] for o in result["new_orders"]] == [1]
    assert result["completed_deliveries"][0]["delivered_date"] == "2024-01-12"
    assert result["low_stock_items"][0]["priority"] == "high"
