from datetime import date, datetime
from io import BytesIO

import pytest
from pypdf import PdfReader
from reportlab.lib.units import mm

from factories import attendance_record, order_record, staff_record
from pipeworks.services import reporting_service
from pipeworks.services.reporting_service import (
    GRAY,
    ORDER_COLUMNS,
    DateRange,
    ReportColumn,
    ReportError,
    ReportTable,
    format_currency,
    format_date,
    format_label,
    orders_report,
    report_filename,
    selected_orders_report,
    staff_report,
)

GENERATED_AT = datetime(2024, 1, 20, 14, 5)


def _orders(n: int):
    statuses = ("pending", "processing", "shipped", "delivered", "cancelled", "quality_check")
    priorities = ("low", "medium", "high", "urgent")
    return [
        order_record(
            id=i,
            order_number=f"ORD-2024-{i:03d}",
            status=statuses[i % len(statuses)],
            priority=priorities[i % len(priorities)],
            payment_status="paid" if i % 2 else "pending",
            total_amount_cents=1000 * i,
        )
        for i in range(1, n + 1)
    ]


class TestFormatting:
    def test_currency(self):
        assert format_currency(252075) == "$2,520.75"
        assert format_currency(0) == "$0.00"
        assert format_currency(None) == "$0.00"

    def test_date(self):
        assert format_date(date(2024, 1, 5)) == "Jan 5, 2024"
        assert format_date(datetime(2024, 12, 31, 23, 59)) == "Dec 31, 2024"
        assert format_date(None) == ""

    def test_label_replaces_every_underscore(self):
        assert format_label("out_for_delivery") == "OUT FOR DELIVERY"
        assert format_label("urgent") == "URGENT"

    def test_filename(self):
        assert report_filename("orders", date(2024, 1, 20)) == "orders-report-2024-01-20.pdf"
        with pytest.raises(ReportError):
            report_filename("invoices", date(2024, 1, 20))

    def test_date_range_caption(self):
        caption = DateRange(date(2024, 1, 15), date(2024, 1, 31)).caption()
        assert caption == "Report Period: Jan 15, 2024 - Jan 31, 2024"


class TestReportTable:
    def test_one_row_per_record(self):
        orders = _orders(7)
        table = ReportTable(ORDER_COLUMNS, orders)
        rows = table.rows()
        assert len(rows) == 7
        assert table.header() == [
            "Order #", "Customer", "Company", "Items", "Status", "Priority", "Total", "Date", "Assigned To",
        ]
        assert rows[0][0] == "ORD-2024-001"
        assert rows[0][6] == "$10.00"
        assert rows[0][7] == "Jan 15, 2024"
        assert rows[0][8] == "Unassigned"

    def test_status_and_priority_cells_are_coloured(self):
        orders = [
            order_record(id=1, status="delivered", priority="urgent"),
            order_record(id=2, status="quality_check", priority="high"),
        ]
        fills = ReportTable(ORDER_COLUMNS, orders).cell_fills()
        assert fills[(0, 4)] == (76, 175, 80)
        assert fills[(0, 5)] == (244, 67, 54)
        assert fills[(1, 4)] == GRAY
        assert fills[(1, 5)] == (255, 152, 0)
        assert all(col in (4, 5) for (_, col) in fills)

    def test_style_commands_offset_body_rows(self):
        orders = [order_record(id=1, status="pending")]
        commands = ReportTable(ORDER_COLUMNS, orders).style_commands()
        cell_backgrounds = [c for c in commands if c[0] == "BACKGROUND" and c[1] != (0, 0)]
        assert ("BACKGROUND", (4, 1), (4, 1)) in [c[:3] for c in cell_backgrounds]

    def test_widths_scale_down_to_fit(self):
        columns = [ReportColumn("A", str, 100), ReportColumn("B", str, 100)]
        widths = ReportTable(columns, []).column_widths(100 * mm)
        assert sum(widths) == pytest.approx(100 * mm)
        assert widths[0] == pytest.approx(widths[1])

    def test_widths_kept_when_they_fit(self):
        columns = [ReportColumn("A", str, 20), ReportColumn("B", str, 30)]
        widths = ReportTable(columns, []).column_widths(170 * mm)
        assert widths == [pytest.approx(20 * mm), pytest.approx(30 * mm)]


class TestRenderedReports:
    def test_orders_report_basics(self):
        report = orders_report(_orders(3), generated_at=GENERATED_AT)
        assert report.filename == "orders-report-2024-01-20.pdf"
        assert report.mimetype == "application/pdf"
        assert report.content.startswith(b"%PDF")
        assert report.row_count == 3
        assert report.page_count == 1

    def test_empty_input_renders_a_valid_document(self):
        report = orders_report([], generated_at=GENERATED_AT)
        assert report.content.startswith(b"%PDF")
        assert report.row_count == 0
        assert report.page_count == 1
        rows = dict(reporting_service.order_stats_rows([]))
        assert rows["Total Orders"] == "0"
        assert rows["Total Revenue"] == "$0.00"
        assert rows["Average Order Value"] == "$0.00"

    def test_many_rows_span_several_pages(self):
        report = orders_report(_orders(150), generated_at=GENERATED_AT, date_range=DateRange(date(2024, 1, 1), date(2024, 1, 31)))
        assert report.row_count == 150
        assert report.page_count > 1

    def test_selected_orders_only(self):
        orders = _orders(5)
        report = selected_orders_report([2, 4, 99], orders, generated_at=GENERATED_AT)
        assert report.row_count == 2

    def test_staff_report_with_attendance(self):
        staff = [
            staff_record(id=1, employee_id="EMP001"),
            staff_record(id=2, employee_id="EMP002", first_name="Sarah", last_name="Johnson"),
        ]
        attendance = [attendance_record(staff_id=1), attendance_record(staff_id=3, status="absent")]
        report = staff_report(staff, attendance, generated_at=GENERATED_AT, page_size="letter")
        assert report.filename == "staff-report-2024-01-20.pdf"
        assert report.content.startswith(b"%PDF")
        assert report.row_count == 2

    def test_staff_stats_rows(self):
        staff = [
            staff_record(id=1, salary_cents=5_000_000, hire_date=date(2024, 1, 3)),
            staff_record(id=2, status="on_leave", department="warehouse", salary_cents=3_000_000),
        ]
        rows = dict(reporting_service.staff_stats_rows(staff, today=date(2024, 1, 20)))
        assert rows["Total Staff"] == "2"
        assert rows["Active"] == "1"
        assert rows["On Leave"] == "1"
        assert rows["Departments"] == "2"
        assert rows["New Hires (This Month)"] == "1"
        assert rows["Average Salary"] == "$40,000.00"

    def test_unknown_page_size(self):
        with pytest.raises(ReportError):
            orders_report([], generated_at=GENERATED_AT, page_size="A0")


def _page_texts(report) -> list[str]:
    return [page.extract_text() or "" for page in PdfReader(BytesIO(report.content)).pages]


class TestPaging:
    def test_every_page_has_footer_and_repeated_header(self):
        report = orders_report(_orders(150), generated_at=GENERATED_AT)
        pages = _page_texts(report)
        total = len(pages)

        assert total == report.page_count > 1
        for number, text in enumerate(pages, start=1):
            assert f"Page {number} of {total}" in text
            assert "Pipes Manufacturing - Confidential" in text
            assert "Order #" in text

    def test_rows_are_split_across_pages_without_loss(self):
        report = orders_report(_orders(150), generated_at=GENERATED_AT)
        pages = _page_texts(report)
        assert sum(text.count("ORD-") for text in pages) == 150
        assert "Summary Statistics" in pages[0]
        assert all("Summary Statistics" not in text for text in pages[1:])

    def test_footer_uses_company_name(self):
        report = orders_report(_orders(2), generated_at=GENERATED_AT, company_name="Acme Tubes")
        (text,) = _page_texts(report)
        assert "Acme Tubes - Confidential" in text
        assert "Page 1 of 1" in text

    def test_attendance_summary_follows_staff_table(self):
        staff = [
            staff_record(id=i, employee_id=f"EMP{i:03d}", first_name="Worker", last_name=str(i),
                         email=f"w{i}@x.io")
            for i in range(1, 61)
        ]
        attendance = [attendance_record(staff_id=i) for i in range(1, 61)]
        report = staff_report(staff, attendance, generated_at=GENERATED_AT)
        pages = _page_texts(report)

        headed = [n for n, text in enumerate(pages) if "Attendance Summary" in text]
        assert len(headed) == 1
        assert sum(text.count("Attendance Summary") for text in pages) == 1

        page = headed[0]
        last_email = max(n for n, text in enumerate(pages) if "w60@x.io" in text)
        assert page >= last_email
        if page == last_email:
            text = pages[page]
            assert text.index("Attendance Summary") > text.index("w60@x.io")
        # the heading is never stranded without its table
        assert "Days Present" in pages[page]
        assert "Worker 1" in pages[page]

    def test_no_attendance_means_no_summary(self):
        report = staff_report([staff_record()], [], generated_at=GENERATED_AT)
        assert all("Attendance Summary" not in text for text in _page_texts(report))
