# Overview: Tabular PDF report rendering for orders and staff; pure layout over record snapshots.

"""
Reporting Service

A report is one PDF built in a single synchronous pass from a snapshot of
records handed in by the caller:

1. header block (company, "Admin Dashboard Report", title, generated-on, rule)
2. optional statistics block (bold label / value pairs)
3. optional "Report Period" line
4. striped data table; header row repeats on every page and designated
   columns are recoloured by status / priority
5. optional secondary table, moved to a new page when little room is left
6. footer on every page: company confidentiality tag and "Page N of M"

An empty record list renders an empty table, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from typing import Any, Callable, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    CondPageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus.flowables import HRFlowable

from pipeworks.services import statistics_service
from pipeworks.time_utils import utcnow


class ReportError(ValueError):
    """Raised when report generation fails."""
    pass


RGB = tuple[int, int, int]

REPORT_KINDS = ("orders", "staff")
PAGE_SIZES = {"A4": A4, "LETTER": letter}

DEFAULT_COMPANY_NAME = "Pipes Manufacturing"
PAGE_MARGIN = 20 * mm
FOOTER_OFFSET = 10 * mm
# Below this much free space the secondary table starts on a fresh page
SECONDARY_MIN_SPACE = 80 * mm

BRAND_RED: RGB = (220, 53, 69)
ALT_ROW: RGB = (248, 249, 250)
SEPARATOR: RGB = (200, 200, 200)

YELLOW: RGB = (255, 235, 59)
BLUE: RGB = (33, 150, 243)
PURPLE: RGB = (156, 39, 176)
GREEN: RGB = (76, 175, 80)
RED: RGB = (244, 67, 54)
ORANGE: RGB = (255, 152, 0)
GRAY: RGB = (158, 158, 158)

STATUS_COLORS: dict[str, RGB] = {
    "pending": YELLOW,
    "confirmed": BLUE,
    "processing": PURPLE,
    "shipped": BLUE,
    "delivered": GREEN,
    "cancelled": RED,
}
PRIORITY_COLORS: dict[str, RGB] = {
    "urgent": RED,
    "high": ORANGE,
    "medium": YELLOW,
    "low": GREEN,
}


def status_color(status: str | None) -> RGB:
    return STATUS_COLORS.get(status or "", GRAY)


def priority_color(priority: str | None) -> RGB:
    return PRIORITY_COLORS.get(priority or "", GRAY)


def to_color(rgb: RGB) -> colors.Color:
    r, g, b = rgb
    return colors.Color(r / 255.0, g / 255.0, b / 255.0)


# =============================================================================
# FORMATTING
# =============================================================================

def format_currency(cents: float | int | None) -> str:
    amount = (cents or 0) / 100.0
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value:%b} {value.day}, {value.year}"


def format_label(value: str | None) -> str:
    return (value or "").replace("_", " ").upper()


def report_filename(kind: str, on: date) -> str:
    if kind not in REPORT_KINDS:
        raise ReportError(f"report kind must be one of: {', '.join(REPORT_KINDS)}")
    return f"{kind}-report-{on.isoformat()}.pdf"


# =============================================================================
# TABLE MODEL
# =============================================================================

@dataclass(frozen=True)
class ReportColumn:
    header: str
    extractor: Callable[[Any], str]
    width_mm: float | None = None
    color_rule: Callable[[Any], RGB | None] | None = None


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def caption(self) -> str:
        return f"Report Period: {format_date(self.start)} - {format_date(self.end)}"


@dataclass
class ReportTable:
    columns: Sequence[ReportColumn]
    records: Sequence[Any]
    title: str | None = None
    font_size: float = 8
    padding: float = 3

    def header(self) -> list[str]:
        return [c.header for c in self.columns]

    def rows(self) -> list[list[str]]:
        return [[str(c.extractor(record)) for c in self.columns] for record in self.records]

    def cell_fills(self) -> dict[tuple[int, int], RGB]:
        """Recoloured body cells keyed by (record index, column index)."""
        fills: dict[tuple[int, int], RGB] = {}
        for col_idx, column in enumerate(self.columns):
            if column.color_rule is None:
                continue
            for row_idx, record in enumerate(self.records):
                rgb = column.color_rule(record)
                if rgb is not None:
                    fills[(row_idx, col_idx)] = rgb
        return fills

    def style_commands(self) -> list[tuple]:
        commands: list[tuple] = [
            ("BACKGROUND", (0, 0), (-1, 0), to_color(BRAND_RED)),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, to_color(ALT_ROW)]),
            ("LINEBELOW", (0, 0), (-1, -1), 0.25, to_color(SEPARATOR)),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, -1), self.padding),
            ("RIGHTPADDING", (0, 0), (-1, -1), self.padding),
            ("TOPPADDING", (0, 0), (-1, -1), self.padding),
            ("BOTTOMPADDING", (0, 0), (-1, -1), self.padding),
        ]
        # Body rows start at table row 1 (row 0 is the header)
        for (row_idx, col_idx), rgb in sorted(self.cell_fills().items()):
            cell = (col_idx, row_idx + 1)
            commands.append(("BACKGROUND", cell, cell, to_color(rgb)))
        return commands

    def column_widths(self, available: float) -> list[float]:
        """
        Fixed widths are honoured unless they overflow the frame, in which
        case every column is scaled down proportionally. Unsized columns
        share whatever is left.
        """
        fixed = [c.width_mm * mm if c.width_mm else None for c in self.columns]
        used = sum(w for w in fixed if w is not None)
        unsized = sum(1 for w in fixed if w is None)
        share = max(available - used, 0) / unsized if unsized else 0
        if unsized and share < 15 * mm:
            share = 15 * mm
        widths = [w if w is not None else share for w in fixed]
        total = sum(widths)
        if total > available and total > 0:
            scale = available / total
            widths = [w * scale for w in widths]
        return widths

    def build(self, available: float) -> Table:
        head_style = ParagraphStyle(
            "ReportTableHead",
            fontName="Helvetica-Bold",
            fontSize=self.font_size,
            leading=self.font_size + 2,
            textColor=colors.white,
        )
        body_style = ParagraphStyle(
            "ReportTableBody",
            fontName="Helvetica",
            fontSize=self.font_size,
            leading=self.font_size + 2,
        )
        data = [[Paragraph(escape(h), head_style) for h in self.header()]]
        for row in self.rows():
            data.append([Paragraph(escape(value), body_style) for value in row])

        table = Table(data, colWidths=self.column_widths(available), repeatRows=1)
        table.setStyle(TableStyle(self.style_commands()))
        return table


@dataclass(frozen=True)
class RenderedReport:
    filename: str
    content: bytes
    page_count: int
    row_count: int
    mimetype: str = "application/pdf"


@dataclass
class _Styles:
    company: ParagraphStyle = field(default_factory=lambda: ParagraphStyle(
        "Company", fontName="Helvetica-Bold", fontSize=24, leading=28))
    subtitle: ParagraphStyle = field(default_factory=lambda: ParagraphStyle(
        "Subtitle", fontName="Helvetica", fontSize=12, leading=16))
    title: ParagraphStyle = field(default_factory=lambda: ParagraphStyle(
        "Title", fontName="Helvetica-Bold", fontSize=18, leading=22, spaceBefore=8))
    small: ParagraphStyle = field(default_factory=lambda: ParagraphStyle(
        "Small", fontName="Helvetica", fontSize=10, leading=13))
    heading: ParagraphStyle = field(default_factory=lambda: ParagraphStyle(
        "Heading", fontName="Helvetica-Bold", fontSize=14, leading=18, spaceAfter=6))


# =============================================================================
# PAGE FOOTER
# =============================================================================

def _numbered_canvas(footer_text: str, page_counts: list[int]):
    """
    Canvas factory that defers page output until the total is known so
    every footer can read "Page N of M".
    """

    class NumberedCanvas(canvas.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states: list[dict] = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            for state in self._saved_page_states:
                self.__dict__.update(state)
                self._draw_footer(total)
                super().showPage()
            page_counts.append(total)
            super().save()

        def _draw_footer(self, total: int) -> None:
            width, _ = self._pagesize
            self.saveState()
            self.setFont("Helvetica", 8)
            self.setFillColor(colors.black)
            self.drawString(PAGE_MARGIN, FOOTER_OFFSET, footer_text)
            self.drawRightString(
                width - PAGE_MARGIN,
                FOOTER_OFFSET,
                f"Page {self._pageNumber} of {total}",
            )
            self.restoreState()

    return NumberedCanvas


# =============================================================================
# RENDERER
# =============================================================================

def _stats_block(title: str, stats: Sequence[tuple[str, str]], styles: _Styles) -> list:
    stats_table = Table([list(row) for row in stats], colWidths=[50 * mm, 30 * mm], hAlign="LEFT")
    stats_table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("LEFTPADDING", (0, 0), (-1, -1), 2),
        ("RIGHTPADDING", (0, 0), (-1, -1), 2),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
    ]))
    return [Spacer(1, 4 * mm), Paragraph(escape(title), styles.heading), stats_table]


def render_tabular_report(
    *,
    kind: str,
    title: str,
    table: ReportTable,
    stats: Sequence[tuple[str, str]] | None = None,
    stats_title: str = "Summary Statistics",
    date_range: DateRange | None = None,
    secondary: ReportTable | None = None,
    generated_at: datetime | None = None,
    company_name: str = DEFAULT_COMPANY_NAME,
    page_size: str = "A4",
) -> RenderedReport:
    generated_at = generated_at or utcnow()
    filename = report_filename(kind, generated_at.date())

    pagesize = PAGE_SIZES.get((page_size or "").upper())
    if pagesize is None:
        raise ReportError(f"page size must be one of: {', '.join(PAGE_SIZES)}")

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=pagesize,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=title,
        author=company_name,
    )
    styles = _Styles()

    story: list = [
        Paragraph(escape(company_name), styles.company),
        Paragraph("Admin Dashboard Report", styles.subtitle),
        Paragraph(escape(title), styles.title),
        Paragraph(f"Generated on: {generated_at:%b %d, %Y %I:%M %p}", styles.small),
        HRFlowable(width="100%", thickness=0.7, color=to_color(SEPARATOR), spaceBefore=4, spaceAfter=4),
    ]

    if stats is not None:
        story.extend(_stats_block(stats_title, stats, styles))

    if date_range is not None:
        story.extend([Spacer(1, 3 * mm), Paragraph(date_range.caption(), styles.small)])

    story.extend([Spacer(1, 5 * mm), table.build(doc.width)])

    if secondary is not None:
        story.append(CondPageBreak(SECONDARY_MIN_SPACE))
        story.append(Spacer(1, 6 * mm))
        if secondary.title:
            story.append(Paragraph(escape(secondary.title), styles.heading))
        story.append(secondary.build(doc.width))

    page_counts: list[int] = []
    doc.build(story, canvasmaker=_numbered_canvas(f"{company_name} - Confidential", page_counts))

    return RenderedReport(
        filename=filename,
        content=buffer.getvalue(),
        page_count=page_counts[-1] if page_counts else 0,
        row_count=len(table.records),
    )


# =============================================================================
# ORDERS REPORT
# =============================================================================

ORDER_COLUMNS: tuple[ReportColumn, ...] = (
    ReportColumn("Order #", lambda o: o.order_number, 20),
    ReportColumn("Customer", lambda o: o.customer_name, 25),
    ReportColumn("Company", lambda o: o.customer_company or "", 30),
    ReportColumn("Items", lambda o: str(len(o.lines or [])), 12),
    ReportColumn("Status", lambda o: format_label(o.status), 20, lambda o: status_color(o.status)),
    ReportColumn("Priority", lambda o: format_label(o.priority), 15, lambda o: priority_color(o.priority)),
    ReportColumn("Total", lambda o: format_currency(o.total_amount_cents), 20),
    ReportColumn("Date", lambda o: format_date(o.created_at), 20),
    ReportColumn("Assigned To", lambda o: o.assigned_to or "Unassigned", 25),
)


def order_stats_rows(orders: Sequence[Any]) -> list[tuple[str, str]]:
    stats = statistics_service.order_stats(orders)
    return [
        ("Total Orders", str(stats["total"])),
        ("Pending", str(stats["pending"])),
        ("Processing", str(stats["processing"])),
        ("Shipped", str(stats["shipped"])),
        ("Delivered", str(stats["delivered"])),
        ("Cancelled/Returned", str(stats["cancelled"])),
        ("Total Revenue", format_currency(stats["total_revenue_cents"])),
        ("Average Order Value", format_currency(stats["average_order_value_cents"])),
    ]


def orders_report(
    orders: Sequence[Any],
    *,
    include_stats: bool = True,
    date_range: DateRange | None = None,
    generated_at: datetime | None = None,
    company_name: str = DEFAULT_COMPANY_NAME,
    page_size: str = "A4",
) -> RenderedReport:
    orders = list(orders)
    return render_tabular_report(
        kind="orders",
        title="Orders Report",
        table=ReportTable(ORDER_COLUMNS, orders),
        stats=order_stats_rows(orders) if include_stats else None,
        date_range=date_range,
        generated_at=generated_at,
        company_name=company_name,
        page_size=page_size,
    )


def selected_orders_report(
    order_ids: Sequence[int],
    orders: Sequence[Any],
    **kwargs: Any,
) -> RenderedReport:
    wanted = set(order_ids)
    selected = [o for o in orders if o.id in wanted]
    kwargs.setdefault("include_stats", True)
    return orders_report(selected, **kwargs)


# =============================================================================
# STAFF REPORT
# =============================================================================

STAFF_COLUMNS: tuple[ReportColumn, ...] = (
    ReportColumn("Employee ID", lambda s: s.employee_id, 20),
    ReportColumn("Name", lambda s: f"{s.first_name} {s.last_name}", 30),
    ReportColumn("Email", lambda s: s.email, 35),
    ReportColumn("Department", lambda s: format_label(s.department), 25),
    ReportColumn("Role", lambda s: format_label(s.role), 25),
    ReportColumn("Job Title", lambda s: s.job_title, 25),
    ReportColumn("Salary", lambda s: format_currency(s.salary_cents), 20),
    ReportColumn("Status", lambda s: format_label(s.status), 15),
    ReportColumn("Hire Date", lambda s: format_date(s.hire_date), 20),
)

ATTENDANCE_SUMMARY_COLUMNS: tuple[ReportColumn, ...] = (
    ReportColumn("Employee", lambda row: row["name"]),
    ReportColumn("ID", lambda row: row["employee_id"]),
    ReportColumn("Days Present", lambda row: str(row["days_present"])),
    ReportColumn("Days Absent", lambda row: str(row["days_absent"])),
    ReportColumn("Total Hours", lambda row: f"{row['total_hours']:.1f}"),
    ReportColumn("Late Days", lambda row: str(row["late_days"])),
)


def staff_stats_rows(staff: Sequence[Any], *, today: date) -> list[tuple[str, str]]:
    stats = statistics_service.staff_stats(staff, (), today=today)
    return [
        ("Total Staff", str(stats["total_staff"])),
        ("Active", str(stats["active_staff"])),
        ("Inactive", str(stats["inactive"])),
        ("On Leave", str(stats["on_leave"])),
        ("Departments", str(stats["total_departments"])),
        ("New Hires (This Month)", str(stats["new_hires"])),
        ("Average Salary", format_currency(stats["avg_salary_cents"])),
    ]


def staff_report(
    staff: Sequence[Any],
    attendance: Sequence[Any] | None = None,
    *,
    include_stats: bool = True,
    date_range: DateRange | None = None,
    generated_at: datetime | None = None,
    company_name: str = DEFAULT_COMPANY_NAME,
    page_size: str = "A4",
) -> RenderedReport:
    staff = list(staff)
    generated_at = generated_at or utcnow()

    secondary = None
    if attendance:
        secondary = ReportTable(
            ATTENDANCE_SUMMARY_COLUMNS,
            statistics_service.attendance_rollup(attendance, staff),
            title="Attendance Summary",
        )

    return render_tabular_report(
        kind="staff",
        title="Staff Report",
        table=ReportTable(STAFF_COLUMNS, staff),
        stats=staff_stats_rows(staff, today=generated_at.date()) if include_stats else None,
        stats_title="Staff Summary",
        date_range=date_range,
        secondary=secondary,
        generated_at=generated_at,
        company_name=company_name,
        page_size=page_size,
    )
