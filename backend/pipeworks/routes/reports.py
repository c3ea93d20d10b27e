# Overview: Flask API routes for PDF report downloads.

"""
Report Routes

Both endpoints accept the same query params as the matching list endpoint
plus:
- include_stats=true|false (default true)
- from / to: ISO dates; narrow the records and print a "Report Period" line
- ids=1,2,3 (orders only): render just the selected orders
- include_attendance=true (staff only): append the attendance summary
"""

from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, send_file

from ..services import attendance_service, orders_service, reporting_service, staff_service
from ..services.filter_service import AttendanceFilters, OrderFilters, StaffFilters, merge
from ..validation import ValidationError
from pipeworks.time_utils import parse_iso_date

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _flag(name: str, default: bool) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _period():
    try:
        start = parse_iso_date(request.args.get("from"))
        end = parse_iso_date(request.args.get("to"))
    except ValueError:
        raise ValidationError("from/to must be ISO-8601 dates")
    if start and end and start > end:
        raise ValidationError("from must not be after to")
    return start, end


def _report_options(start, end) -> dict:
    return {
        "date_range": reporting_service.DateRange(start, end) if start and end else None,
        "company_name": current_app.config["COMPANY_NAME"],
        "page_size": current_app.config["REPORT_PAGE_SIZE"],
    }


def _send(report):
    current_app.logger.info(
        "Generated %s (%d rows, %d pages)", report.filename, report.row_count, report.page_count
    )
    return send_file(
        BytesIO(report.content),
        mimetype=report.mimetype,
        as_attachment=True,
        download_name=report.filename,
    )


@reports_bp.get("/orders")
def orders_report_route():
    try:
        start, end = _period()
        filters = OrderFilters.from_args(request.args)
        if start or end:
            filters = merge(filters, date_from=start, date_to=end)
        orders = orders_service.list_orders(filters)
        include_stats = _flag("include_stats", True)
        options = _report_options(start, end)

        if request.args.get("ids"):
            ids = [int(v) for v in request.args["ids"].split(",") if v.strip()]
            report = reporting_service.selected_orders_report(
                ids, orders, include_stats=include_stats, **options
            )
        else:
            report = reporting_service.orders_report(orders, include_stats=include_stats, **options)
    except ValueError as e:
        # ValidationError, ReportError and malformed ids
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to generate orders report")
        return jsonify({"error": "Internal server error"}), 500

    return _send(report)


@reports_bp.get("/staff")
def staff_report_route():
    try:
        start, end = _period()
        staff = staff_service.list_staff(StaffFilters.from_args(request.args))
        attendance = None
        if _flag("include_attendance", False):
            staff_ids = tuple(s.id for s in staff)
            attendance = attendance_service.list_attendance(
                AttendanceFilters(date_from=start, date_to=end)
            )
            attendance = [r for r in attendance if r.staff_id in staff_ids]

        report = reporting_service.staff_report(
            staff,
            attendance,
            include_stats=_flag("include_stats", True),
            **_report_options(start, end),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to generate staff report")
        return jsonify({"error": "Internal server error"}), 500

    return _send(report)
