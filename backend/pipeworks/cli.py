# Overview: Flask CLI command groups for demo seeding and offline report generation.

# backend/pipeworks/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# The default store is in-memory, so these commands act on the records that
# exist inside the CLI process. Set DATABASE_URL for a persistent file.
#
# Demo data:
# - python -m flask seed demo
#   Insert sample items, staff, attendance and orders (skipped if staff exist).
#
# Reports:
# - python -m flask reports orders --out ./reports [--no-stats]
#   Write orders-report-YYYY-MM-DD.pdf for every order.
# - python -m flask reports staff --out ./reports [--with-attendance]
#   Write staff-report-YYYY-MM-DD.pdf, optionally with the attendance summary.

import os

import click
from flask import current_app
from flask.cli import with_appcontext

from .seed import seed_demo_data
from .services import attendance_service, orders_service, reporting_service, staff_service


@click.group('seed')
def seed_group():
    """Sample data commands."""


@seed_group.command('demo')
@with_appcontext
def seed_demo():
    """Insert the demo catalogue, staff, attendance and orders."""
    created = seed_demo_data()
    if not any(created.values()):
        click.echo("SKIP Staff records already exist")
        return
    for entity, count in created.items():
        click.echo(f"PASS {entity}: {count}")


@click.group('reports')
def reports_group():
    """Offline PDF report generation."""


def _write_report(report, out_dir: str) -> None:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, report.filename)
    with open(path, "wb") as fh:
        fh.write(report.content)
    click.echo(f"PASS Wrote {path} ({report.row_count} rows, {report.page_count} pages)")


def _report_options() -> dict:
    return {
        "company_name": current_app.config["COMPANY_NAME"],
        "page_size": current_app.config["REPORT_PAGE_SIZE"],
    }


@reports_group.command('orders')
@click.option('--out', 'out_dir', default='.', show_default=True, help='Output directory')
@click.option('--no-stats', is_flag=True, help='Omit the summary statistics block')
@with_appcontext
def orders_report(out_dir, no_stats):
    """Render every order into a PDF report."""
    orders = orders_service.list_orders()
    try:
        report = reporting_service.orders_report(orders, include_stats=not no_stats, **_report_options())
    except reporting_service.ReportError as exc:
        raise click.ClickException(str(exc))
    _write_report(report, out_dir)


@reports_group.command('staff')
@click.option('--out', 'out_dir', default='.', show_default=True, help='Output directory')
@click.option('--with-attendance', is_flag=True, help='Append the attendance summary table')
@with_appcontext
def staff_report(out_dir, with_attendance):
    """Render every staff member into a PDF report."""
    staff = staff_service.list_staff()
    attendance = attendance_service.list_attendance() if with_attendance else None
    try:
        report = reporting_service.staff_report(staff, attendance, **_report_options())
    except reporting_service.ReportError as exc:
        raise click.ClickException(str(exc))
    _write_report(report, out_dir)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(seed_group)
    app.cli.add_command(reports_group)
