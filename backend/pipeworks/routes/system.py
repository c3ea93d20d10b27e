# backend/pipeworks/routes/system.py
"""
System health endpoint.

Reports store reachability and record counts; useful after a restart since
the default store is in-memory and starts empty.
"""

import time

from flask import Blueprint, current_app

from ..extensions import db
from ..models import AttendanceRecord, Item, Order, Role, Staff
from pipeworks.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        details = {
            "items": db.session.query(Item).count(),
            "orders": db.session.query(Order).count(),
            "staff": db.session.query(Staff).count(),
            "attendance_records": db.session.query(AttendanceRecord).count(),
            "roles": db.session.query(Role).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: store reachable
    - 503: store unreachable
    """
    database_health = check_database_health()
    healthy = database_health["status"] == "healthy"

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {"database": database_health},
    }
    return response, 200 if healthy else 503
