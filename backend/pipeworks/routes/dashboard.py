# Overview: Flask API route for the admin dashboard summary.

from flask import Blueprint, jsonify

from ..services import items_service, orders_service, statistics_service

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
def dashboard_route():
    return jsonify(
        statistics_service.dashboard_metrics(
            orders_service.list_orders(),
            items_service.list_items(),
        )
    )
