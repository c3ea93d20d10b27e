# Overview: Flask API routes for customer orders; parses input and returns JSON responses.

"""
Order Routes

Lifecycle labels are free to move in any direction; every change is
recorded in the order's status history.
"""

from flask import Blueprint, current_app, jsonify, request

from ..extensions import db
from ..models import Order, OrderLine
from ..services import orders_service, statistics_service
from ..services.filter_service import OrderFilters
from ..services.orders_service import LINE_POLICY, ORDER_POLICY, OrderError
from ..validation import NotFoundError, ValidationError, validate_payload

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _actor(data: dict) -> str:
    return str(data.get("updated_by") or data.get("created_by") or "system").strip() or "system"


def _int_list(value, name: str) -> list[int]:
    if not isinstance(value, list) or not value:
        raise ValidationError(f"{name} must be a non-empty list")
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in value):
        raise ValidationError(f"{name} must contain integers")
    return value


@orders_bp.get("")
def list_orders_route():
    """
    Query params: status, priority, payment_status (repeat or comma-separate),
    customer, order_number, search, assigned_to, tags, min_amount_cents,
    max_amount_cents, date_from, date_to
    """
    try:
        filters = OrderFilters.from_args(request.args)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    include_history = request.args.get("include_history", "false").lower() == "true"
    orders = orders_service.list_orders(filters)
    return jsonify({
        "orders": [o.to_dict(include_history=include_history) for o in orders],
        "count": len(orders),
    })


@orders_bp.get("/stats")
def order_stats_route():
    try:
        filters = OrderFilters.from_args(request.args)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(statistics_service.order_stats(orders_service.list_orders(filters)))


@orders_bp.get("/<int:order_id>")
def get_order_route(order_id: int):
    order = orders_service.get_order(order_id)
    if order is None:
        return jsonify({"error": "Order not found"}), 404
    return jsonify(order.to_dict())


@orders_bp.post("")
def create_order_route():
    """
    Body: order fields plus "items": [{item_id?, name?, quantity, unit_price_cents?, ...}]
    """
    data = request.get_json(silent=True) or {}
    payload = {k: v for k, v in data.items() if k not in ("items", "created_by")}
    raw_lines = data.get("items")

    try:
        if not isinstance(raw_lines, list) or not raw_lines:
            raise ValidationError("items must be a non-empty list")
        patch = validate_payload(model=Order, payload=payload, policy=ORDER_POLICY, partial=False)
        lines = [
            validate_payload(model=OrderLine, payload=raw, policy=LINE_POLICY, partial=False)
            for raw in raw_lines
        ]
        order = orders_service.create_order(patch=patch, lines=lines, created_by=_actor(data))
    except (ValidationError, OrderError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(order.to_dict()), 201


@orders_bp.put("/<int:order_id>")
def update_order_route(order_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Order, payload=payload, policy=ORDER_POLICY, partial=True)
        order = orders_service.update_order(order_id, patch=patch)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, OrderError) as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    return jsonify(order.to_dict())


@orders_bp.patch("/<int:order_id>/status")
def update_status_route(order_id: int):
    data = request.get_json(silent=True) or {}
    try:
        order = orders_service.update_order_status(
            order_id,
            status=data.get("status"),
            notes=data.get("notes"),
            updated_by=_actor(data),
            location=data.get("location"),
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, OrderError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(order.to_dict())


@orders_bp.patch("/<int:order_id>/priority")
def update_priority_route(order_id: int):
    data = request.get_json(silent=True) or {}
    try:
        order = orders_service.update_order_priority(order_id, priority=data.get("priority"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(order.to_dict())


@orders_bp.patch("/<int:order_id>/payment")
def update_payment_route(order_id: int):
    data = request.get_json(silent=True) or {}
    try:
        order = orders_service.update_payment_status(order_id, payment_status=data.get("payment_status"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(order.to_dict())


@orders_bp.patch("/<int:order_id>/assign")
def assign_route(order_id: int):
    data = request.get_json(silent=True) or {}
    assigned_to = data.get("assigned_to")
    if assigned_to is not None and not isinstance(assigned_to, str):
        return jsonify({"error": "assigned_to must be a string or null"}), 400
    try:
        order = orders_service.assign_order(order_id, assigned_to=assigned_to)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(order.to_dict())


@orders_bp.post("/<int:order_id>/tags")
def add_tag_route(order_id: int):
    data = request.get_json(silent=True) or {}
    try:
        order = orders_service.add_tag(order_id, tag=data.get("tag"))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(order.to_dict())


@orders_bp.delete("/<int:order_id>/tags/<tag>")
def remove_tag_route(order_id: int, tag: str):
    try:
        order = orders_service.remove_tag(order_id, tag=tag)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(order.to_dict())


@orders_bp.post("/bulk")
def bulk_action_route():
    """
    Body: {"action": "update_status" | "assign_to" | "add_tag" | "remove_tag",
           "value": ..., "order_ids": [1, 2, 3]}
    """
    data = request.get_json(silent=True) or {}
    try:
        result = orders_service.perform_bulk_action(
            action=data.get("action"),
            value=data.get("value"),
            order_ids=_int_list(data.get("order_ids"), "order_ids"),
            updated_by=_actor(data),
        )
    except (ValidationError, OrderError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to apply bulk order action")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(result)


@orders_bp.delete("/<int:order_id>")
def delete_order_route(order_id: int):
    try:
        orders_service.delete_order(order_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True})
