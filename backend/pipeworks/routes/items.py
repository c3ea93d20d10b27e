# Overview: Flask API routes for inventory items; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..models import Item
from ..services import items_service, statistics_service
from ..services.filter_service import ItemFilters
from ..services.items_service import ITEM_POLICY, ItemError
from ..validation import NotFoundError, ValidationError, validate_payload

items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
def list_items_route():
    """
    Query params: category, status (repeat or comma-separate), search,
    min_price_cents, max_price_cents, low_stock=true
    """
    try:
        filters = ItemFilters.from_args(request.args)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    items = items_service.list_items(filters)
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)})


@items_bp.get("/stats")
def item_stats_route():
    return jsonify(statistics_service.item_stats(items_service.list_items()))


@items_bp.get("/low-stock")
def low_stock_route():
    items = items_service.low_stock_items()
    return jsonify({
        "items": [
            {**i.to_dict(), "priority": statistics_service.low_stock_priority(i)}
            for i in items
        ],
        "count": len(items),
    })


@items_bp.get("/<int:item_id>")
def get_item_route(item_id: int):
    item = items_service.get_item(item_id)
    if item is None:
        return jsonify({"error": "Item not found"}), 404
    return jsonify(item.to_dict())


@items_bp.post("")
def create_item_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=False)
        item = items_service.create_item(patch=patch)
    except (ValidationError, ItemError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(item.to_dict()), 201


@items_bp.put("/<int:item_id>")
def update_item_route(item_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Item, payload=payload, policy=ITEM_POLICY, partial=True)
        item = items_service.update_item(item_id, patch=patch)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, ItemError) as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(item.to_dict())


@items_bp.patch("/<int:item_id>/stock")
def adjust_stock_route(item_id: int):
    data = request.get_json(silent=True) or {}
    delta = data.get("delta")
    if not isinstance(delta, int) or isinstance(delta, bool):
        return jsonify({"error": "delta must be an integer"}), 400
    try:
        item = items_service.adjust_stock(item_id, delta=delta)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ItemError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(item.to_dict())


@items_bp.delete("/<int:item_id>")
def delete_item_route(item_id: int):
    try:
        items_service.delete_item(item_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True})
