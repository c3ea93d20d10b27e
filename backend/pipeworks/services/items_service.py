# Overview: Service-layer operations for the pipe catalogue (inventory items).

from __future__ import annotations

from ..extensions import db
from ..models import Item, ITEM_CATEGORIES, ITEM_STATUSES
from ..validation import ModelValidationPolicy, NotFoundError, enforce_rules_item
from .filter_service import ItemFilters, apply_item_filters
from pipeworks.time_utils import utcnow


class ItemError(ValueError):
    """Raised for invalid item operations."""
    pass


ITEM_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "name", "description", "category",
        "diameter_mm", "length_m", "thickness_mm",
        "price_cents", "stock_quantity", "minimum_stock",
        "image", "material", "grade", "pressure", "temperature",
        "supplier", "status",
    }),
    required_on_create=frozenset({"name", "category", "diameter_mm", "length_m", "price_cents", "material"}),
    choices={"category": ITEM_CATEGORIES, "status": ITEM_STATUSES},
)


def list_items(filters: ItemFilters | None = None) -> list[Item]:
    items = db.session.query(Item).order_by(Item.name.asc(), Item.id.asc()).all()
    if filters is None:
        return items
    return apply_item_filters(filters, items)


def get_item(item_id: int) -> Item | None:
    return db.session.get(Item, item_id)


def _require_item(item_id: int) -> Item:
    item = get_item(item_id)
    if item is None:
        raise NotFoundError("Item not found")
    return item


def create_item(*, patch: dict) -> Item:
    enforce_rules_item(patch)
    item = Item(**patch)
    db.session.add(item)
    db.session.commit()
    return item


def update_item(item_id: int, *, patch: dict) -> Item:
    item = _require_item(item_id)
    enforce_rules_item(patch)
    for k, v in patch.items():
        if k not in ITEM_POLICY.writable_fields:
            continue
        setattr(item, k, v)
    item.updated_at = utcnow()
    db.session.commit()
    return item


def adjust_stock(item_id: int, *, delta: int) -> Item:
    """Add (or with a negative delta, remove) units; stock never goes below zero."""
    item = _require_item(item_id)
    new_quantity = (item.stock_quantity or 0) + delta
    if new_quantity < 0:
        raise ItemError(f"Insufficient stock for {item.name}: {item.stock_quantity} on hand")
    item.stock_quantity = new_quantity
    item.updated_at = utcnow()
    db.session.commit()
    return item


def delete_item(item_id: int) -> None:
    item = _require_item(item_id)
    db.session.delete(item)
    db.session.commit()


def low_stock_items() -> list[Item]:
    return list_items(ItemFilters(low_stock_only=True))
