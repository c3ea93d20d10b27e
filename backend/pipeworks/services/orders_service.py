# Overview: Service-layer operations for customer orders; encapsulates business logic.

"""
Orders Service

LIFECYCLE: every order starts "pending" with one history entry. Each status
change appends a history entry; history is never edited or removed (except
with the order itself).

INVARIANTS:
- total_amount_cents = subtotal + tax + shipping - discount
- subtotal_cents = sum(line.total_price_cents)
- the latest history entry's status equals order.status
- history timestamps never go backwards
"""

from __future__ import annotations

import re

from flask import current_app

from ..extensions import db
from ..models import (
    Item,
    Order,
    OrderLine,
    OrderStatusHistory,
    ORDER_STATUSES,
    PAYMENT_STATUSES,
    PRIORITIES,
)
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_order,
    enforce_rules_order_line,
    require_choice,
)
from .filter_service import OrderFilters, apply_order_filters
from pipeworks.time_utils import today, utcnow


class OrderError(ValueError):
    """Raised for invalid order operations."""
    pass


ORDER_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "customer_name", "customer_email", "customer_phone", "customer_company",
        "customer_street", "customer_city", "customer_state", "customer_zip_code", "customer_country",
        "priority", "payment_status",
        "tax_cents", "shipping_cost_cents", "discount_cents",
        "shipping_method", "shipping_carrier", "tracking_number",
        "estimated_delivery", "actual_delivery",
        "shipping_street", "shipping_city", "shipping_state", "shipping_zip_code", "shipping_country",
        "notes", "internal_notes", "assigned_to", "tags",
        "due_date", "estimated_completion",
    }),
    required_on_create=frozenset({"customer_name"}),
    choices={"priority": PRIORITIES, "payment_status": PAYMENT_STATUSES},
)

LINE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({
        "item_id", "name", "category", "diameter_mm", "length_m",
        "material", "grade", "pressure", "quantity", "unit_price_cents",
    }),
    required_on_create=frozenset({"quantity"}),
)

BULK_ACTIONS = ("update_status", "assign_to", "add_tag", "remove_tag")

# Catalogue fields copied onto a line when the payload leaves them out
_SNAPSHOT_FIELDS = ("name", "category", "diameter_mm", "length_m", "material", "grade", "pressure")

_ORDER_NUMBER = re.compile(r"^ORD-(\d{4})-(\d+)$")


def list_orders(filters: OrderFilters | None = None) -> list[Order]:
    orders = (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    if filters is None:
        return orders
    return apply_order_filters(filters, orders)


def get_order(order_id: int) -> Order | None:
    return db.session.get(Order, order_id)


def get_orders_by_ids(order_ids) -> list[Order]:
    wanted = list(order_ids)
    if not wanted:
        return []
    return (
        db.session.query(Order)
        .filter(Order.id.in_(wanted))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def _require_order(order_id: int) -> Order:
    order = get_order(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def next_order_number(year: int | None = None) -> str:
    """ORD-YYYY-NNN, one past the highest sequence used this year."""
    year = year or today().year
    prefix = f"ORD-{year}-"
    numbers = (
        db.session.query(Order.order_number)
        .filter(Order.order_number.like(f"{prefix}%"))
        .all()
    )
    highest = 0
    for (number,) in numbers:
        match = _ORDER_NUMBER.match(number)
        if match:
            highest = max(highest, int(match.group(2)))
    return f"{prefix}{highest + 1:03d}"


def _build_line(raw: dict) -> OrderLine:
    line = dict(raw)
    item_id = line.get("item_id")
    if item_id is not None:
        item = db.session.get(Item, item_id)
        if item is None:
            raise ValidationError(f"Item {item_id} not found")
        for key in _SNAPSHOT_FIELDS:
            if line.get(key) is None:
                line[key] = getattr(item, key)
        if line.get("unit_price_cents") is None:
            line["unit_price_cents"] = item.price_cents

    if not line.get("name"):
        raise ValidationError("Each line needs an item_id or a name")
    enforce_rules_order_line(line)

    return OrderLine(
        item_id=item_id,
        name=line["name"],
        category=line.get("category"),
        diameter_mm=line.get("diameter_mm"),
        length_m=line.get("length_m"),
        material=line.get("material"),
        grade=line.get("grade"),
        pressure=line.get("pressure"),
        quantity=line["quantity"],
        unit_price_cents=line["unit_price_cents"],
        total_price_cents=line["quantity"] * line["unit_price_cents"],
    )


def recalculate_totals(order: Order) -> None:
    order.subtotal_cents = sum(line.total_price_cents for line in order.lines)
    total = (
        order.subtotal_cents
        + (order.tax_cents or 0)
        + (order.shipping_cost_cents or 0)
        - (order.discount_cents or 0)
    )
    if total < 0:
        raise OrderError("Discount exceeds order value")
    order.total_amount_cents = total


def _append_history(
    order: Order,
    *,
    status: str,
    updated_by: str,
    notes: str | None = None,
    location: str | None = None,
) -> OrderStatusHistory:
    timestamp = utcnow()
    if order.status_history:
        timestamp = max(timestamp, order.status_history[-1].timestamp)
    entry = OrderStatusHistory(
        status=status,
        timestamp=timestamp,
        updated_by=updated_by,
        notes=notes,
        location=location,
    )
    order.status_history.append(entry)
    return entry


def create_order(*, patch: dict, lines: list[dict], created_by: str = "system") -> Order:
    """
    Create an order from a validated patch plus line payloads.

    Lines referencing an item_id are snapshotted from the catalogue. When
    tax_cents is omitted it is ORDER_TAX_RATE x subtotal.
    """
    if not lines:
        raise ValidationError("Order must have at least one line")
    enforce_rules_order(patch)

    order = Order(**patch)
    order.order_number = next_order_number()
    order.status = "pending"
    order.tags = list(patch.get("tags") or [])
    for raw in lines:
        order.lines.append(_build_line(raw))

    if patch.get("tax_cents") is None:
        rate = current_app.config.get("ORDER_TAX_RATE", 0.0)
        order.tax_cents = int(round(sum(line.total_price_cents for line in order.lines) * rate))
    recalculate_totals(order)

    _append_history(order, status="pending", updated_by=created_by, notes="Order created")

    db.session.add(order)
    db.session.commit()
    return order


def update_order(order_id: int, *, patch: dict) -> Order:
    order = _require_order(order_id)
    enforce_rules_order(patch)
    for k, v in patch.items():
        if k not in ORDER_POLICY.writable_fields:
            continue
        setattr(order, k, list(v) if k == "tags" else v)
    recalculate_totals(order)
    order.updated_at = utcnow()
    db.session.commit()
    return order


def _set_status(
    order: Order,
    *,
    status: str,
    updated_by: str,
    notes: str | None = None,
    location: str | None = None,
) -> None:
    order.status = status
    if status == "delivered" and order.actual_delivery is None:
        order.actual_delivery = today()
    _append_history(order, status=status, updated_by=updated_by, notes=notes, location=location)
    order.updated_at = utcnow()


def update_order_status(
    order_id: int,
    *,
    status: str,
    notes: str | None = None,
    updated_by: str = "system",
    location: str | None = None,
) -> Order:
    require_choice("status", status, ORDER_STATUSES)
    order = _require_order(order_id)
    _set_status(order, status=status, updated_by=updated_by, notes=notes, location=location)
    db.session.commit()
    return order


def update_order_priority(order_id: int, *, priority: str) -> Order:
    require_choice("priority", priority, PRIORITIES)
    order = _require_order(order_id)
    order.priority = priority
    order.updated_at = utcnow()
    db.session.commit()
    return order


def update_payment_status(order_id: int, *, payment_status: str) -> Order:
    require_choice("payment_status", payment_status, PAYMENT_STATUSES)
    order = _require_order(order_id)
    order.payment_status = payment_status
    order.updated_at = utcnow()
    db.session.commit()
    return order


def assign_order(order_id: int, *, assigned_to: str | None) -> Order:
    order = _require_order(order_id)
    order.assigned_to = (assigned_to or "").strip() or None
    order.updated_at = utcnow()
    db.session.commit()
    return order


def _clean_tag(tag) -> str:
    if not isinstance(tag, str) or not tag.strip():
        raise ValidationError("tag must be a non-empty string")
    return tag.strip()


def _add_tag(order: Order, tag: str) -> None:
    tags = list(order.tags or [])
    if tag not in tags:
        # Reassign so the JSON column is flagged dirty
        order.tags = tags + [tag]
        order.updated_at = utcnow()


def _remove_tag(order: Order, tag: str) -> None:
    tags = list(order.tags or [])
    if tag in tags:
        order.tags = [t for t in tags if t != tag]
        order.updated_at = utcnow()


def add_tag(order_id: int, *, tag: str) -> Order:
    tag = _clean_tag(tag)
    order = _require_order(order_id)
    _add_tag(order, tag)
    db.session.commit()
    return order


def remove_tag(order_id: int, *, tag: str) -> Order:
    tag = _clean_tag(tag)
    order = _require_order(order_id)
    _remove_tag(order, tag)
    db.session.commit()
    return order


def perform_bulk_action(
    *,
    action: str,
    value,
    order_ids: list[int],
    updated_by: str = "system",
) -> dict:
    """
    Apply one action to many orders in a single commit.

    Unknown ids are reported back rather than failing the batch.
    """
    if action not in BULK_ACTIONS:
        raise OrderError(f"action must be one of: {', '.join(BULK_ACTIONS)}")
    if not order_ids:
        raise ValidationError("order_ids must be a non-empty list")

    if action == "update_status":
        require_choice("status", value, ORDER_STATUSES)
    elif action in ("add_tag", "remove_tag"):
        value = _clean_tag(value)
    elif value is not None and not isinstance(value, str):
        # assign_to
        raise ValidationError("value must be a string or null")

    orders = {o.id: o for o in get_orders_by_ids(order_ids)}
    missing = [oid for oid in order_ids if oid not in orders]

    for order in orders.values():
        if action == "update_status":
            _set_status(order, status=value, updated_by=updated_by, notes="Bulk status update")
        elif action == "assign_to":
            order.assigned_to = (value or "").strip() or None
            order.updated_at = utcnow()
        elif action == "add_tag":
            _add_tag(order, value)
        else:
            _remove_tag(order, value)

    db.session.commit()
    return {"action": action, "updated": len(orders), "missing": missing}


def delete_order(order_id: int) -> None:
    order = _require_order(order_id)
    db.session.delete(order)
    db.session.commit()
