from __future__ import annotations

from ..extensions import db
from pipeworks.time_utils import to_iso_date, to_utc_z, utcnow

# Fixed, ordered lifecycle labels. Transition legality is not enforced.
ORDER_STATUSES = (
    "pending",
    "confirmed",
    "processing",
    "manufacturing",
    "quality_check",
    "ready_to_ship",
    "shipped",
    "in_transit",
    "out_for_delivery",
    "delivered",
    "cancelled",
    "returned",
)
PRIORITIES = ("low", "medium", "high", "urgent")
PAYMENT_STATUSES = ("pending", "paid", "partial", "refunded", "failed")


class Order(db.Model):
    """
    Customer order.

    SNAPSHOT: customer and line data are copied onto the order at creation.
    Correcting a customer or item later does not rewrite past orders.

    INVARIANT: total_amount_cents = subtotal + tax + shipping - discount
    (maintained by orders_service.recalculate_totals).
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_status_priority", "status", "priority"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(32), nullable=False, unique=True)

    # Customer snapshot
    customer_name = db.Column(db.String(128), nullable=False)
    customer_email = db.Column(db.String(128), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)
    customer_company = db.Column(db.String(128), nullable=False, default="")
    customer_street = db.Column(db.String(128), nullable=True)
    customer_city = db.Column(db.String(64), nullable=True)
    customer_state = db.Column(db.String(64), nullable=True)
    customer_zip_code = db.Column(db.String(16), nullable=True)
    customer_country = db.Column(db.String(64), nullable=True)

    status = db.Column(db.String(32), nullable=False, default="pending", index=True)
    priority = db.Column(db.String(16), nullable=False, default="medium")
    payment_status = db.Column(db.String(16), nullable=False, default="pending")

    # Money breakdown (cents)
    subtotal_cents = db.Column(db.Integer, nullable=False, default=0)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    shipping_cost_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)

    # Shipping
    shipping_method = db.Column(db.String(64), nullable=True)
    shipping_carrier = db.Column(db.String(64), nullable=True)
    tracking_number = db.Column(db.String(64), nullable=True)
    estimated_delivery = db.Column(db.Date, nullable=True)
    actual_delivery = db.Column(db.Date, nullable=True)
    shipping_street = db.Column(db.String(128), nullable=True)
    shipping_city = db.Column(db.String(64), nullable=True)
    shipping_state = db.Column(db.String(64), nullable=True)
    shipping_zip_code = db.Column(db.String(16), nullable=True)
    shipping_country = db.Column(db.String(64), nullable=True)

    notes = db.Column(db.Text, nullable=True)
    internal_notes = db.Column(db.Text, nullable=True)
    assigned_to = db.Column(db.String(128), nullable=True)
    tags = db.Column(db.JSON, nullable=False, default=list)

    due_date = db.Column(db.Date, nullable=True)
    estimated_completion = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    lines = db.relationship(
        "OrderLine",
        backref="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
        lazy=True,
    )
    status_history = db.relationship(
        "OrderStatusHistory",
        backref="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.id",
        lazy=True,
    )

    def to_dict(self, include_history: bool = True) -> dict:
        payload = {
            "id": self.id,
            "order_number": self.order_number,
            "customer": {
                "name": self.customer_name,
                "email": self.customer_email,
                "phone": self.customer_phone,
                "company": self.customer_company,
                "address": {
                    "street": self.customer_street,
                    "city": self.customer_city,
                    "state": self.customer_state,
                    "zip_code": self.customer_zip_code,
                    "country": self.customer_country,
                },
            },
            "items": [line.to_dict() for line in self.lines],
            "status": self.status,
            "priority": self.priority,
            "payment_status": self.payment_status,
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "shipping_cost_cents": self.shipping_cost_cents,
            "discount_cents": self.discount_cents,
            "total_amount_cents": self.total_amount_cents,
            "shipping": {
                "method": self.shipping_method,
                "carrier": self.shipping_carrier,
                "tracking_number": self.tracking_number,
                "estimated_delivery": to_iso_date(self.estimated_delivery),
                "actual_delivery": to_iso_date(self.actual_delivery),
                "address": {
                    "street": self.shipping_street,
                    "city": self.shipping_city,
                    "state": self.shipping_state,
                    "zip_code": self.shipping_zip_code,
                    "country": self.shipping_country,
                },
                "cost_cents": self.shipping_cost_cents,
            },
            "notes": self.notes,
            "internal_notes": self.internal_notes,
            "assigned_to": self.assigned_to,
            "tags": list(self.tags or []),
            "due_date": to_iso_date(self.due_date),
            "estimated_completion": to_iso_date(self.estimated_completion),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_history:
            payload["status_history"] = [h.to_dict() for h in self.status_history]
        return payload


class OrderLine(db.Model):
    """Ordered line item; a copy of the catalogue item at order time."""
    __tablename__ = "order_lines"
    __table_args__ = (
        db.Index("ix_order_lines_order", "order_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)

    # Reference only, no FK: deleting the catalogue item keeps the order intact
    item_id = db.Column(db.Integer, nullable=True)

    name = db.Column(db.String(128), nullable=False)
    category = db.Column(db.String(16), nullable=True)
    diameter_mm = db.Column(db.Float, nullable=True)
    length_m = db.Column(db.Float, nullable=True)
    material = db.Column(db.String(64), nullable=True)
    grade = db.Column(db.String(64), nullable=True)
    pressure = db.Column(db.String(32), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "name": self.name,
            "category": self.category,
            "diameter_mm": self.diameter_mm,
            "length_m": self.length_m,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "total_price_cents": self.total_price_cents,
            "specifications": {
                "material": self.material,
                "grade": self.grade,
                "pressure": self.pressure,
            },
        }


class OrderStatusHistory(db.Model):
    """
    Append-only status change log.

    INVARIANT: timestamps are non-decreasing per order, and the latest
    entry's status equals Order.status.
    """
    __tablename__ = "order_status_history"
    __table_args__ = (
        db.Index("ix_order_status_history_order", "order_id", "timestamp"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    status = db.Column(db.String(32), nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False)
    updated_by = db.Column(db.String(128), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(128), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "timestamp": to_utc_z(self.timestamp),
            "updated_by": self.updated_by,
            "notes": self.notes,
            "location": self.location,
        }
