from __future__ import annotations

from ..extensions import db
from pipeworks.time_utils import to_utc_z, utcnow

ITEM_CATEGORIES = ("steel", "pvc", "copper", "aluminum", "other")
ITEM_STATUSES = ("active", "discontinued", "out_of_stock")


class Item(db.Model):
    """
    Inventory unit (one pipe product line).

    Low stock is derived, never stored: stock_quantity <= minimum_stock.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.Index("ix_items_category_status", "category", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    category = db.Column(db.String(16), nullable=False, default="other")

    # Dimensions
    diameter_mm = db.Column(db.Float, nullable=False)
    length_m = db.Column(db.Float, nullable=False)
    thickness_mm = db.Column(db.Float, nullable=True)

    price_cents = db.Column(db.Integer, nullable=False, default=0)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    minimum_stock = db.Column(db.Integer, nullable=False, default=0)

    image = db.Column(db.Text, nullable=True)

    # Specifications
    material = db.Column(db.String(64), nullable=False, default="")
    grade = db.Column(db.String(64), nullable=True)
    pressure = db.Column(db.String(32), nullable=True)
    temperature = db.Column(db.String(64), nullable=True)

    supplier = db.Column(db.String(128), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="active", index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def is_low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.minimum_stock or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "diameter_mm": self.diameter_mm,
            "length_m": self.length_m,
            "thickness_mm": self.thickness_mm,
            "price_cents": self.price_cents,
            "stock_quantity": self.stock_quantity,
            "minimum_stock": self.minimum_stock,
            "is_low_stock": self.is_low_stock,
            "image": self.image,
            "specifications": {
                "material": self.material,
                "grade": self.grade,
                "pressure": self.pressure,
                "temperature": self.temperature,
            },
            "supplier": self.supplier,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
