from __future__ import annotations

from ..extensions import db
from app.finance import format_money, profit_margin, round_pct
from app.time_utils import to_utc_z
from .mixins import SoftDeleteMixin


class Product(SoftDeleteMixin, db.Model):
    """
    Product master data with its on-hand quantity.

    STOCK: stock_quantity is set once on creation. Afterwards only the stock
    ledger (services/stock_service.py) may change it, through conditional
    UPDATE statements that keep it >= 0.

    SKU is globally unique, soft-deleted products included.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_category", "category"),
        db.Index("ix_products_active_stock", "is_active", "stock_quantity"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=True)

    cost_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    selling_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)

    unit = db.Column(db.String(50), nullable=False, default="piece")
    category = db.Column(db.String(100), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} stock={self.stock_quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "description": self.description,
            "cost_price": format_money(self.cost_price),
            "selling_price": format_money(self.selling_price),
            "profit_margin": round_pct(profit_margin(self.cost_price, self.selling_price)),
            "stock_quantity": self.stock_quantity,
            "unit": self.unit,
            "category": self.category,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
