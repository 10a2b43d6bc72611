from __future__ import annotations

from ..extensions import db
from app.finance import format_money, item_profit, sale_total_cost, sale_total_profit
from app.time_utils import to_iso_date, to_utc_z
from .mixins import SoftDeleteMixin


PAYMENT_METHODS = ("cash", "card", "transfer", "credit")
PAYMENT_STATUSES = ("paid", "pending", "partial")


class Sale(SoftDeleteMixin, db.Model):
    """
    Sale header. Created together with its items in one unit of work
    (services/sales_service.py) and never re-priced afterwards.

    Totals: subtotal == total_amount == sum(item.subtotal). There is no
    tax or discount.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("sale_number", name="uq_sales_sale_number"),
        db.Index("ix_sales_sale_date", "sale_date"),
        db.Index("ix_sales_status_date", "payment_status", "sale_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable number, e.g. "SALE-20250101-0001"
    sale_number = db.Column(db.String(32), nullable=False)

    # Free text; not a foreign key to customers
    customer_name = db.Column(db.String(255), nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    sale_date = db.Column(db.Date, nullable=False)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    payment_status = db.Column(db.String(16), nullable=False, default="paid")
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", lazy="joined")
    items = db.relationship(
        "SaleItem",
        back_populates="sale",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} number={self.sale_number} total={self.total_amount}>"

    def to_dict(self, *, with_items: bool = True, with_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "sale_number": self.sale_number,
            "customer_name": self.customer_name,
            "user_id": self.user_id,
            "sale_date": to_iso_date(self.sale_date),
            "subtotal": format_money(self.subtotal),
            "total_amount": format_money(self.total_amount),
            "total_cost": format_money(sale_total_cost(self.items)),
            "total_profit": format_money(sale_total_profit(self.items)),
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if with_items:
            data["items"] = [item.to_dict() for item in self.items]
        if with_user:
            data["user"] = self.user.to_dict() if self.user else None
        return data


class SaleItem(db.Model):
    """
    Line item. unit_price and cost_price are snapshots taken when the sale
    was recorded, so later product price edits do not rewrite history.
    """
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_sale_items_quantity_positive"),
        db.Index("ix_sale_items_sale_product", "sale_id", "product_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    cost_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    sale = db.relationship("Sale", back_populates="items")
    product = db.relationship("Product", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product": self.product.to_dict() if self.product else None,
            "quantity": self.quantity,
            "unit_price": format_money(self.unit_price),
            "cost_price": format_money(self.cost_price),
            "subtotal": format_money(self.subtotal),
            "profit": format_money(item_profit(self)),
        }
