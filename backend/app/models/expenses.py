from __future__ import annotations

from ..extensions import db
from app.finance import format_money
from app.time_utils import to_iso_date, to_utc_z
from .mixins import SoftDeleteMixin


EXPENSE_PAYMENT_METHODS = ("cash", "card", "transfer", "check")


class Expense(SoftDeleteMixin, db.Model):
    """Operating expense (rent, utilities, salaries, ...). Category is free text."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_expense_date", "expense_date"),
        db.Index("ix_expenses_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    category = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    expense_date = db.Column(db.Date, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False, default="cash")
    receipt_number = db.Column(db.String(100), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", lazy="joined")

    def to_dict(self, *, with_user: bool = False) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "category": self.category,
            "description": self.description,
            "amount": format_money(self.amount),
            "expense_date": to_iso_date(self.expense_date),
            "payment_method": self.payment_method,
            "receipt_number": self.receipt_number,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if with_user:
            data["user"] = self.user.to_dict() if self.user else None
        return data
