"""
Expenses Service

Operating expenses, attributed to the recording user. Categories are free
text; the category listing is derived from the rows themselves.
"""
from __future__ import annotations

from datetime import date

from sqlalchemy import func, or_

from ..extensions import db
from ..finance import ZERO, format_money, to_decimal
from ..models import Expense
from ..validation import NotFoundError
from .pagination import paginate

EXPENSE_MUTABLE_FIELDS = {
    "category", "description", "amount", "expense_date",
    "payment_method", "receipt_number", "notes",
}


def _get_live(expense_id: int) -> Expense:
    e = Expense.live_query().filter(Expense.id == expense_id).first()
    if e is None:
        raise NotFoundError("Expense not found")
    return e


def _in_range(q, start_date: date | None, end_date: date | None):
    if start_date is not None:
        q = q.filter(Expense.expense_date >= start_date)
    if end_date is not None:
        q = q.filter(Expense.expense_date <= end_date)
    return q


def list_expenses(
    *,
    search: str | None = None,
    category: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """Expense listing, newest expense_date first."""
    q = Expense.live_query()
    if search:
        like = f"%{search}%"
        q = q.filter(or_(
            Expense.description.ilike(like),
            Expense.category.ilike(like),
            Expense.receipt_number.ilike(like),
        ))
    if category:
        q = q.filter(Expense.category == category)
    q = _in_range(q, start_date, end_date)

    q = q.order_by(Expense.expense_date.desc(), Expense.id.desc())
    return paginate(q, page, per_page, serialize=lambda e: e.to_dict(with_user=True))


def create_expense(*, user_id: int, patch: dict) -> dict:
    e = Expense(user_id=user_id)
    for k, v in patch.items():
        if k in EXPENSE_MUTABLE_FIELDS:
            setattr(e, k, v)

    db.session.add(e)
    db.session.commit()
    return e.to_dict(with_user=True)


def get_expense(expense_id: int) -> dict:
    return _get_live(expense_id).to_dict(with_user=True)


def update_expense(*, expense_id: int, patch: dict) -> dict:
    e = _get_live(expense_id)
    for k, v in patch.items():
        if k in EXPENSE_MUTABLE_FIELDS:
            setattr(e, k, v)
    db.session.commit()
    return e.to_dict(with_user=True)


def delete_expense(*, expense_id: int) -> None:
    e = _get_live(expense_id)
    e.mark_deleted()
    db.session.commit()


def list_categories() -> list[str]:
    rows = (
        Expense.live_query()
        .with_entities(Expense.category)
        .filter(Expense.category.isnot(None))
        .distinct()
        .order_by(Expense.category.asc())
        .all()
    )
    return [r[0] for r in rows]


def expenses_by_category(start_date: date | None = None, end_date: date | None = None) -> list[dict]:
    """Per-category count and total, largest total first. Values are Decimals."""
    q = (
        _in_range(Expense.live_query(), start_date, end_date)
        .with_entities(
            Expense.category,
            func.count(Expense.id),
            func.coalesce(func.sum(Expense.amount), 0),
        )
        .group_by(Expense.category)
    )
    rows = [
        {"category": category, "count": int(count), "total": to_decimal(total)}
        for category, count, total in q.all()
    ]
    rows.sort(key=lambda r: (-r["total"], r["category"]))
    return rows


def expense_summary(start_date: date | None = None, end_date: date | None = None) -> dict:
    by_category = expenses_by_category(start_date, end_date)
    total = sum((r["total"] for r in by_category), ZERO)
    return {
        "total_expenses": format_money(total),
        "by_category": [
            {"category": r["category"], "count": r["count"], "total": format_money(r["total"])}
            for r in by_category
        ],
    }
