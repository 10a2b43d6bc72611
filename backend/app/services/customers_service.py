"""
Customers Service

Customers are master data only. A sale names its customer in free text
(Sale.customer_name), so the customer detail view gathers sales by name.
"""
from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..finance import ZERO, format_money, to_decimal
from ..models import Customer, Sale
from ..validation import ConflictError, NotFoundError
from .pagination import paginate

CUSTOMER_MUTABLE_FIELDS = {"name", "email", "phone", "address", "customer_type"}


def _get_live(customer_id: int) -> Customer:
    c = Customer.live_query().filter(Customer.id == customer_id).first()
    if c is None:
        raise NotFoundError("Customer not found")
    return c


def _ensure_email_free(email: str | None, *, exclude_id: int | None = None) -> None:
    if not email:
        return
    q = db.session.query(Customer.id).filter(Customer.email == email)
    if exclude_id is not None:
        q = q.filter(Customer.id != exclude_id)
    if q.first() is not None:
        raise ConflictError("Email already registered for another customer.")


def list_customers(
    *,
    search: str | None = None,
    customer_type: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    q = Customer.live_query()
    if search:
        like = f"%{search}%"
        q = q.filter(or_(
            Customer.name.ilike(like),
            Customer.email.ilike(like),
            Customer.phone.ilike(like),
        ))
    if customer_type:
        q = q.filter(Customer.customer_type == customer_type)

    q = q.order_by(Customer.created_at.desc(), Customer.id.desc())
    return paginate(q, page, per_page)


def create_customer(*, patch: dict) -> dict:
    _ensure_email_free(patch.get("email"))

    c = Customer()
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(c, k, v)

    db.session.add(c)
    db.session.commit()
    return c.to_dict()


def get_customer(customer_id: int) -> dict:
    """Customer plus the live sales recorded under the same name."""
    c = _get_live(customer_id)

    sales = (
        Sale.live_query()
        .filter(Sale.customer_name == c.name)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )
    total = sum((to_decimal(s.total_amount) for s in sales), ZERO)

    data = c.to_dict()
    data["sales"] = [s.to_dict(with_items=False) for s in sales]
    data["total_purchases"] = format_money(total)
    return data


def update_customer(*, customer_id: int, patch: dict) -> dict:
    c = _get_live(customer_id)

    if "email" in patch and patch["email"] != c.email:
        _ensure_email_free(patch["email"], exclude_id=c.id)

    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(c, k, v)

    db.session.commit()
    return c.to_dict()


def delete_customer(*, customer_id: int) -> None:
    c = _get_live(customer_id)
    c.mark_deleted()
    db.session.commit()
