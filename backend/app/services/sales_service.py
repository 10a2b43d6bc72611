"""
Sales Service - sale transaction orchestrator.

A sale is recorded in one unit of work: header, line items and the stock
decrement for every line either all commit or all roll back. Deleting a
sale puts the stock back and soft-deletes the header in the same way.

Line prices are snapshots: unit_price comes from the request and cost_price
is copied from the product at the moment of sale.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..finance import ZERO, format_money, line_subtotal, to_decimal
from ..models import PAYMENT_METHODS, PAYMENT_STATUSES, Product, Sale, SaleItem
from ..validation import (
    MAX_MONEY,
    FieldErrors,
    NotFoundError,
    ValidationError,
    coerce_int,
    coerce_money,
)
from app.time_utils import utcnow
from .concurrency import lock_for_update
from .pagination import paginate
from .stock_service import InsufficientStockError, decrease_stock, increase_stock


logger = logging.getLogger(__name__)

SALE_NUMBER_PREFIX = "SALE"
SALE_MUTABLE_FIELDS = {"payment_status", "notes"}


class SaleTransactionError(Exception):
    """
    A sale unit of work was rolled back.

    `cause` carries the underlying message; `conflict` tells the HTTP layer
    whether this was a business conflict (insufficient stock, a sale number
    taken by a concurrent request) or an unexpected failure.
    """

    def __init__(self, message: str, cause: str | None = None, *, conflict: bool = False):
        super().__init__(message)
        self.cause = cause
        self.conflict = conflict

    def to_dict(self) -> dict:
        return {"error": str(self), "message": self.cause}


def next_sale_number(today: date | None = None) -> str:
    """
    SALE-YYYYMMDD-NNNN, NNNN counting up within the day.

    Soft-deleted sales still hold their numbers, so they are included.
    """
    today = today or utcnow().date()
    prefix = f"{SALE_NUMBER_PREFIX}-{today:%Y%m%d}-"

    last = (
        db.session.query(Sale.sale_number)
        .filter(Sale.sale_number.like(f"{prefix}%"))
        .order_by(Sale.id.desc())
        .first()
    )

    seq = 1
    if last is not None:
        try:
            seq = int(last[0].rsplit("-", 1)[1]) + 1
        except (IndexError, ValueError):
            seq = 1
    return f"{prefix}{seq:04d}"


def normalize_items(raw_items) -> list[dict]:
    """
    Validate the item list of a sale request.

    Each item needs product_id, quantity >= 1 and unit_price >= 0. Errors
    are keyed "items.<index>.<field>".
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("Validation failed", {"items": ["At least one item is required"]})

    errors = FieldErrors()
    items: list[dict] = []

    for idx, raw in enumerate(raw_items):
        key = f"items.{idx}"
        if not isinstance(raw, dict):
            errors.add(key, "Item must be an object")
            continue

        item = {}
        for field, coerce in (("product_id", coerce_int), ("quantity", coerce_int), ("unit_price", coerce_money)):
            if raw.get(field) is None:
                errors.add(f"{key}.{field}", f"{field} is required")
                continue
            try:
                item[field] = coerce(field, raw[field])
            except ValidationError as exc:
                for message in exc.errors.get(field, []):
                    errors.add(f"{key}.{field}", message)

        if "quantity" in item and item["quantity"] < 1:
            errors.add(f"{key}.quantity", "quantity must be at least 1")
        if "unit_price" in item and item["unit_price"] < 0:
            errors.add(f"{key}.unit_price", "unit_price must be >= 0")
        if "quantity" in item and "unit_price" in item:
            if line_subtotal(item["unit_price"], item["quantity"]) > MAX_MONEY:
                errors.add(key, f"Line subtotal cannot exceed {MAX_MONEY}")

        items.append(item)

    errors.raise_if_any()

    total = sum((line_subtotal(i["unit_price"], i["quantity"]) for i in items), ZERO)
    if total > MAX_MONEY:
        raise ValidationError("Validation failed", {"items": [f"Sale total cannot exceed {MAX_MONEY}"]})
    return items


def _load_products(items: list[dict]) -> dict[int, Product]:
    ids = {i["product_id"] for i in items}
    products = {
        p.id: p
        for p in Product.live_query().filter(Product.id.in_(ids)).all()
    }

    errors = {
        f"items.{idx}.product_id": ["Product not found"]
        for idx, item in enumerate(items)
        if item["product_id"] not in products
    }
    if errors:
        raise NotFoundError("Product not found", errors)
    return products


def create_sale(
    *,
    user_id: int,
    sale_date: date,
    payment_method: str,
    payment_status: str,
    items,
    customer_name: str | None = None,
    notes: str | None = None,
) -> Sale:
    """
    Record a sale with its items and decrement stock, atomically.

    Raises:
        ValidationError: malformed items or header values
        NotFoundError: an item references a missing or deleted product
        SaleTransactionError: the unit of work failed and was rolled back
    """
    errors = FieldErrors()
    if payment_method not in PAYMENT_METHODS:
        errors.add("payment_method", f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
    if payment_status not in PAYMENT_STATUSES:
        errors.add("payment_status", f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}")
    if sale_date is None:
        errors.add("sale_date", "sale_date is required")
    errors.raise_if_any()

    items = normalize_items(items)
    products = _load_products(items)

    subtotal = sum((line_subtotal(i["unit_price"], i["quantity"]) for i in items), ZERO)

    try:
        sale_number = next_sale_number()
        sale = Sale(
            sale_number=sale_number,
            customer_name=customer_name,
            user_id=user_id,
            sale_date=sale_date,
            subtotal=subtotal,
            total_amount=subtotal,
            payment_method=payment_method,
            payment_status=payment_status,
            notes=notes,
        )
        db.session.add(sale)
        db.session.flush()

        for item in items:
            product = products[item["product_id"]]
            sale.items.append(SaleItem(
                product_id=product.id,
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                cost_price=product.cost_price,
                subtotal=line_subtotal(item["unit_price"], item["quantity"]),
            ))
            if not decrease_stock(product, item["quantity"]):
                raise InsufficientStockError(product, item["quantity"])

        db.session.commit()
    except InsufficientStockError as exc:
        db.session.rollback()
        logger.warning("Sale rolled back: %s", exc)
        raise SaleTransactionError("Failed to create sale", str(exc), conflict=True) from exc
    except IntegrityError as exc:
        db.session.rollback()
        if "sale_number" not in str(exc.orig):
            logger.exception("Sale rolled back after integrity error")
            raise SaleTransactionError("Failed to create sale", str(exc.orig)) from exc
        # another request took this number between lookup and insert
        logger.warning("Sale number collision on %s", sale_number)
        raise SaleTransactionError(
            "Failed to create sale",
            f"Sale number {sale_number} was taken by a concurrent sale; retry the request",
            conflict=True,
        ) from exc
    except Exception as exc:
        db.session.rollback()
        logger.exception("Sale rolled back after unexpected error")
        raise SaleTransactionError("Failed to create sale", str(exc)) from exc

    logger.info(
        "Sale created sale_number=%s user_id=%s items=%s total=%s",
        sale.sale_number, user_id, len(items), format_money(sale.total_amount),
    )
    return sale


def delete_sale(sale_id: int, *, user_id: int) -> None:
    """Return every item's quantity to stock, then soft-delete the sale."""
    sale = lock_for_update(
        Sale.live_query().filter(Sale.id == sale_id),
        of=Sale,
    ).first()
    if sale is None:
        raise NotFoundError("Sale not found")

    sale_number = sale.sale_number
    try:
        for item in sale.items:
            # deleted products still receive their stock back
            product = db.session.get(Product, item.product_id)
            increase_stock(product, item.quantity)
        sale.mark_deleted()
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        logger.exception("Sale deletion rolled back sale_id=%s", sale_id)
        raise SaleTransactionError("Failed to delete sale", str(exc)) from exc

    logger.info("Sale deleted sale_number=%s by user_id=%s", sale_number, user_id)


def _get_live(sale_id: int) -> Sale:
    sale = Sale.live_query().filter(Sale.id == sale_id).first()
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


def get_sale(sale_id: int) -> dict:
    return _get_live(sale_id).to_dict(with_items=True, with_user=True)


def update_sale(sale_id: int, patch: dict) -> dict:
    """Metadata only: payment_status and notes. Items and totals are fixed."""
    sale = _get_live(sale_id)
    for k, v in patch.items():
        if k in SALE_MUTABLE_FIELDS:
            setattr(sale, k, v)
    db.session.commit()
    return sale.to_dict(with_items=True, with_user=True)


def live_sales(start_date: date | None = None, end_date: date | None = None):
    """Non-deleted sales with sale_date inside the inclusive range."""
    q = Sale.live_query()
    if start_date is not None:
        q = q.filter(Sale.sale_date >= start_date)
    if end_date is not None:
        q = q.filter(Sale.sale_date <= end_date)
    return q


def list_sales(
    *,
    search: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    payment_status: str | None = None,
    payment_method: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    q = live_sales(start_date, end_date)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(Sale.sale_number.ilike(like), Sale.customer_name.ilike(like)))
    if payment_status:
        q = q.filter(Sale.payment_status == payment_status)
    if payment_method:
        q = q.filter(Sale.payment_method == payment_method)

    q = q.order_by(Sale.sale_date.desc(), Sale.id.desc())
    return paginate(q, page, per_page, serialize=lambda s: s.to_dict(with_items=True, with_user=True))


def sales_totals(start_date: date | None = None, end_date: date | None = None) -> tuple[int, Decimal]:
    count, total = (
        live_sales(start_date, end_date)
        .with_entities(func.count(Sale.id), func.coalesce(func.sum(Sale.total_amount), 0))
        .one()
    )
    return int(count), to_decimal(total)


def sales_summary(start_date: date | None = None, end_date: date | None = None) -> dict:
    count, total = sales_totals(start_date, end_date)
    average = total / count if count else ZERO
    return {
        "total_sales": format_money(total),
        "total_transactions": count,
        "average_transaction": format_money(average),
    }


def sales_by_date_range(start_date: date, end_date: date) -> list[dict]:
    sales = (
        live_sales(start_date, end_date)
        .order_by(Sale.sale_date.asc(), Sale.id.asc())
        .all()
    )
    return [s.to_dict(with_items=True, with_user=True) for s in sales]
