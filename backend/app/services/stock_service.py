"""
Stock ledger.

The only code path that changes Product.stock_quantity after a product is
created. Both directions are single UPDATE statements evaluated by the
database, so concurrent decrements serialize on the row and stock can never
go negative.

Nothing here commits: the caller owns the unit of work.
"""
from __future__ import annotations

import logging

from ..extensions import db
from ..models import Product


logger = logging.getLogger(__name__)


class InsufficientStockError(Exception):
    """Raised when a decrement would take stock below zero."""

    def __init__(self, product: Product, requested: int):
        super().__init__(
            f"Insufficient stock for {product.name}. "
            f"Available: {product.stock_quantity}, Requested: {requested}"
        )
        self.product_id = product.id
        self.available = product.stock_quantity
        self.requested = requested


def _require_positive(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError("quantity must be a positive integer")
    return quantity


def _refresh(product: Product) -> None:
    db.session.refresh(product, attribute_names=["stock_quantity"])


def decrease_stock(product: Product, quantity: int) -> bool:
    """
    Subtract `quantity` from the product's stock.

    Returns False (and changes nothing) when stock is insufficient.
    """
    quantity = _require_positive(quantity)

    updated = (
        db.session.query(Product)
        .filter(Product.id == product.id, Product.stock_quantity >= quantity)
        .update(
            {Product.stock_quantity: Product.stock_quantity - quantity},
            synchronize_session=False,
        )
    )
    _refresh(product)

    if updated != 1:
        logger.info(
            "Stock decrement refused product_id=%s requested=%s available=%s",
            product.id, quantity, product.stock_quantity,
        )
        return False
    return True


def increase_stock(product: Product, quantity: int) -> None:
    quantity = _require_positive(quantity)

    db.session.query(Product).filter(Product.id == product.id).update(
        {Product.stock_quantity: Product.stock_quantity + quantity},
        synchronize_session=False,
    )
    _refresh(product)


def adjust_stock(product: Product, new_quantity: int) -> None:
    """Move stock to an absolute value through increase/decrease."""
    if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity < 0:
        raise ValueError("stock_quantity must be a non-negative integer")

    delta = new_quantity - (product.stock_quantity or 0)
    if delta > 0:
        increase_stock(product, delta)
    elif delta < 0:
        if not decrease_stock(product, -delta):
            raise InsufficientStockError(product, -delta)
