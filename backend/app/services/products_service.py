# backend/app/services/products_service.py
"""
Products Service

Routes validate input into a patch dict (validation.validate_payload) and
hand it over here. Every read goes through Product.live_query(), so
soft-deleted products behave as missing.

STOCK: stock_quantity is accepted on create. On update, a changed
stock_quantity is routed through the stock ledger instead of being assigned.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy import or_

from ..extensions import db
from ..models import Product
from ..validation import ConflictError, NotFoundError, ValidationError
from .pagination import paginate
from .stock_service import InsufficientStockError, adjust_stock

PRODUCT_MUTABLE_FIELDS = {
    "name", "sku", "description", "cost_price", "selling_price",
    "unit", "category", "is_active",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _get_live(product_id: int) -> Product:
    p = Product.live_query().filter(Product.id == product_id).first()
    if p is None:
        raise NotFoundError("Product not found")
    return p


def _ensure_sku_free(sku: str, *, exclude_id: int | None = None) -> None:
    # SKUs stay reserved by soft-deleted products too (unique constraint)
    q = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        q = q.filter(Product.id != exclude_id)
    if q.first() is not None:
        raise ConflictError("SKU already exists.")


def list_products(
    *,
    search: str | None = None,
    category: str | None = None,
    is_active: bool | None = None,
    low_stock: bool = False,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Product listing, newest first.

    - search: substring match on name, sku or description
    - category: exact match
    - is_active: filter on the active flag
    - low_stock: only products at or below LOW_STOCK_THRESHOLD
    """
    q = Product.live_query()

    if search:
        like = f"%{search}%"
        q = q.filter(or_(
            Product.name.ilike(like),
            Product.sku.ilike(like),
            Product.description.ilike(like),
        ))
    if category:
        q = q.filter(Product.category == category)
    if is_active is not None:
        q = q.filter(Product.is_active.is_(is_active))
    if low_stock:
        threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
        q = q.filter(Product.stock_quantity <= threshold)

    q = q.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(q, page, per_page)


def create_product(*, patch: dict) -> dict:
    """Create a product. Raises ConflictError on a duplicate SKU."""
    _ensure_sku_free(patch["sku"])

    p = Product()
    apply_product_patch(p, patch)
    p.stock_quantity = patch.get("stock_quantity", 0) or 0

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def get_product(product_id: int) -> dict:
    return _get_live(product_id).to_dict()


def update_product(*, product_id: int, patch: dict) -> dict:
    """
    Partial update.

    Raises NotFoundError, ConflictError (SKU taken) or ValidationError when
    a stock reduction cannot be applied.
    """
    p = _get_live(product_id)

    if "sku" in patch and patch["sku"] != p.sku:
        _ensure_sku_free(patch["sku"], exclude_id=p.id)

    apply_product_patch(p, patch)

    try:
        if "stock_quantity" in patch and patch["stock_quantity"] != p.stock_quantity:
            adjust_stock(p, patch["stock_quantity"])
        db.session.commit()
    except InsufficientStockError as exc:
        db.session.rollback()
        raise ValidationError(str(exc), {"stock_quantity": [str(exc)]})

    return p.to_dict()


def delete_product(*, product_id: int) -> None:
    """Soft-delete a product. Past sale items keep pointing at it."""
    p = _get_live(product_id)
    p.mark_deleted()
    db.session.commit()


def list_categories() -> list[str]:
    rows = (
        Product.live_query()
        .with_entities(Product.category)
        .filter(Product.category.isnot(None))
        .distinct()
        .order_by(Product.category.asc())
        .all()
    )
    return [r[0] for r in rows]
