# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/app/routes/products.py
"""
Product management routes.

Reads are open; writes go through validate_payload with PRODUCT_POLICY.
A stock_quantity sent on update is applied through the stock ledger.
"""
from flask import Blueprint, request, current_app
from ..services import products_service
from ..services.pagination import parse_page_args
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    NotFoundError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "sku", "description", "cost_price", "selling_price",
        "stock_quantity", "unit", "category", "is_active",
    },
    required_on_create={"name", "sku", "cost_price", "selling_price"},
    non_negative={"cost_price", "selling_price", "stock_quantity"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _bool_arg(name: str):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return raw.strip().lower() in ("1", "true", "yes")


@products_bp.get("")
def list_products():
    """
    List products, newest first.

    Query params:
    - search: matches name, sku or description
    - category: exact category
    - is_active: true/false
    - low_stock: true to keep only products at or below the threshold
    - page / per_page: pagination (default 15, max 100)
    """
    try:
        page, per_page = parse_page_args(request.args)
    except ValidationError as e:
        return e.to_dict(), 400

    return products_service.list_products(
        search=request.args.get("search"),
        category=request.args.get("category"),
        is_active=_bool_arg("is_active"),
        low_stock=bool(_bool_arg("low_stock")),
        page=page,
        per_page=per_page,
    )


@products_bp.get("/categories")
def list_categories():
    return {"categories": products_service.list_categories()}


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    except ValidationError as e:
        return e.to_dict(), 400

    try:
        created = products_service.create_product(patch=patch)
    except ConflictError as e:
        return {"error": str(e), "errors": {"sku": [str(e)]}}, 409
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return created, 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        return products_service.get_product(product_id), 200
    except NotFoundError as e:
        return e.to_dict(), 404


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except ValidationError as e:
        return e.to_dict(), 400
    except NotFoundError as e:
        return e.to_dict(), 404
    except ConflictError as e:
        return {"error": str(e), "errors": {"sku": [str(e)]}}, 409

    return updated, 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError as e:
        return e.to_dict(), 404

    return {"ok": True}, 200
