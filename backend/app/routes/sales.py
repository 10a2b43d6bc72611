# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/app/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Sale, PAYMENT_METHODS, PAYMENT_STATUSES
from ..services import sales_service
from ..services.pagination import parse_page_args
from ..services.sales_service import SaleTransactionError
from ..decorators import require_user
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_date_range,
    ValidationError,
    NotFoundError,
)

SALE_POLICY = ModelValidationPolicy(
    writable_fields={"customer_name", "sale_date", "payment_method", "payment_status", "notes"},
    required_on_create={"sale_date", "payment_method", "payment_status"},
    choices={"payment_method": PAYMENT_METHODS, "payment_status": PAYMENT_STATUSES},
)

SALE_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"payment_status", "notes"},
    choices={"payment_status": PAYMENT_STATUSES},
)


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _transaction_error_response(exc: SaleTransactionError):
    status = 409 if exc.conflict else 500
    return jsonify(exc.to_dict()), status


@sales_bp.get("")
def list_sales_route():
    """
    Query params:
    - search: sale_number or customer_name
    - start_date / end_date: inclusive sale_date range
    - payment_status, payment_method
    - page / per_page
    """
    try:
        page, per_page = parse_page_args(request.args)
        start_date, end_date = require_date_range(
            request.args.get("start_date"), request.args.get("end_date"), required=False
        )
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    result = sales_service.list_sales(
        search=request.args.get("search"),
        start_date=start_date,
        end_date=end_date,
        payment_status=request.args.get("payment_status"),
        payment_method=request.args.get("payment_method"),
        page=page,
        per_page=per_page,
    )
    return jsonify(result), 200


@sales_bp.post("")
@require_user
def create_sale_route():
    """
    Record a sale with its items.

    Body: customer_name?, sale_date, payment_method, payment_status, notes?,
    items: [{product_id, quantity, unit_price}, ...]

    Stock for every item is decremented in the same transaction; if any item
    is short, nothing is written and the response is 409.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload", "errors": {"body": ["Request body must be a JSON object"]}}), 400

    header = {k: v for k, v in payload.items() if k != "items"}

    try:
        patch = validate_payload(model=Sale, payload=header, policy=SALE_POLICY, partial=False)
    except ValidationError as e:
        errors = dict(e.errors)
        if not payload.get("items"):
            errors["items"] = ["At least one item is required"]
        return jsonify({"error": str(e), "errors": errors}), 400

    try:
        sale = sales_service.create_sale(
            user_id=g.current_user.id,
            sale_date=patch["sale_date"],
            payment_method=patch["payment_method"],
            payment_status=patch["payment_status"],
            customer_name=patch.get("customer_name"),
            notes=patch.get("notes"),
            items=payload.get("items"),
        )
    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except SaleTransactionError as e:
        return _transaction_error_response(e)

    return jsonify({
        "message": "Sale created successfully",
        "sale": sale.to_dict(with_items=True, with_user=True),
    }), 201


@sales_bp.get("/summary")
def sales_summary_route():
    try:
        start_date, end_date = require_date_range(
            request.args.get("start_date"), request.args.get("end_date"), required=False
        )
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    return jsonify(sales_service.sales_summary(start_date, end_date)), 200


@sales_bp.get("/by-date-range")
def sales_by_date_range_route():
    try:
        start_date, end_date = require_date_range(
            request.args.get("start_date"), request.args.get("end_date"), required=True
        )
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    sales = sales_service.sales_by_date_range(start_date, end_date)
    return jsonify({"items": sales, "count": len(sales)}), 200


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    try:
        return jsonify(sales_service.get_sale(sale_id)), 200
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404


@sales_bp.put("/<int:sale_id>")
@require_user
def update_sale_route(sale_id: int):
    """Only payment_status and notes can change after a sale is recorded."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Sale, payload=payload, policy=SALE_UPDATE_POLICY, partial=True)
        sale = sales_service.update_sale(sale_id, patch)
    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404

    return jsonify({"message": "Sale updated successfully", "sale": sale}), 200


@sales_bp.delete("/<int:sale_id>")
@require_user
def delete_sale_route(sale_id: int):
    """Soft-delete a sale and return its quantities to stock."""
    try:
        sales_service.delete_sale(sale_id, user_id=g.current_user.id)
    except NotFoundError as e:
        return jsonify(e.to_dict()), 404
    except SaleTransactionError as e:
        current_app.logger.error("Failed to delete sale %s: %s", sale_id, e.cause)
        return _transaction_error_response(e)

    return jsonify({"message": "Sale deleted successfully"}), 200
