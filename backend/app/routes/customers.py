# Overview: Flask API routes for customer master data.

from flask import Blueprint, request, current_app

from ..models import Customer, CUSTOMER_TYPES
from ..services import customers_service
from ..services.pagination import parse_page_args
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    NotFoundError,
    ConflictError,
)

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "address", "customer_type"},
    required_on_create={"name"},
    choices={"customer_type": CUSTOMER_TYPES},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def list_customers():
    """Query params: search (name/email/phone), customer_type, page, per_page."""
    try:
        page, per_page = parse_page_args(request.args)
    except ValidationError as e:
        return e.to_dict(), 400

    return customers_service.list_customers(
        search=request.args.get("search"),
        customer_type=request.args.get("customer_type"),
        page=page,
        per_page=per_page,
    )


@customers_bp.post("")
def create_customer_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        created = customers_service.create_customer(patch=patch)
    except ValidationError as e:
        return e.to_dict(), 400
    except ConflictError as e:
        return {"error": str(e), "errors": {"email": [str(e)]}}, 409
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return {"error": "Internal server error"}, 500

    return created, 201


@customers_bp.get("/<int:customer_id>")
def get_customer_route(customer_id: int):
    try:
        return customers_service.get_customer(customer_id), 200
    except NotFoundError as e:
        return e.to_dict(), 404


@customers_bp.put("/<int:customer_id>")
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        updated = customers_service.update_customer(customer_id=customer_id, patch=patch)
    except ValidationError as e:
        return e.to_dict(), 400
    except NotFoundError as e:
        return e.to_dict(), 404
    except ConflictError as e:
        return {"error": str(e), "errors": {"email": [str(e)]}}, 409

    return updated, 200


@customers_bp.delete("/<int:customer_id>")
def delete_customer_route(customer_id: int):
    try:
        customers_service.delete_customer(customer_id=customer_id)
    except NotFoundError as e:
        return e.to_dict(), 404

    return {"ok": True}, 200
