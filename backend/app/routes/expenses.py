# Overview: Flask API routes for operating expenses.

from flask import Blueprint, request, g, current_app

from ..decorators import require_user
from ..models import Expense, EXPENSE_PAYMENT_METHODS
from ..services import expenses_service
from ..services.pagination import parse_page_args
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_date_range,
    ValidationError,
    NotFoundError,
)

EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={
        "category", "description", "amount", "expense_date",
        "payment_method", "receipt_number", "notes",
    },
    required_on_create={"category", "description", "amount", "expense_date"},
    choices={"payment_method": EXPENSE_PAYMENT_METHODS},
    non_negative={"amount"},
)

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("")
def list_expenses():
    """
    Query params:
    - search: description, category or receipt_number
    - category: exact category
    - start_date / end_date: inclusive expense_date range
    - page / per_page
    """
    try:
        page, per_page = parse_page_args(request.args)
        start_date, end_date = require_date_range(
            request.args.get("start_date"), request.args.get("end_date"), required=False
        )
    except ValidationError as e:
        return e.to_dict(), 400

    return expenses_service.list_expenses(
        search=request.args.get("search"),
        category=request.args.get("category"),
        start_date=start_date,
        end_date=end_date,
        page=page,
        per_page=per_page,
    )


@expenses_bp.get("/categories")
def list_categories():
    return {"categories": expenses_service.list_categories()}


@expenses_bp.get("/summary")
def expense_summary():
    try:
        start_date, end_date = require_date_range(
            request.args.get("start_date"), request.args.get("end_date"), required=False
        )
    except ValidationError as e:
        return e.to_dict(), 400

    return expenses_service.expense_summary(start_date, end_date)


@expenses_bp.post("")
@require_user
def create_expense_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
    except ValidationError as e:
        return e.to_dict(), 400

    try:
        created = expenses_service.create_expense(user_id=g.current_user.id, patch=patch)
    except Exception:
        current_app.logger.exception("Failed to create expense")
        return {"error": "Internal server error"}, 500

    return created, 201


@expenses_bp.get("/<int:expense_id>")
def get_expense_route(expense_id: int):
    try:
        return expenses_service.get_expense(expense_id), 200
    except NotFoundError as e:
        return e.to_dict(), 404


@expenses_bp.put("/<int:expense_id>")
def update_expense_route(expense_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=True)
        updated = expenses_service.update_expense(expense_id=expense_id, patch=patch)
    except ValidationError as e:
        return e.to_dict(), 400
    except NotFoundError as e:
        return e.to_dict(), 404

    return updated, 200


@expenses_bp.delete("/<int:expense_id>")
def delete_expense_route(expense_id: int):
    try:
        expenses_service.delete_expense(expense_id=expense_id)
    except NotFoundError as e:
        return e.to_dict(), 404

    return {"ok": True}, 200
