# Overview: Pytest coverage for payload validation.

from datetime import date
from decimal import Decimal

import pytest

from app.models import Expense, Product
from app.validation import (
    MAX_INT,
    ModelValidationPolicy,
    ValidationError,
    coerce_int,
    require_date_range,
    validate_payload,
)

POLICY = ModelValidationPolicy(
    writable_fields={"name", "sku", "cost_price", "selling_price", "stock_quantity", "is_active", "description"},
    required_on_create={"name", "sku"},
    non_negative={"cost_price", "stock_quantity"},
)


class TestValidatePayload:
    def test_coerces_types(self, app):
        patch = validate_payload(model=Product, payload={
            "name": "  Desk Lamp LED ",
            "sku": "FUR-LAM-001",
            "cost_price": 20,
            "selling_price": "35.005",
            "stock_quantity": "60",
            "is_active": "false",
        }, policy=POLICY, partial=False)

        assert patch["name"] == "Desk Lamp LED"
        assert patch["cost_price"] == Decimal("20.00")
        assert patch["selling_price"] == Decimal("35.01")
        assert patch["stock_quantity"] == 60
        assert patch["is_active"] is False

    def test_collects_all_errors(self, app):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={
                "cost_price": "-1",
                "stock_quantity": 1.5,
                "unit": "kg",
            }, policy=POLICY, partial=False)

        errors = exc_info.value.errors
        assert set(errors) == {"name", "sku", "cost_price", "stock_quantity", "unit"}

    def test_partial_skips_required(self, app):
        assert validate_payload(model=Product, payload={"description": ""}, policy=POLICY, partial=True) == {
            "description": None,
        }

    def test_rejects_blank_required_and_bool_integers(self, app):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"name": "  ", "stock_quantity": True}, policy=POLICY, partial=True)
        assert "name" in exc_info.value.errors
        assert "stock_quantity" in exc_info.value.errors

    def test_date_column(self, app):
        policy = ModelValidationPolicy(writable_fields={"expense_date"})
        patch = validate_payload(model=Expense, payload={"expense_date": "2025-01-10T08:00:00Z"}, policy=policy, partial=True)
        assert patch["expense_date"] == date(2025, 1, 10)

    def test_non_object_payload(self, app):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload=["x"], policy=POLICY, partial=True)


class TestDateRange:
    def test_optional_range(self):
        assert require_date_range(None, "", required=False) == (None, None)

    def test_order_enforced(self):
        with pytest.raises(ValidationError) as exc_info:
            require_date_range("2025-01-02", "2025-01-01")
        assert "end_date" in exc_info.value.errors

    def test_same_day_allowed(self):
        assert require_date_range("2025-01-01", "2025-01-01") == (date(2025, 1, 1), date(2025, 1, 1))


class TestIntegerBounds:
    def test_coerce_int_rejects_values_beyond_column_range(self):
        assert coerce_int("quantity", MAX_INT) == MAX_INT
        with pytest.raises(ValidationError) as exc_info:
            coerce_int("quantity", MAX_INT + 1)
        assert "quantity" in exc_info.value.errors
        with pytest.raises(ValidationError):
            coerce_int("quantity", str(10**30))

    def test_payload_integer_column_bounded(self, app):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"stock_quantity": 10**30}, policy=POLICY, partial=True)
        assert "stock_quantity" in exc_info.value.errors
