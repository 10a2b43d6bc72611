from __future__ import annotations
from datetime import date

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Date, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from app.finance import quantize_money
from app.time_utils import parse_iso_date


# Maximum money value: 9,999,999,999.99 (fits Numeric(12, 2))
MAX_MONEY = Decimal("9999999999.99")

# Largest value an INTEGER column holds on every supported backend
MAX_INT = 2**31 - 1


class ValidationError(ValueError):
    """
    400-level input problem.

    `errors` maps a field name (dotted for nested items, e.g.
    "items.0.quantity") to a list of messages.
    """

    def __init__(self, message: str = "Validation failed", errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "errors": self.errors}


class NotFoundError(LookupError):
    """404-level: referenced entity does not exist (or is soft-deleted)."""

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        body = {"error": str(self)}
        if self.errors:
            body["errors"] = self.errors
        return body


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate SKU)."""


class FieldErrors:
    """Accumulates per-field messages and raises them together."""

    def __init__(self):
        self.errors: dict[str, list[str]] = {}

    def add(self, key: str, message: str) -> None:
        self.errors.setdefault(key, []).append(message)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self, message: str = "Validation failed") -> None:
        if self.errors:
            raise ValidationError(message, self.errors)


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - choices: enumerated values per field
    - non_negative: numeric fields that must be >= 0
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    choices: dict[str, tuple] = field(default_factory=dict)
    non_negative: set[str] = field(default_factory=set)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    # bool is a subclass of int; reject it explicitly
    if isinstance(value, int) and not isinstance(value, bool):
        parsed = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(errors={key: [f"{key} must be an integer"]})
        try:
            parsed = int(stripped)
        except ValueError:
            raise ValidationError(errors={key: [f"{key} must be an integer"]})
    else:
        raise ValidationError(errors={key: [f"{key} must be an integer"]})

    if abs(parsed) > MAX_INT:
        raise ValidationError(errors={key: [f"{key} cannot exceed {MAX_INT}"]})
    return parsed


def coerce_money(key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(errors={key: [f"{key} must be a number"]})
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(errors={key: [f"{key} must be a number"]})
    if not d.is_finite():
        raise ValidationError(errors={key: [f"{key} must be a finite number"]})
    if abs(d) > MAX_MONEY:
        raise ValidationError(errors={key: [f"{key} cannot exceed {MAX_MONEY}"]})
    return quantize_money(d)


def coerce_date(key: str, value: Any) -> date:
    try:
        d = parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(errors={key: [f"{key} must be a date (YYYY-MM-DD)"]})
    if d is None:
        raise ValidationError(errors={key: [f"{key} must be a date (YYYY-MM-DD)"]})
    return d


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Numeric before Integer: money columns
    if isinstance(coltype, Numeric):
        return coerce_money(col.key, value)

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "1", "false", "0"):
            return value.strip().lower() in ("true", "1")
        if isinstance(value, int):
            return bool(value)
        raise ValidationError(errors={col.key: [f"{col.key} must be a boolean"]})

    if isinstance(coltype, Date):
        return coerce_date(col.key, value)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields), choices and non-negative fields
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    All problems are collected and raised together as one ValidationError.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    errors = FieldErrors()

    if not partial:
        for f in sorted(policy.required_on_create):
            if f not in payload:
                errors.add(f, f"{f} is required")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            errors.add(k, f"Field not allowed: {k}")
            continue

        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable or k in policy.required_on_create:
                errors.add(k, f"{k} cannot be null")
            else:
                patch[k] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except ValidationError as exc:
            for key, messages in exc.errors.items():
                for message in messages:
                    errors.add(key, message)
            continue

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and isinstance(val, str) and val == "":
            if not col.nullable or k in policy.required_on_create:
                errors.add(k, f"{k} cannot be blank")
                continue
            val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                errors.add(k, f"{k} exceeds max length {col.type.length}")
                continue

        if k in policy.choices and val not in policy.choices[k]:
            errors.add(k, f"{k} must be one of: {', '.join(policy.choices[k])}")
            continue

        if k in policy.non_negative and val is not None and val < 0:
            errors.add(k, f"{k} must be >= 0")
            continue

        patch[k] = val

    errors.raise_if_any()
    return patch


def require_date_range(start, end, *, required: bool = True) -> tuple[date | None, date | None]:
    """
    Parse an inclusive [start_date, end_date] pair.

    With required=True both must be present; in every case end_date must not
    precede start_date.
    """
    errors = FieldErrors()
    parsed: dict[str, date | None] = {}

    for key, raw in (("start_date", start), ("end_date", end)):
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            if required:
                errors.add(key, f"{key} is required")
            parsed[key] = None
            continue
        try:
            parsed[key] = coerce_date(key, raw)
        except ValidationError as exc:
            for message in exc.errors.get(key, []):
                errors.add(key, message)
            parsed[key] = None

    start_d, end_d = parsed["start_date"], parsed["end_date"]
    if start_d and end_d and end_d < start_d:
        errors.add("end_date", "end_date must be on or after start_date")

    errors.raise_if_any()
    return start_d, end_d
