from __future__ import annotations

from flask import current_app

from ..validation import ValidationError


def _config_int(key: str, default: int) -> int:
    try:
        return int(current_app.config.get(key, default))
    except RuntimeError:
        return default


def parse_page_args(args) -> tuple[int, int]:
    """Read `page` / `per_page` from request args, rejecting non-integers."""
    errors: dict[str, list[str]] = {}
    values = {}
    for key in ("page", "per_page"):
        raw = args.get(key)
        if raw is None or raw == "":
            values[key] = None
            continue
        try:
            values[key] = int(raw)
        except (TypeError, ValueError):
            errors[key] = [f"{key} must be an integer"]
    if errors:
        raise ValidationError("Invalid pagination parameters", errors)
    return values["page"], values["per_page"]


def paginate(query, page: int | None = None, per_page: int | None = None, *, serialize=None) -> dict:
    """
    Offset pagination over an ordered query.

    Returns {"items", "count", "pagination": {...}}. per_page defaults to
    DEFAULT_PER_PAGE and is capped at MAX_PER_PAGE; page is at least 1.
    """
    default_per_page = _config_int("DEFAULT_PER_PAGE", 15)
    max_per_page = _config_int("MAX_PER_PAGE", 100)

    per_page = min(per_page or default_per_page, max_per_page)
    per_page = max(per_page, 1)
    page = max(page or 1, 1)

    total = query.order_by(None).count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    rows = query.offset((page - 1) * per_page).limit(per_page).all()
    serialize = serialize or (lambda row: row.to_dict())

    return {
        "items": [serialize(r) for r in rows],
        "count": len(rows),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }
