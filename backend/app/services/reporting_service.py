# Overview: Sales/expense reports and persisted report snapshots.

from __future__ import annotations

from datetime import date

from app.extensions import db
from app.finance import ZERO, format_money, percentage, round_pct, to_decimal
from app.models import REPORT_TYPES, Expense, Report, Sale
from app.services.dashboard_service import profit_figures
from app.services.pagination import paginate
from app.services.sales_service import live_sales
from app.validation import NotFoundError, ValidationError, require_date_range


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _parse_range(start, end, *, required: bool) -> tuple[date | None, date | None]:
    try:
        return require_date_range(start, end, required=required)
    except ValidationError as exc:
        messages = [m for msgs in exc.errors.values() for m in msgs]
        raise ReportError("; ".join(messages) or str(exc)) from exc


def _average(total, count: int):
    return total / count if count else ZERO


def sales_report(start=None, end=None) -> dict:
    """Live sales in range with totals and a per-payment-method breakdown."""
    start_date, end_date = _parse_range(start, end, required=False)

    sales = (
        live_sales(start_date, end_date)
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .all()
    )

    total = ZERO
    methods: dict[str, dict] = {}
    for s in sales:
        amount = to_decimal(s.total_amount)
        total += amount
        bucket = methods.setdefault(s.payment_method, {"count": 0, "total": ZERO})
        bucket["count"] += 1
        bucket["total"] += amount

    return {
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "sales": [s.to_dict(with_items=True, with_user=True) for s in sales],
        "summary": {
            "total_sales": format_money(total),
            "total_transactions": len(sales),
            "average_transaction": format_money(_average(total, len(sales))),
            "payment_methods": {
                method: {"count": b["count"], "total": format_money(b["total"])}
                for method, b in sorted(methods.items())
            },
        },
    }


def expense_report(start=None, end=None) -> dict:
    """Live expenses in range with totals and a per-category breakdown."""
    start_date, end_date = _parse_range(start, end, required=False)

    q = Expense.live_query()
    if start_date is not None:
        q = q.filter(Expense.expense_date >= start_date)
    if end_date is not None:
        q = q.filter(Expense.expense_date <= end_date)
    expenses = q.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()

    total = ZERO
    categories: dict[str, dict] = {}
    for e in expenses:
        amount = to_decimal(e.amount)
        total += amount
        bucket = categories.setdefault(e.category, {"count": 0, "total": ZERO})
        bucket["count"] += 1
        bucket["total"] += amount

    return {
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "expenses": [e.to_dict(with_user=True) for e in expenses],
        "summary": {
            "total_expenses": format_money(total),
            "total_transactions": len(expenses),
            "average": format_money(_average(total, len(expenses))),
            "by_category": {
                category: {"count": b["count"], "total": format_money(b["total"])}
                for category, b in sorted(categories.items())
            },
        },
    }


def build_snapshot(start_date: date, end_date: date) -> dict:
    figures = profit_figures(start_date, end_date)
    return {
        "sales": {
            "total": format_money(figures["revenue"]),
            "count": figures["sales_count"],
            "average": format_money(_average(figures["revenue"], figures["sales_count"])),
        },
        "expenses": {
            "total": format_money(figures["expenses"]),
            "count": figures["expense_count"],
        },
        "profit": {
            "gross": format_money(figures["gross_profit"]),
            "net": format_money(figures["net_profit"]),
            "margin": round_pct(percentage(figures["net_profit"], figures["revenue"])),
        },
    }


def generate_report(*, user_id: int, report_type: str, start, end) -> Report:
    """
    Compute figures for the range and persist them as an immutable snapshot.

    Raises ReportError on an unknown report_type or a bad/missing range.
    """
    if report_type not in REPORT_TYPES:
        raise ReportError(f"report_type must be one of: {', '.join(REPORT_TYPES)}")
    start_date, end_date = _parse_range(start, end, required=True)

    report = Report(
        user_id=user_id,
        report_type=report_type,
        start_date=start_date,
        end_date=end_date,
        data=build_snapshot(start_date, end_date),
    )
    db.session.add(report)
    db.session.commit()
    return report


def list_reports(*, report_type: str | None = None, page: int | None = None, per_page: int | None = None) -> dict:
    q = db.session.query(Report)
    if report_type:
        q = q.filter(Report.report_type == report_type)
    q = q.order_by(Report.created_at.desc(), Report.id.desc())
    return paginate(q, page, per_page, serialize=lambda r: r.to_dict(with_user=True))


def _get(report_id: int) -> Report:
    report = db.session.get(Report, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    return report


def get_report(report_id: int) -> dict:
    return _get(report_id).to_dict(with_user=True)


def delete_report(report_id: int) -> None:
    """Reports are never edited; deletion is permanent."""
    db.session.delete(_get(report_id))
    db.session.commit()
