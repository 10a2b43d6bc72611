# Overview: Read-only aggregations behind the dashboard and the profit & loss statement.

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from app.extensions import db
from app.finance import (
    ZERO,
    format_money,
    item_profit,
    item_total_cost,
    percentage,
    round_pct,
    to_decimal,
)
from app.models import Expense, Product, Sale, SaleItem
from app.services.expenses_service import expenses_by_category
from app.services.sales_service import live_sales, sales_totals
from app.time_utils import PERIODS, period_start, to_iso_date, utcnow
from app.validation import require_date_range


def _item_rows(start_date: date | None, end_date: date | None):
    """(quantity, unit_price, cost_price) of every item on live sales in range."""
    q = (
        db.session.query(SaleItem.quantity, SaleItem.unit_price, SaleItem.cost_price)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(Sale.deleted_at.is_(None))
    )
    if start_date is not None:
        q = q.filter(Sale.sale_date >= start_date)
    if end_date is not None:
        q = q.filter(Sale.sale_date <= end_date)
    return q.all()


def expense_totals(start_date: date | None, end_date: date | None) -> tuple[int, Decimal]:
    q = Expense.live_query()
    if start_date is not None:
        q = q.filter(Expense.expense_date >= start_date)
    if end_date is not None:
        q = q.filter(Expense.expense_date <= end_date)
    count, total = q.with_entities(
        func.count(Expense.id),
        func.coalesce(func.sum(Expense.amount), 0),
    ).one()
    return int(count), to_decimal(total)


def profit_figures(start_date: date | None, end_date: date | None) -> dict:
    """
    Decimal building blocks shared by the dashboard, P&L and report snapshots.

    gross_profit is the sum of per-item profit, which equals revenue minus
    cost of goods sold because sale totals are the sum of item subtotals.
    """
    count, revenue = sales_totals(start_date, end_date)
    rows = _item_rows(start_date, end_date)
    expense_count, expenses = expense_totals(start_date, end_date)

    gross = sum((item_profit(r) for r in rows), ZERO)
    cogs = sum((item_total_cost(r) for r in rows), ZERO)
    net = gross - expenses

    return {
        "sales_count": count,
        "revenue": revenue,
        "cost_of_goods_sold": cogs,
        "gross_profit": gross,
        "expense_count": expense_count,
        "expenses": expenses,
        "net_profit": net,
    }


def _top_products(start_date: date, end_date: date, limit: int) -> list[dict]:
    # deleted products keep appearing under their historical sales
    total_qty = func.sum(SaleItem.quantity).label("total_quantity")
    rows = (
        db.session.query(
            Product.id,
            Product.name,
            total_qty,
            func.coalesce(func.sum(SaleItem.subtotal), 0).label("total_revenue"),
        )
        .join(SaleItem, SaleItem.product_id == Product.id)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(
            Sale.deleted_at.is_(None),
            Sale.sale_date >= start_date,
            Sale.sale_date <= end_date,
        )
        .group_by(Product.id, Product.name)
        .order_by(total_qty.desc(), Product.id.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": row.id,
            "name": row.name,
            "total_quantity": int(row.total_quantity or 0),
            "total_revenue": format_money(row.total_revenue),
        }
        for row in rows
    ]


def _sales_trend(start_date: date, end_date: date) -> list[dict]:
    rows = (
        live_sales(start_date, end_date)
        .with_entities(
            Sale.sale_date,
            func.coalesce(func.sum(Sale.total_amount), 0),
            func.count(Sale.id),
        )
        .group_by(Sale.sale_date)
        .order_by(Sale.sale_date.asc())
        .all()
    )
    return [
        {"date": to_iso_date(d), "total": format_money(total), "count": int(count)}
        for d, total, count in rows
    ]


def dashboard_summary(period: str = "today", now: datetime | None = None) -> dict:
    """
    Headline figures for one period (today, week, month or year).

    Unknown periods fall back to today. The range runs from the start of the
    period to `now`, compared on calendar dates.
    """
    if period not in PERIODS:
        period = "today"
    now = now or utcnow()
    start_date = period_start(period, now).date()
    end_date = now.date()

    figures = profit_figures(start_date, end_date)

    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)
    active = Product.live_query().filter(Product.is_active.is_(True))
    total_active = active.count()
    low_stock_count = active.filter(Product.stock_quantity <= threshold).count()

    recent_limit = current_app.config.get("RECENT_SALES_LIMIT", 5)
    recent = (
        Sale.live_query()
        .order_by(Sale.sale_date.desc(), Sale.id.desc())
        .limit(recent_limit)
        .all()
    )

    return {
        "period": period,
        "start_date": to_iso_date(start_date),
        "end_date": to_iso_date(end_date),
        "summary": {
            "total_sales": format_money(figures["revenue"]),
            "total_transactions": figures["sales_count"],
            "total_expenses": format_money(figures["expenses"]),
            "gross_profit": format_money(figures["gross_profit"]),
            "net_profit": format_money(figures["net_profit"]),
            "profit_margin": round_pct(percentage(figures["net_profit"], figures["revenue"])),
        },
        "products": {
            "total_active": total_active,
            "low_stock_count": low_stock_count,
        },
        "top_products": _top_products(
            start_date, end_date, current_app.config.get("TOP_PRODUCTS_LIMIT", 5)
        ),
        "sales_trend": _sales_trend(start_date, end_date),
        "recent_sales": [s.to_dict(with_items=True, with_user=True) for s in recent],
    }


def profit_and_loss(start_date, end_date) -> dict:
    """
    Profit & loss statement over an inclusive date range.

    Both dates are required and end_date must not precede start_date
    (ValidationError otherwise). Margins are 0 when there is no revenue.
    """
    start_date, end_date = require_date_range(start_date, end_date, required=True)

    figures = profit_figures(start_date, end_date)
    revenue = figures["revenue"]
    cogs = figures["cost_of_goods_sold"]
    gross = revenue - cogs
    expenses = figures["expenses"]
    net = gross - expenses

    return {
        "period": {
            "start_date": to_iso_date(start_date),
            "end_date": to_iso_date(end_date),
        },
        "revenue": {
            "total_sales": format_money(revenue),
            "number_of_transactions": figures["sales_count"],
        },
        "cost_of_goods_sold": format_money(cogs),
        "gross_profit": format_money(gross),
        "gross_profit_margin": round_pct(percentage(gross, revenue)),
        "operating_expenses": {
            "breakdown": [
                {"category": row["category"], "total": format_money(row["total"])}
                for row in expenses_by_category(start_date, end_date)
            ],
            "total": format_money(expenses),
        },
        "net_profit": format_money(net),
        "net_profit_margin": round_pct(percentage(net, revenue)),
    }
