# Overview: Pytest coverage for sales/expense reports and report snapshots.

from datetime import date
from decimal import Decimal

import pytest

from app.models import Expense, Report
from app.services import reporting_service, sales_service
from app.services.reporting_service import ReportError
from app.validation import NotFoundError


@pytest.fixture
def activity(db_session, user, make_product):
    """Two cash/card sales and two expenses in January 2025, one sale in February."""
    a = make_product(stock=50, cost="6.00")
    for qty, method, day in ((3, "cash", date(2025, 1, 5)), (1, "card", date(2025, 1, 6)), (2, "cash", date(2025, 2, 1))):
        sales_service.create_sale(
            user_id=user.id,
            sale_date=day,
            payment_method=method,
            payment_status="paid",
            items=[{"product_id": a.id, "quantity": qty, "unit_price": "10.00"}],
        )
    for amount, category in (("4.00", "Supplies"), ("6.00", "Utilities")):
        db_session.add(Expense(
            user_id=user.id,
            category=category,
            description=category,
            amount=Decimal(amount),
            expense_date=date(2025, 1, 10),
            payment_method="cash",
        ))
    db_session.commit()
    return a


class TestSalesReport:
    def test_summary_and_payment_breakdown(self, activity):
        report = reporting_service.sales_report("2025-01-01", "2025-01-31")

        assert len(report["sales"]) == 2
        assert report["summary"]["total_sales"] == "40.00"
        assert report["summary"]["total_transactions"] == 2
        assert report["summary"]["average_transaction"] == "20.00"
        assert report["summary"]["payment_methods"] == {
            "card": {"count": 1, "total": "10.00"},
            "cash": {"count": 1, "total": "30.00"},
        }

    def test_open_range_includes_everything(self, activity):
        report = reporting_service.sales_report()
        assert report["summary"]["total_transactions"] == 3

    def test_bad_range_raises_report_error(self, db_session):
        with pytest.raises(ReportError):
            reporting_service.sales_report("2025-02-01", "2025-01-01")


class TestExpenseReport:
    def test_summary_and_category_breakdown(self, activity):
        report = reporting_service.expense_report("2025-01-01", "2025-01-31")

        assert report["summary"]["total_expenses"] == "10.00"
        assert report["summary"]["total_transactions"] == 2
        assert report["summary"]["average"] == "5.00"
        assert report["summary"]["by_category"]["Utilities"] == {"count": 1, "total": "6.00"}

    def test_empty(self, db_session):
        report = reporting_service.expense_report("2025-01-01", "2025-01-31")
        assert report["expenses"] == []
        assert report["summary"]["average"] == "0.00"


class TestGenerateReport:
    def test_snapshot_contents(self, activity, user):
        report = reporting_service.generate_report(
            user_id=user.id, report_type="monthly", start="2025-01-01", end="2025-01-31"
        )

        assert report.id is not None
        assert report.user_id == user.id
        assert report.data == {
            "sales": {"total": "40.00", "count": 2, "average": "20.00"},
            "expenses": {"total": "10.00", "count": 2},
            "profit": {"gross": "16.00", "net": "6.00", "margin": 15.0},
        }

    def test_snapshot_is_not_recomputed(self, activity, user, make_product):
        report = reporting_service.generate_report(
            user_id=user.id, report_type="custom", start="2025-01-01", end="2025-01-31"
        )
        b = make_product(stock=5)
        sales_service.create_sale(
            user_id=user.id,
            sale_date=date(2025, 1, 20),
            payment_method="cash",
            payment_status="paid",
            items=[{"product_id": b.id, "quantity": 1, "unit_price": "100.00"}],
        )

        again = reporting_service.get_report(report.id)
        assert again["data"]["sales"]["total"] == "40.00"

    def test_unknown_type_rejected(self, db_session, user):
        with pytest.raises(ReportError):
            reporting_service.generate_report(
                user_id=user.id, report_type="quarterly", start="2025-01-01", end="2025-01-31"
            )

    def test_dates_required(self, db_session, user):
        with pytest.raises(ReportError):
            reporting_service.generate_report(user_id=user.id, report_type="daily", start=None, end=None)


class TestReportListing:
    def test_list_filter_get_delete(self, db_session, user):
        for report_type in ("daily", "weekly", "daily"):
            reporting_service.generate_report(
                user_id=user.id, report_type=report_type, start="2025-01-01", end="2025-01-01"
            )

        assert reporting_service.list_reports()["pagination"]["total"] == 3
        daily = reporting_service.list_reports(report_type="daily")
        assert daily["count"] == 2
        assert daily["items"][0]["user"]["id"] == user.id

        report_id = daily["items"][0]["id"]
        reporting_service.delete_report(report_id)
        assert db_session.get(Report, report_id) is None

        with pytest.raises(NotFoundError):
            reporting_service.get_report(report_id)
        with pytest.raises(NotFoundError):
            reporting_service.delete_report(report_id)
