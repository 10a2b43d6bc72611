# Overview: Pytest coverage for the dashboard and reports HTTP endpoints.


def _record_sale(client, headers, product, sale_date, qty=1, price="10.00"):
    resp = client.post("/api/sales", json={
        "sale_date": sale_date,
        "payment_method": "cash",
        "payment_status": "paid",
        "items": [{"product_id": product.id, "quantity": qty, "unit_price": price}],
    }, headers=headers)
    assert resp.status_code == 201


class TestDashboardEndpoints:
    def test_dashboard_shape(self, client, db_session):
        resp = client.get("/api/dashboard?period=week")
        assert resp.status_code == 200
        body = resp.json
        assert body["period"] == "week"
        for key in ("summary", "products", "top_products", "sales_trend", "recent_sales"):
            assert key in body

    def test_profit_loss(self, client, db_session, headers, make_product):
        a = make_product(stock=10, cost="6.00")
        _record_sale(client, headers, a, "2025-01-05", qty=3)

        resp = client.get("/api/dashboard/profit-loss?start_date=2025-01-01&end_date=2025-01-31")
        assert resp.status_code == 200
        assert resp.json["gross_profit"] == "12.00"
        assert resp.json["cost_of_goods_sold"] == "18.00"

    def test_profit_loss_requires_valid_range(self, client, db_session):
        resp = client.get("/api/dashboard/profit-loss?start_date=2025-02-01&end_date=2025-01-01")
        assert resp.status_code == 400
        assert "end_date" in resp.json["errors"]

        resp = client.get("/api/dashboard/profit-loss")
        assert resp.status_code == 400


class TestReportEndpoints:
    def test_generate_list_get_delete(self, client, db_session, headers, make_product):
        a = make_product(stock=10, cost="6.00")
        _record_sale(client, headers, a, "2025-01-05", qty=2)

        resp = client.post("/api/reports/generate", json={
            "report_type": "monthly",
            "start_date": "2025-01-01",
            "end_date": "2025-01-31",
        }, headers=headers)
        assert resp.status_code == 201
        report = resp.json["report"]
        assert report["data"]["sales"]["total"] == "20.00"
        assert report["data"]["profit"]["gross"] == "8.00"

        listing = client.get("/api/reports?report_type=monthly").json
        assert listing["count"] == 1

        got = client.get(f"/api/reports/{report['id']}")
        assert got.status_code == 200
        assert got.json["report_type"] == "monthly"

        assert client.delete(f"/api/reports/{report['id']}").status_code == 401
        assert client.delete(f"/api/reports/{report['id']}", headers=headers).status_code == 200
        assert client.get(f"/api/reports/{report['id']}").status_code == 404

    def test_generate_validation(self, client, db_session, headers):
        resp = client.post("/api/reports/generate", json={"report_type": "yearly"}, headers=headers)
        assert resp.status_code == 400

        resp = client.post("/api/reports/generate", json={
            "report_type": "daily",
            "start_date": "2025-01-02",
            "end_date": "2025-01-01",
        }, headers=headers)
        assert resp.status_code == 400

    def test_generate_rejects_non_object_body(self, client, db_session, headers):
        resp = client.post("/api/reports/generate", json=["monthly"], headers=headers)
        assert resp.status_code == 400

    def test_generate_requires_user(self, client, db_session):
        resp = client.post("/api/reports/generate", json={
            "report_type": "daily", "start_date": "2025-01-01", "end_date": "2025-01-01",
        })
        assert resp.status_code == 401

    def test_sales_and_expense_reports(self, client, db_session, headers, make_product):
        a = make_product(stock=10)
        _record_sale(client, headers, a, "2025-01-05", qty=2)
        client.post("/api/expenses", json={
            "category": "Rent",
            "description": "Office rent",
            "amount": "2500.00",
            "expense_date": "2025-01-01",
        }, headers=headers)

        sales = client.get("/api/reports/sales?start_date=2025-01-01&end_date=2025-01-31").json
        assert sales["summary"]["payment_methods"] == {"cash": {"count": 1, "total": "20.00"}}

        expenses = client.get("/api/reports/expenses?start_date=2025-01-01&end_date=2025-01-31").json
        assert expenses["summary"]["by_category"] == {"Rent": {"count": 1, "total": "2500.00"}}

        bad = client.get("/api/reports/sales?start_date=garbage")
        assert bad.status_code == 400
