# Overview: Pytest coverage for the customers and expenses HTTP endpoints.

from datetime import date

from app.services import sales_service


class TestCustomers:
    def test_create_get_update_delete(self, client, db_session):
        resp = client.post("/api/customers", json={
            "name": "ABC Corporation",
            "email": "contact@abc.com",
            "phone": "1234567890",
            "customer_type": "wholesale",
        })
        assert resp.status_code == 201
        cid = resp.json["id"]

        resp = client.put(f"/api/customers/{cid}", json={"address": "123 Business St, City"})
        assert resp.status_code == 200
        assert resp.json["address"] == "123 Business St, City"

        assert client.delete(f"/api/customers/{cid}").status_code == 200
        assert client.get(f"/api/customers/{cid}").status_code == 404

    def test_validation(self, client, db_session):
        resp = client.post("/api/customers", json={"customer_type": "vip", "phone": "1" * 30})
        assert resp.status_code == 400
        errors = resp.json["errors"]
        assert "name" in errors
        assert "customer_type" in errors
        assert "phone" in errors

    def test_duplicate_email(self, client, db_session):
        client.post("/api/customers", json={"name": "A", "email": "a@x.com"})
        resp = client.post("/api/customers", json={"name": "B", "email": "a@x.com"})
        assert resp.status_code == 409

    def test_search_and_type_filter(self, client, db_session):
        client.post("/api/customers", json={"name": "John Doe", "email": "john@example.com"})
        client.post("/api/customers", json={"name": "Tech Solutions Inc", "customer_type": "wholesale"})

        assert client.get("/api/customers?search=john").json["count"] == 1
        assert client.get("/api/customers?customer_type=wholesale").json["count"] == 1
        assert client.get("/api/customers").json["pagination"]["total"] == 2

    def test_detail_lists_sales_by_name(self, client, db_session, user, make_product):
        cid = client.post("/api/customers", json={"name": "Jane Smith"}).json["id"]
        p = make_product(stock=10)
        for name in ("Jane Smith", "Jane Smith", "Someone Else"):
            sales_service.create_sale(
                user_id=user.id,
                sale_date=date(2025, 1, 1),
                payment_method="cash",
                payment_status="paid",
                customer_name=name,
                items=[{"product_id": p.id, "quantity": 1, "unit_price": "12.50"}],
            )

        body = client.get(f"/api/customers/{cid}").json
        assert len(body["sales"]) == 2
        assert body["total_purchases"] == "25.00"


class TestExpenses:
    def _payload(self, **overrides):
        data = {
            "category": "Utilities",
            "description": "Electricity bill",
            "amount": "350.00",
            "expense_date": "2025-01-10",
            "payment_method": "transfer",
            "receipt_number": "ELEC-2025-01",
        }
        data.update(overrides)
        return data

    def test_create_requires_user(self, client, db_session):
        resp = client.post("/api/expenses", json=self._payload())
        assert resp.status_code == 401

    def test_unknown_user_rejected(self, client, db_session):
        resp = client.post("/api/expenses", json=self._payload(), headers={"X-User-Id": "999"})
        assert resp.status_code == 401

    def test_create_attributes_user(self, client, db_session, user, headers):
        resp = client.post("/api/expenses", json=self._payload(), headers=headers)
        assert resp.status_code == 201
        assert resp.json["user_id"] == user.id
        assert resp.json["user"]["email"] == user.email
        assert resp.json["amount"] == "350.00"
        assert resp.json["expense_date"] == "2025-01-10"

    def test_validation(self, client, db_session, headers):
        resp = client.post("/api/expenses", json={
            "amount": "-5",
            "expense_date": "10/01/2025",
            "payment_method": "credit",
        }, headers=headers)
        assert resp.status_code == 400
        errors = resp.json["errors"]
        for key in ("category", "description", "amount", "expense_date", "payment_method"):
            assert key in errors

    def test_list_filters_categories_summary(self, client, db_session, headers):
        client.post("/api/expenses", json=self._payload(), headers=headers)
        client.post("/api/expenses", json=self._payload(category="Rent", amount="2500.00", expense_date="2025-01-01",
                                                        receipt_number="RENT-2025-01"), headers=headers)
        client.post("/api/expenses", json=self._payload(amount="100.00", expense_date="2024-12-20",
                                                        description="Internet service"), headers=headers)

        listing = client.get("/api/expenses").json
        assert [e["expense_date"] for e in listing["items"]] == ["2025-01-10", "2025-01-01", "2024-12-20"]

        assert client.get("/api/expenses?category=Rent").json["count"] == 1
        assert client.get("/api/expenses?search=internet").json["count"] == 1
        assert client.get("/api/expenses?start_date=2025-01-01&end_date=2025-01-31").json["count"] == 2

        assert client.get("/api/expenses/categories").json["categories"] == ["Rent", "Utilities"]

        summary = client.get("/api/expenses/summary?start_date=2025-01-01&end_date=2025-01-31").json
        assert summary["total_expenses"] == "2850.00"
        assert summary["by_category"][0] == {"category": "Rent", "count": 1, "total": "2500.00"}

    def test_update_and_delete(self, client, db_session, headers):
        eid = client.post("/api/expenses", json=self._payload(), headers=headers).json["id"]

        resp = client.put(f"/api/expenses/{eid}", json={"amount": "360.00", "notes": "late fee"})
        assert resp.status_code == 200
        assert resp.json["amount"] == "360.00"

        assert client.delete(f"/api/expenses/{eid}").status_code == 200
        assert client.get(f"/api/expenses/{eid}").status_code == 404
        assert client.get("/api/expenses/summary").json["total_expenses"] == "0.00"
