# Overview: Pytest coverage for the products and health HTTP endpoints.

from app.extensions import db
from app.models import Product


def _payload(**overrides):
    data = {
        "name": "Wireless Mouse Logitech",
        "sku": "ACC-LOG-001",
        "cost_price": "15.00",
        "selling_price": "25.00",
        "stock_quantity": 100,
        "category": "Accessories",
    }
    data.update(overrides)
    return data


class TestHealth:
    def test_health_ok(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["checks"]["database"]["status"] == "healthy"


class TestCreateProduct:
    def test_create(self, client, db_session):
        resp = client.post("/api/products", json=_payload())
        assert resp.status_code == 201
        body = resp.json
        assert body["sku"] == "ACC-LOG-001"
        assert body["cost_price"] == "15.00"
        assert body["selling_price"] == "25.00"
        assert body["profit_margin"] == 66.67
        assert body["stock_quantity"] == 100
        assert body["unit"] == "piece"

    def test_duplicate_sku_conflict(self, client, db_session):
        client.post("/api/products", json=_payload())
        resp = client.post("/api/products", json=_payload(name="Other"))
        assert resp.status_code == 409
        assert "sku" in resp.json["errors"]

    def test_sku_of_deleted_product_stays_reserved(self, client, db_session):
        created = client.post("/api/products", json=_payload()).json
        client.delete(f"/api/products/{created['id']}")
        resp = client.post("/api/products", json=_payload())
        assert resp.status_code == 409

    def test_field_errors(self, client, db_session):
        resp = client.post("/api/products", json={
            "sku": "X-1",
            "cost_price": "-1",
            "selling_price": "abc",
            "stock_quantity": -5,
            "owner": "me",
        })
        assert resp.status_code == 400
        errors = resp.json["errors"]
        assert "name" in errors
        assert "cost_price" in errors
        assert "selling_price" in errors
        assert "stock_quantity" in errors
        assert "owner" in errors


class TestReadProducts:
    def test_list_filters_and_pagination(self, client, db_session, make_product):
        make_product("A-1", stock=3, category="Electronics", name="Laptop")
        make_product("A-2", stock=50, category="Electronics", name="Monitor")
        make_product("B-1", stock=50, category="Stationery", name="Pen Set")
        make_product("B-2", stock=50, category="Stationery", name="Old", is_active=False)

        resp = client.get("/api/products?per_page=2")
        assert resp.status_code == 200
        assert resp.json["count"] == 2
        assert resp.json["pagination"] == {
            "page": 1,
            "per_page": 2,
            "total": 4,
            "total_pages": 2,
            "has_next": True,
            "has_prev": False,
        }

        assert client.get("/api/products?category=Electronics").json["count"] == 2
        assert client.get("/api/products?search=pen").json["count"] == 1
        assert client.get("/api/products?is_active=false").json["count"] == 1
        low = client.get("/api/products?low_stock=true").json
        assert [p["sku"] for p in low["items"]] == ["A-1"]

    def test_bad_page_param(self, client, db_session):
        resp = client.get("/api/products?page=abc")
        assert resp.status_code == 400
        assert "page" in resp.json["errors"]

    def test_per_page_capped(self, client, db_session):
        resp = client.get("/api/products?per_page=1000")
        assert resp.json["pagination"]["per_page"] == 100

    def test_categories(self, client, db_session, make_product):
        make_product(category="Furniture")
        make_product(category="Electronics")
        make_product(category="Electronics")
        make_product()
        resp = client.get("/api/products/categories")
        assert resp.json["categories"] == ["Electronics", "Furniture"]

    def test_get_missing(self, client, db_session):
        resp = client.get("/api/products/9999")
        assert resp.status_code == 404
        assert resp.json["error"] == "Product not found"


class TestUpdateDeleteProduct:
    def test_update_stock_goes_through_ledger(self, client, db_session, make_product):
        p = make_product(stock=5)
        resp = client.put(f"/api/products/{p.id}", json={"stock_quantity": 8, "selling_price": "12.50"})
        assert resp.status_code == 200
        assert resp.json["stock_quantity"] == 8
        assert resp.json["selling_price"] == "12.50"

        resp = client.put(f"/api/products/{p.id}", json={"stock_quantity": 0})
        assert resp.json["stock_quantity"] == 0

    def test_update_sku_conflict(self, client, db_session, make_product):
        make_product("TAKEN")
        p = make_product("MINE")
        resp = client.put(f"/api/products/{p.id}", json={"sku": "TAKEN"})
        assert resp.status_code == 409

    def test_soft_delete(self, client, db_session, make_product):
        p = make_product()
        resp = client.delete(f"/api/products/{p.id}")
        assert resp.status_code == 200

        assert client.get(f"/api/products/{p.id}").status_code == 404
        assert client.get("/api/products").json["count"] == 0
        assert db.session.get(Product, p.id).deleted_at is not None
        assert client.delete(f"/api/products/{p.id}").status_code == 404


class TestErrorHandling:
    def test_unknown_route_json_404(self, client, db_session):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert "error" in resp.json

    def test_wrong_method_json_405(self, client, db_session):
        resp = client.patch("/api/products")
        assert resp.status_code == 405
        assert "error" in resp.json
