"""Test API endpoints."""

import json


class TestPing:
    """Test GET /api/ping."""

    def test_ping(self, client):
        response = client.get("/api/ping")
        assert response.status_code == 200
        assert response.json == {"message": "ping"}


class TestProductsEndpoint:
    """Test the /api/products endpoints."""

    def test_list_returns_visible_products(self, client):
        response = client.get("/api/products")
        assert response.status_code == 200
        data = response.json
        assert data["total"] == 3
        assert data["page"] == 1
        assert {p["id"] for p in data["products"]} == {"abaya-01", "kaftan-01", "dress-01"}

    def test_list_with_query_and_category(self, client):
        response = client.get("/api/products?q=kaftan&category=Kaftans")
        assert [p["id"] for p in response.json["products"]] == ["kaftan-01"]

    def test_list_bad_page_param(self, client):
        response = client.get("/api/products?page=two")
        assert response.status_code == 400
        assert response.json["kind"] == "ValidationError"

    def test_list_bad_sort(self, client):
        assert client.get("/api/products?sort=rating").status_code == 400

    def test_get_product_includes_stock(self, client, services):
        services.inventory.set_stock("abaya-01", 4)
        response = client.get("/api/products/abaya-01")
        assert response.status_code == 200
        assert response.json["title"] == "Classic Abaya"
        assert response.json["stock"] == 4

    def test_get_missing_product(self, client):
        response = client.get("/api/products/nope")
        assert response.status_code == 404
        assert response.json["kind"] == "NotFoundError"

    def test_post_overrides_price(self, client):
        response = client.post("/api/products", json={"id": "abaya-01", "price": 95})
        assert response.status_code == 200
        assert response.json["price"] == 95
        assert response.json["image"] == "a.jpg"

    def test_post_invalid_product(self, client):
        response = client.post("/api/products", json={"id": "new", "title": "Only title"})
        assert response.status_code == 400
        assert "missing" in response.json["error"]

    def test_post_requires_json(self, client):
        response = client.post("/api/products", data="text", content_type="text/plain")
        assert response.status_code == 400

    def test_patch_uses_url_id(self, client):
        response = client.patch("/api/products/kaftan-01", json={"onSale": True})
        assert response.status_code == 200
        assert response.json["id"] == "kaftan-01"
        assert response.json["onSale"] is True

    def test_delete(self, client):
        assert client.delete("/api/products/abaya-01").status_code == 204
        assert client.get("/api/products/abaya-01").status_code == 404

    def test_hide_excludes_from_default_list(self, client):
        response = client.post("/api/products/dress-01/hidden", json={"hidden": True})
        assert response.status_code == 200
        assert response.json["hidden"] is True

        ids = [p["id"] for p in client.get("/api/products").json["products"]]
        assert "dress-01" not in ids
        ids = [p["id"] for p in client.get("/api/products?include_hidden=true").json["products"]]
        assert "dress-01" in ids

    def test_hide_requires_boolean(self, client):
        response = client.post("/api/products/dress-01/hidden", json={"hidden": "yes"})
        assert response.status_code == 400

    def test_duplicate(self, client):
        response = client.post("/api/products/abaya-01/duplicate")
        assert response.status_code == 201
        assert response.json["id"] == "classic-abaya-copy"

    def test_categories(self, client):
        response = client.get("/api/categories")
        assert response.json == {"categories": ["Abayas", "Kaftans", "Modest Dresses"]}


class TestOverridesEndpoint:
    """Test override export/import endpoints."""

    def test_export_is_attachment(self, client):
        client.delete("/api/products/abaya-01")
        response = client.get("/api/overrides")
        assert response.status_code == 200
        assert "catalog_overrides.json" in response.headers["Content-Disposition"]
        assert json.loads(response.data) == {"abaya-01": {"id": "abaya-01", "deleted": True}}

    def test_import(self, client):
        body = json.dumps({"kaftan-01": {"id": "kaftan-01", "price": 10}})
        response = client.post("/api/import-products", data=body, content_type="application/json")
        assert response.json == {"imported": 1}
        assert client.get("/api/products/kaftan-01").json["price"] == 10

    def test_import_malformed(self, client):
        response = client.post("/api/import-products", data='{"bad": ["not","a","record"]}')
        assert response.status_code == 400

    def test_import_not_json(self, client):
        response = client.post("/api/import-products", data="{oops")
        assert response.status_code == 400
        assert response.json["kind"] == "ParseError"

    def test_clear(self, client):
        client.post("/api/products", json={"id": "abaya-01", "price": 95})
        assert client.delete("/api/overrides").status_code == 204
        assert client.get("/api/products/abaya-01").json["price"] == 80


class TestInventoryEndpoint:
    """Test /api/inventory endpoints."""

    def test_set_and_get_stock(self, client):
        response = client.put("/api/inventory/abaya-01", json={"stock": 6})
        assert response.json == {"id": "abaya-01", "stock": 6}
        assert client.get("/api/inventory/abaya-01").json["stock"] == 6

    def test_negative_stock(self, client):
        response = client.put("/api/inventory/abaya-01", json={"stock": -1})
        assert response.status_code == 400
        assert client.get("/api/inventory/abaya-01").json["stock"] == 0

    def test_export_import_reset(self, client):
        client.put("/api/inventory/abaya-01", json={"stock": 6})
        exported = client.get("/api/inventory").data

        assert client.delete("/api/inventory").status_code == 204
        assert client.get("/api/inventory/abaya-01").json["stock"] == 0

        response = client.post("/api/inventory/import", data=exported)
        assert response.json == {"imported": 1}
        assert client.get("/api/inventory/abaya-01").json["stock"] == 6


class TestContentEndpoint:
    """Test /api/content endpoints."""

    def test_get_defaults(self, client):
        response = client.get("/api/content")
        assert response.status_code == 200
        assert "hero_title" in response.json

    def test_save(self, client):
        response = client.put("/api/content", json={"hero_title": "Eid Collection"})
        assert response.status_code == 200
        assert response.json["hero_title"] == "Eid Collection"

    def test_save_unknown_field(self, client):
        response = client.put("/api/content", json={"footer": "x"})
        assert response.status_code == 400
