"""Tests for the product endpoints."""

import pytest

from tests.payloads import product_payload

MISSING_ID = "65a0000000000000000000ff"


@pytest.fixture
def catalogue(make_product):
    return [
        make_product(name="Infinity Love Ring", price=129.99, category="Rings"),
        make_product(name="Diamond Halo Ring", price=299.99, category="Rings"),
        make_product(name="Celestial Stud Earrings", price=79.99, category="Earrings"),
        make_product(name="Charm Bracelet Set", price=179.99, category="Bracelets"),
        make_product(name="Sold Out Necklace", price=89.99, category="Necklaces", inStock=False),
    ]


def names(response):
    return [p["name"] for p in response.json()["data"]]


class TestCreateProduct:
    def test_create(self, client):
        response = client.post("/api/products", json=product_payload(price=59.5))
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Product created successfully"
        product = body["data"]
        assert product["id"]
        assert product["formattedPrice"] == "$59.50"
        assert product["inStock"] is True
        assert product["createdAt"]

    def test_defaults(self, client):
        payload = product_payload()
        del payload["stockQuantity"]
        del payload["details"]
        product = client.post("/api/products", json=payload).json()["data"]
        assert product["stockQuantity"] == 100
        assert product["details"] == []

    def test_strips_whitespace(self, client):
        product = client.post("/api/products", json=product_payload(name="  Twisted Band Ring  ")).json()["data"]
        assert product["name"] == "Twisted Band Ring"

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"price": -1}, "price"),
            ({"category": "Watches"}, "category"),
            ({"name": "x" * 201}, "name"),
            ({"description": "x" * 2001}, "description"),
            ({"stockQuantity": -3}, "stockQuantity"),
        ],
    )
    def test_validation(self, client, overrides, field):
        response = client.post("/api/products", json=product_payload(**overrides))
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert any(e.startswith(f"{field}:") for e in body["errors"])

    def test_missing_required_fields(self, client):
        response = client.post("/api/products", json={"name": "Nameless"})
        assert response.status_code == 400
        errors = response.json()["errors"]
        for field in ("price", "description", "imageUrl", "category"):
            assert any(e.startswith(f"{field}:") for e in errors)


class TestListProducts:
    def test_lists_only_in_stock(self, client, catalogue):
        body = client.get("/api/products").json()
        assert body["success"] is True
        assert body["count"] == 4
        assert "Sold Out Necklace" not in names(client.get("/api/products"))

    def test_category_filter(self, client, catalogue):
        response = client.get("/api/products", params={"category": "Rings"})
        assert sorted(names(response)) == ["Diamond Halo Ring", "Infinity Love Ring"]
        assert all(p["category"] == "Rings" for p in response.json()["data"])

    def test_category_all(self, client, catalogue):
        assert client.get("/api/products", params={"category": "All"}).json()["count"] == 4

    def test_price_range(self, client, catalogue):
        response = client.get("/api/products", params={"minPrice": 100, "maxPrice": 200})
        assert sorted(names(response)) == ["Charm Bracelet Set", "Infinity Love Ring"]

    def test_min_price_only(self, client, catalogue):
        response = client.get("/api/products", params={"minPrice": 200})
        assert names(response) == ["Diamond Halo Ring"]

    def test_sort_price_low(self, client, catalogue):
        prices = [p["price"] for p in client.get("/api/products", params={"sort": "price-low"}).json()["data"]]
        assert prices == [79.99, 129.99, 179.99, 299.99]

    def test_sort_price_high(self, client, catalogue):
        prices = [p["price"] for p in client.get("/api/products", params={"sort": "price-high"}).json()["data"]]
        assert prices == [299.99, 179.99, 129.99, 79.99]

    def test_sort_name(self, client, catalogue):
        response = client.get("/api/products", params={"sort": "name"})
        assert names(response) == sorted(names(response))

    def test_bad_price_param(self, client):
        response = client.get("/api/products", params={"minPrice": "cheap"})
        assert response.status_code == 400


class TestProductsByCategory:
    def test_valid_category(self, client, catalogue):
        body = client.get("/api/products/category/Rings").json()
        assert body["category"] == "Rings"
        assert body["count"] == 2

    def test_excludes_out_of_stock(self, client, catalogue):
        body = client.get("/api/products/category/Necklaces").json()
        assert body["count"] == 0
        assert body["data"] == []

    def test_invalid_category(self, client):
        response = client.get("/api/products/category/Watches")
        assert response.status_code == 400
        assert response.json()["message"] == (
            "Invalid category. Must be one of: Necklaces, Earrings, Rings, Bracelets"
        )


class TestSingleProduct:
    def test_get(self, client, make_product):
        product = make_product()
        response = client.get(f"/api/products/{product['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["name"] == product["name"]

    def test_get_missing(self, client):
        response = client.get(f"/api/products/{MISSING_ID}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Product not found"}

    def test_get_malformed(self, client):
        response = client.get("/api/products/123abc")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid product ID format"

    def test_update(self, client, make_product):
        product = make_product()
        response = client.put(f"/api/products/{product['id']}", json={"price": 75, "inStock": False})
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["price"] == 75
        assert updated["inStock"] is False
        assert updated["name"] == product["name"]

    def test_update_validates(self, client, make_product):
        product = make_product()
        response = client.put(f"/api/products/{product['id']}", json={"price": -5})
        assert response.status_code == 400

    def test_update_ignores_nulls(self, client, make_product):
        product = make_product()
        response = client.put(f"/api/products/{product['id']}", json={"name": None})
        assert response.json()["data"]["name"] == product["name"]

    def test_update_missing(self, client):
        assert client.put(f"/api/products/{MISSING_ID}", json={"price": 1}).status_code == 404

    def test_delete(self, client, make_product):
        product = make_product()
        response = client.delete(f"/api/products/{product['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Product deleted successfully", "data": {}}
        assert client.get(f"/api/products/{product['id']}").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete(f"/api/products/{MISSING_ID}").status_code == 404
