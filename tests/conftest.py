"""Pytest fixtures for the Peachwood API tests."""

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from config import Settings
from database import Store
from main import create_app
from tests.payloads import customer_payload, product_payload


@pytest.fixture
def settings():
    return Settings(DATABASE_NAME="peachwood_test", ENVIRONMENT="test")


@pytest.fixture
def store():
    """Store backed by an in-process mock MongoDB."""
    return Store(AsyncMongoMockClient()["peachwood_test"])


@pytest.fixture
def client(store, settings):
    app = create_app(store=store, settings=settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_product(client):
    """Create a product through the API and return its JSON."""

    def _make(**overrides):
        response = client.post("/api/products", json=product_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def place_order(client):
    """POST an order for ``[(product_id, quantity), ...]`` and return the response."""

    def _place(lines, **extra):
        body = {
            "products": [{"productId": pid, "quantity": qty} for pid, qty in lines],
            "customerDetails": customer_payload(),
            **extra,
        }
        return client.post("/api/orders", json=body)

    return _place
