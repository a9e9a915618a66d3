"""Tests for API endpoints"""
import inspect
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from api.index import app
from storefront.cart import CartStore, MemoryStorage
from storefront.routers.deps import get_order_client, get_store
from storefront.services.checkout import OrderClient


@pytest.fixture
def stores():
    """In-memory stores keyed by session id"""
    shared = MemoryStorage()
    by_session = {}

    def override(session_id: str) -> CartStore:
        if session_id not in by_session:
            by_session[session_id] = CartStore(shared.open_context(), key=f"cart:{session_id}",
                                               media_base="https://media.test.local")
        return by_session[session_id]

    app.dependency_overrides[get_store] = override
    yield by_session
    app.dependency_overrides.clear()


@pytest.fixture
def client(stores):
    """Test client"""
    return TestClient(app)


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_empty_cart(client):
    response = client.get("/api/cart/s1")
    assert response.status_code == 200
    assert response.json() == {"items": [], "count": 0, "subtotal": 0.0, "shipping": 0.0, "total": 0.0}


def test_add_item(client):
    response = client.post("/api/cart/s1/items", json={
        "id": 42,
        "name": "Running Shoe",
        "price": "49.50",
        "images": [{"image": "/media/shoe.jpg"}],
        "quantity": 2,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert data["items"][0]["id"] == "42"
    assert data["items"][0]["image"] == "https://media.test.local/media/shoe.jpg"
    assert data["subtotal"] == 99.0


def test_sessions_are_isolated(client):
    client.post("/api/cart/s1/items", json={"id": 1})
    assert client.get("/api/cart/s2/count").json() == {"count": 0}
    assert client.get("/api/cart/s1/count").json() == {"count": 1}


def test_update_and_remove(client):
    client.post("/api/cart/s1/items", json={"id": 1, "price": 5})
    client.post("/api/cart/s1/items", json={"id": 2, "price": 5})

    response = client.patch("/api/cart/s1/items/1", json={"quantity": 4})
    assert response.json()["count"] == 5

    response = client.patch("/api/cart/s1/items/2", json={"quantity": 0})
    assert [item["id"] for item in response.json()["items"]] == ["1"]

    response = client.delete("/api/cart/s1/items/1")
    assert response.json()["count"] == 0


def test_clear(client):
    client.post("/api/cart/s1/items", json={"id": 1, "quantity": 3})
    response = client.delete("/api/cart/s1")
    assert response.status_code == 200
    assert response.json()["items"] == []


def test_checkout(client):
    app.dependency_overrides[get_order_client] = lambda: OrderClient(
        api_base="https://api.test.local/api",
        transport=httpx.MockTransport(lambda request: httpx.Response(201, json={"id": 9})),
    )
    client.post("/api/cart/s1/items", json={"id": 1, "price": 10})

    response = client.post("/api/cart/s1/checkout", json={
        "first_name": "Ada",
        "phone": "123",
        "address": "12 Analytical St",
        "city": "London",
    })

    assert response.status_code == 200
    assert response.json()["order_id"] == 9
    assert response.json()["total_amount"] == 109.0
    assert client.get("/api/cart/s1/count").json() == {"count": 0}


def test_checkout_missing_details(client):
    client.post("/api/cart/s1/items", json={"id": 1})
    response = client.post("/api/cart/s1/checkout", json={"first_name": "Ada"})
    assert response.status_code == 400


def test_checkout_api_failure(client):
    app.dependency_overrides[get_order_client] = lambda: OrderClient(
        api_base="https://api.test.local/api",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, json={})),
    )
    client.post("/api/cart/s1/items", json={"id": 1})

    response = client.post("/api/cart/s1/checkout", json={
        "phone": "123", "address": "x", "city": "y",
    })

    assert response.status_code == 502
    assert client.get("/api/cart/s1/count").json() == {"count": 1}


def test_add_item_with_nested_images_key(client):
    """Catalog responses that nest the path as images[0].images"""
    response = client.post("/api/cart/s1/items", json={
        "id": 1,
        "images": [{"images": "/media/shoe.jpg"}],
    })

    assert response.status_code == 200
    assert response.json()["items"][0]["image"] == "https://media.test.local/media/shoe.jpg"


def test_cart_handlers_run_in_threadpool():
    """Cart handlers do blocking Redis I/O, so they must not be coroutines"""
    endpoints = {
        route.name: route.endpoint
        for route in app.routes
        if getattr(route, "path", "").startswith("/api/cart/")
    }

    for name in ("get_cart", "get_cart_count", "add_cart_item",
                 "update_cart_item", "remove_cart_item", "clear_cart"):
        assert not inspect.iscoroutinefunction(endpoints[name]), name


def test_checkout_failure_logged_with_session(client, caplog):
    app.dependency_overrides[get_order_client] = lambda: OrderClient(
        api_base="https://api.test.local/api",
        transport=httpx.MockTransport(lambda request: httpx.Response(503, json={})),
    )
    client.post("/api/cart/s9/items", json={"id": 1})

    with caplog.at_level(logging.ERROR, logger="storefront.routers.cart"):
        client.post("/api/cart/s9/checkout", json={"phone": "1", "address": "x", "city": "y"})

    assert "[session s9] Checkout failed" in caplog.text
