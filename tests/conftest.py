"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("STOREFRONT_API_BASE", "https://api.test.local/api")
os.environ.setdefault("STOREFRONT_MEDIA_BASE", "https://media.test.local")

from storefront.cart import CartEventBus, CartStore, MemoryStorage  # noqa: E402

MEDIA_BASE = "https://media.test.local"


@pytest.fixture
def shared_storage():
    """Storage shared by every context (browser profile)"""
    return MemoryStorage()


@pytest.fixture
def storage(shared_storage):
    """One context (tab) on the shared storage"""
    return shared_storage.open_context()


@pytest.fixture
def event_bus():
    return CartEventBus()


@pytest.fixture
def store(storage, event_bus):
    """Cart store over in-memory storage"""
    return CartStore(storage, notifier=event_bus, media_base=MEDIA_BASE)


@pytest.fixture
def received(event_bus):
    """Snapshots published by the store, in order"""
    snapshots = []
    event_bus.subscribe(snapshots.append)
    return snapshots


@pytest.fixture
def mock_redis():
    """Mock sync Upstash Redis client backed by a dict"""
    data = {}
    client = Mock()
    client.get.side_effect = lambda key: data.get(key)
    client.set.side_effect = lambda key, value, ex=None: data.__setitem__(key, value)
    client.delete.side_effect = lambda key: data.pop(key, None)
    client.data = data
    return client


@pytest.fixture
def sample_product():
    """Sample product as returned by the catalog API"""
    return {
        "id": 42,
        "name": "Running Shoe",
        "price": "49.50",
        "images": [{"image": "/media/products/shoe.jpg"}],
    }
