"""Pytest configuration and fixtures"""
import os
import pytest

# Keep tests away from a developer's real slot and credentials
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("CART_NOTIFIER", "none")

from storefront.cart import (
    CartPersistence,
    CartStore,
    MemorySlot,
    RecordingNotifier,
)


@pytest.fixture
def memory_slot():
    """Empty in-memory snapshot slot"""
    return MemorySlot()


@pytest.fixture
def persistence(memory_slot):
    """Persistence adapter over the in-memory slot"""
    return CartPersistence(memory_slot, key="cart")


@pytest.fixture
def notifier():
    """Notifier that records every event"""
    return RecordingNotifier()


@pytest.fixture
def store(persistence, notifier):
    """Empty cart store wired to the memory slot and recording notifier"""
    return CartStore(persistence=persistence, notifier=notifier)


@pytest.fixture
def sample_product():
    """Product line as the UI hands it to add_item"""
    return {
        "id": "shoe-123",
        "title": "Air Runner",
        "unitPrice": 120,
        "image": "https://cdn.example.com/air-runner.png",
        "variant": {"size": "42", "color": "red"},
    }


@pytest.fixture
def second_product():
    """Another product line"""
    return {
        "id": "shoe-456",
        "title": "Trail Max",
        "unitPrice": "89.99",
    }
