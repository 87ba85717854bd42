"""
Pytest fixtures for the stockroom test suite.

Provides:
- A controllable clock so expiry maths is deterministic
- Memory-backed stores, empty or pre-populated
"""

from datetime import datetime, timedelta, timezone

import pytest

from stockroom.storage import MemoryStorage
from stockroom.store import InventoryStore

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Returns the same instant until told to move."""

    def __init__(self, current: datetime = START):
        self.current = current

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current = self.current + timedelta(**kwargs)


def make_draft(**overrides) -> dict:
    draft = {
        "name": "Pen",
        "type": "Stationery",
        "department": "Admin",
        "hasExpiry": False,
        "pricePerPiece": 1.5,
        "currentStock": 10,
        "lowStockAlert": 3,
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, clock):
    return InventoryStore(storage, clock=clock)


@pytest.fixture
def stocked_store(store):
    """Three items across departments, with a few movements already recorded."""
    pen = store.add_item(make_draft())
    soap = store.add_item(
        make_draft(
            name="Hand Soap",
            type="Cleaning Supplies",
            department="HR",
            pricePerPiece=4.0,
            currentStock=2,
            lowStockAlert=5,
        )
    )
    coffee = store.add_item(
        make_draft(
            name="Coffee, Ground",
            type="Food & Beverages",
            department="IT",
            hasExpiry=True,
            expiryDays=20,
            pricePerPiece=12.5,
            currentStock=6,
            lowStockAlert=2,
        )
    )
    store.add_transaction({"itemId": pen.id, "type": "in", "quantity": 5, "notes": "restock"})
    store.add_transaction({"itemId": pen.id, "type": "out", "quantity": 4, "picName": "Alice"})
    store.add_transaction({"itemId": coffee.id, "type": "out", "quantity": 2, "picName": "Bob"})
    return store
