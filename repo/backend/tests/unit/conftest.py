from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from floor_fakes import FakePublisher, FakeUnitOfWork, InMemoryStore, make_item


@pytest.fixture
def store() -> InMemoryStore:
    store = InMemoryStore()
    for item in (
        make_item("itm_001", "Grilled Salmon", 1550),
        make_item("itm_002", "Iced Tea", 350, category="drinks"),
        make_item("itm_004", "Tiramisu", 850, category="desserts", is_available=False),
    ):
        store.menu[item.item_id] = item
    return store


@pytest.fixture
def uow(store: InMemoryStore) -> FakeUnitOfWork:
    return FakeUnitOfWork(store)


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()
