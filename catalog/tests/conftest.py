"""Shared fixtures for the catalog test suite."""
from unittest.mock import AsyncMock

import pytest

from catalog.catalog import Catalog
from catalog.models.product import Product, snapshot_from_records
from catalog.store.file_store import FileLocalStore


SAMPLE_RECORDS = [
    {
        "id": 1,
        "title": "Pro Headphones",
        "description": "Over-ear, noise cancelling",
        "price": 30,
        "discountPercentage": 12.5,
        "rating": 4.5,
        "stock": 12,
        "brand": "SoundCo",
        "category": "audio",
        "thumbnail": "https://cdn.example.com/1/thumb.png",
        "images": ["https://cdn.example.com/1/a.png"],
        "tags": ["audio"]
    },
    {
        "id": 2,
        "title": "Desk Lamp",
        "description": "LED lamp",
        "price": 10,
        "discountPercentage": 0,
        "rating": 3.9,
        "stock": 40,
        "brand": "ProTech",
        "category": "home",
        "thumbnail": "https://cdn.example.com/2/thumb.png",
        "images": []
    },
    {
        "id": 3,
        "title": "Water Bottle",
        "description": "Steel bottle",
        "price": 20,
        "discountPercentage": 5,
        "rating": 4.1,
        "stock": 0,
        "brand": "Hydra",
        "category": "outdoor",
        "thumbnail": "https://cdn.example.com/3/thumb.png",
        "images": ["https://cdn.example.com/3/a.png", "https://cdn.example.com/3/b.png"]
    },
]


def make_product(id, title="Item", price=1, **kwargs):
    return Product(id=id, title=title, price=price, **kwargs)


@pytest.fixture
def sample_records():
    return [dict(record) for record in SAMPLE_RECORDS]


@pytest.fixture
def sample_snapshot():
    return snapshot_from_records([dict(record) for record in SAMPLE_RECORDS])


@pytest.fixture
def store(tmp_path):
    return FileLocalStore(str(tmp_path / "store"), "products")


@pytest.fixture
def remote(sample_snapshot):
    """Upstream stand-in that serves the sample snapshot."""
    mock_remote = AsyncMock()
    mock_remote.fetch_all.return_value = sample_snapshot
    return mock_remote


@pytest.fixture
def catalog(store, remote):
    return Catalog(store=store, remote=remote, debounce_seconds=0.01)
