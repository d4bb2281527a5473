"""Shared fixtures for the storefront test suite."""

import tempfile
from pathlib import Path

import pytest

from storefront.base_catalog import BaseCatalog
from storefront.catalog import Catalog
from storefront.inventory import InventoryStore
from storefront.overrides import OverrideStore
from storefront.services import Storefront
from storefront.storage import MemoryArea, SQLiteStorage

BASE_RECORDS = [
    {
        "id": "abaya-01",
        "title": "Classic Abaya",
        "price": 80,
        "image": "a.jpg",
        "category": "Abayas",
        "tags": ["classic"],
    },
    {
        "id": "kaftan-01",
        "title": "Linen Kaftan",
        "price": 60,
        "image": "k.jpg",
        "category": "Kaftans",
        "description": "Breezy summer kaftan",
    },
    {
        "id": "dress-01",
        "title": "Maxi Dress",
        "price": 95,
        "image": "d.jpg",
        "category": "Modest Dresses",
        "isNew": True,
    },
]


@pytest.fixture
def base():
    """Small base catalog used by most tests."""
    return BaseCatalog.from_records(BASE_RECORDS)


@pytest.fixture
def area():
    """Shared in-memory storage area."""
    return MemoryArea()


@pytest.fixture
def storage(area):
    return area.open()


@pytest.fixture
def catalog(base, storage):
    catalog = Catalog(base, OverrideStore(storage))
    yield catalog
    catalog.close()


@pytest.fixture
def inventory(storage):
    return InventoryStore(storage)


@pytest.fixture
def services(base, storage):
    return Storefront.over(storage, base)


@pytest.fixture
def temp_db():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmp:
        yield str(Path(tmp) / "storefront.db")


@pytest.fixture
def sqlite_storage(temp_db):
    return SQLiteStorage(temp_db)


@pytest.fixture
def client(services):
    """Create Flask test client."""
    from storefront.app import create_app

    app = create_app(services=services, config={"TESTING": True})
    with app.test_client() as test_client:
        yield test_client
