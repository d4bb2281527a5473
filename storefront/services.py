"""Wiring of the stores over one storage backend."""

from dataclasses import dataclass
from typing import Optional

from storefront.base_catalog import BaseCatalog, load_base_catalog
from storefront.catalog import Catalog
from storefront.config import BASE_CATALOG_PATH, DB_PATH
from storefront.content import ContentStore
from storefront.inventory import InventoryStore
from storefront.overrides import OverrideStore
from storefront.storage import SQLiteStorage, Storage

__all__ = ["Storefront", "open_storefront"]


@dataclass
class Storefront:
    storage: Storage
    catalog: Catalog
    inventory: InventoryStore
    content: ContentStore

    @classmethod
    def over(cls, storage: Storage, base: BaseCatalog) -> "Storefront":
        return cls(
            storage=storage,
            catalog=Catalog(base, OverrideStore(storage)),
            inventory=InventoryStore(storage),
            content=ContentStore(storage),
        )


def open_storefront(
    db_path: str = DB_PATH,
    base_catalog_path: str = BASE_CATALOG_PATH,
    storage: Optional[Storage] = None,
) -> Storefront:
    """Open the stores on a SQLite file (or a given storage backend)."""
    return Storefront.over(
        storage if storage is not None else SQLiteStorage(db_path),
        load_base_catalog(base_catalog_path),
    )
