"""Storefront catalog data layer: base catalog, overrides, inventory and content."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from storefront.base_catalog import BaseCatalog, load_base_catalog
from storefront.catalog import Catalog
from storefront.config import CATEGORIES, DB_PATH, ITEMS_PER_PAGE
from storefront.content import ContentStore
from storefront.errors import CatalogError, NotFoundError, ParseError, ValidationError
from storefront.inventory import InventoryStore
from storefront.models import Product, ProductPatch, slugify_id
from storefront.overrides import OverrideStore
from storefront.query import search_products
from storefront.services import Storefront, open_storefront
from storefront.storage import MemoryArea, MemoryStorage, SQLiteStorage
from storefront.transfer import FileSink

__all__ = [
    # Version
    "__version__",
    # Config
    "CATEGORIES",
    "DB_PATH",
    "ITEMS_PER_PAGE",
    # Models
    "Product",
    "ProductPatch",
    "slugify_id",
    # Errors
    "CatalogError",
    "NotFoundError",
    "ParseError",
    "ValidationError",
    # Storage
    "MemoryArea",
    "MemoryStorage",
    "SQLiteStorage",
    # Stores
    "BaseCatalog",
    "load_base_catalog",
    "OverrideStore",
    "Catalog",
    "InventoryStore",
    "ContentStore",
    "Storefront",
    "open_storefront",
    # Helpers
    "FileSink",
    "search_products",
]
