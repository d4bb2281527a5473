"""Configuration and constants for the storefront data layer."""

import os
from pathlib import Path
from typing import Dict, Tuple

from dotenv import load_dotenv

__all__ = [
    "OVERRIDES_KEY",
    "INVENTORY_KEY",
    "CONTENT_KEY",
    "OVERRIDES_EXPORT_FILENAME",
    "INVENTORY_EXPORT_FILENAME",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "ITEMS_PER_PAGE",
    "SORT_CHOICES",
    "LIST_SEPARATOR",
    "POLL_INTERVAL",
    "DB_PATH",
    "BASE_CATALOG_PATH",
    "BUNDLED_CATALOG_PATH",
    "LOG_DIR",
    "FLASK_HOST",
    "FLASK_PORT",
    "FLASK_DEBUG",
    "PING_MESSAGE",
    "CONTENT_DEFAULTS",
]

# Load environment variables from .env (existing variables win)
load_dotenv()

_THIS_DIR = Path(__file__).parent
_PROJECT_ROOT = _THIS_DIR.parent

# Storage keys (one persisted JSON document per key)
OVERRIDES_KEY = "catalog_overrides"
INVENTORY_KEY = "inventory"
CONTENT_KEY = "site_content"

# Export file names handed to the file sink
OVERRIDES_EXPORT_FILENAME = "catalog_overrides.json"
INVENTORY_EXPORT_FILENAME = "inventory.json"

# Known product categories; overrides may introduce new ones
CATEGORIES: Tuple[str, ...] = ("Abayas", "Kaftans", "Modest Dresses", "Prayer Sets")
DEFAULT_CATEGORY = "Abayas"

# Admin grid settings
ITEMS_PER_PAGE = 16
SORT_CHOICES: Tuple[str, ...] = ("name", "price", "newest")

# Separator for list fields in CSV files
LIST_SEPARATOR = "|"

# Seconds between polls when watching SQLite storage for external changes
POLL_INTERVAL = float(os.getenv("STOREFRONT_POLL_INTERVAL", "1.0"))

# Paths (allow env overrides)
BUNDLED_CATALOG_PATH = str(_THIS_DIR / "data" / "products.json")
DB_PATH = os.getenv("STOREFRONT_DB_PATH", "data/storefront.db")
BASE_CATALOG_PATH = os.getenv("STOREFRONT_BASE_CATALOG", BUNDLED_CATALOG_PATH)
LOG_DIR = Path(os.getenv("STOREFRONT_LOG_DIR", str(_PROJECT_ROOT / "logs")))

# Flask app settings (default debug off)
FLASK_HOST = os.getenv("FLASK_HOST", "127.0.0.1")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"
PING_MESSAGE = os.getenv("PING_MESSAGE", "ping")


# =============================================================================
# Site Content Defaults
# =============================================================================
# Shown when the content store has no value for a key.

CONTENT_DEFAULTS: Dict[str, str] = {
    "hero_title": "Luxury Abayas Crafted for Royal Elegance",
    "hero_subtitle": "Discover exquisite abayas, kaftans and modest dresses.",
    "hero_image": "",
    "banner_title": "Crafted by Artisans",
    "banner_text": "Every piece is meticulously designed and finished by hand.",
    "banner_image": "",
    "cat1_title": "Abayas",
    "cat1_image": "",
    "cat2_title": "Kaftans",
    "cat2_image": "",
    "cat3_title": "Modest Dresses",
    "cat3_image": "",
    "cat4_title": "Prayer Sets",
    "cat4_image": "",
}
