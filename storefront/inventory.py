"""Stock counts per product id, persisted independently of the catalog.

Deleting a product leaves its stock entry in place; orphaned entries are
harmless and kept so that a re-added product gets its old count back.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Union

from storefront.config import INVENTORY_EXPORT_FILENAME, INVENTORY_KEY
from storefront.errors import ValidationError
from storefront.logging_config import log_catalog_event
from storefront.storage import ChangeHandler, Storage
from storefront.transfer import (
    FileSinkFn,
    decode_stored,
    dump_document,
    encode_document,
    parse_document,
)

__all__ = ["InventoryStore", "validate_stock"]

logger = logging.getLogger(__name__)


def validate_stock(product_id: Any, value: Any) -> int:
    """Check a stock entry and return the count.

    Raises:
        ValidationError: For an empty id or a negative, boolean or non-integer count.
    """
    if not isinstance(product_id, str) or not product_id.strip():
        raise ValidationError("Stock entries need a product id")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Stock for '{product_id}' must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"Stock for '{product_id}' must be >= 0, got {value}")
    return value


class InventoryStore:
    """Product id -> non-negative stock count, stored under one key."""

    def __init__(self, storage: Storage, key: str = INVENTORY_KEY) -> None:
        self.storage = storage
        self.key = key

    def _load(self) -> Dict[str, int]:
        raw = decode_stored(self.storage.read(self.key), self.key)
        stock: Dict[str, int] = {}
        for product_id, value in raw.items():
            try:
                stock[product_id] = validate_stock(product_id, value)
            except ValidationError as e:
                logger.warning("Skipping malformed stock entry: %s", e)
        return stock

    def _save(self, stock: Mapping[str, int]) -> None:
        self.storage.write(self.key, encode_document(stock))

    def list_stock(self) -> Dict[str, int]:
        return self._load()

    def get_stock(self, product_id: str) -> int:
        """Return the stock count, 0 when there is no entry."""
        return self._load().get(product_id, 0)

    def set_stock(self, product_id: str, value: int) -> None:
        """Write a stock count.

        Raises:
            ValidationError: If the count is negative or not an integer.
        """
        value = validate_stock(product_id, value)
        stock = self._load()
        stock[product_id] = value
        self._save(stock)
        log_catalog_event("stock_set", {"product_id": product_id, "stock": value},
                          level=logging.DEBUG)

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        return self.storage.subscribe(self.key, handler)

    # ---------- import / export ----------

    def export_inventory(self, sink: Optional[FileSinkFn] = None) -> str:
        text = dump_document(self._load())
        if sink is not None:
            sink(INVENTORY_EXPORT_FILENAME, text)
        return text

    def import_inventory(self, text: Union[str, bytes]) -> int:
        """Replace all stock counts with an exported document.

        Raises:
            ParseError: If the document is not valid JSON.
            ValidationError: If any entry is not a non-negative integer.
        """
        data = parse_document(text)
        stock = {product_id: validate_stock(product_id, value) for product_id, value in data.items()}
        self._save(stock)
        log_catalog_event("inventory_import", {
            "message": f"Imported stock for {len(stock)} products",
            "count": len(stock),
        })
        return len(stock)

    def reset_inventory(self) -> None:
        self._save({})
        log_catalog_event("inventory_reset", {"message": "Reset all stock counts"})
