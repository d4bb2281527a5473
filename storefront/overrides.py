"""Persisted table of product overrides layered over the base catalog."""

import logging
from typing import Any, Callable, Dict, Mapping

from storefront.config import OVERRIDES_KEY
from storefront.errors import ValidationError
from storefront.models import ProductPatch
from storefront.storage import ChangeHandler, Storage
from storefront.transfer import decode_stored, encode_document

__all__ = ["OverrideStore", "overrides_from_document", "overrides_to_document"]

logger = logging.getLogger(__name__)


def overrides_to_document(overrides: Mapping[str, ProductPatch]) -> Dict[str, Dict[str, Any]]:
    return {product_id: patch.to_dict() for product_id, patch in overrides.items()}


def overrides_from_document(data: Mapping[str, Any]) -> Dict[str, ProductPatch]:
    """Validate an imported mapping of id -> override record.

    Every record must be an object whose ``id`` matches its key. Any bad
    record rejects the whole document.

    Raises:
        ValidationError: On the first malformed record.
    """
    overrides: Dict[str, ProductPatch] = {}
    for product_id, record in data.items():
        if not isinstance(record, Mapping):
            raise ValidationError(
                f"Override for '{product_id}' must be an object, got {type(record).__name__}"
            )
        if "id" not in record:
            raise ValidationError(f"Override for '{product_id}' is missing an 'id'")
        patch = ProductPatch.from_dict(record)
        if patch.id != product_id:
            raise ValidationError(
                f"Override key '{product_id}' does not match its id '{patch.id}'"
            )
        overrides[product_id] = patch
    return overrides


class OverrideStore:
    """Override records persisted as one JSON document under a single key."""

    def __init__(self, storage: Storage, key: str = OVERRIDES_KEY) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> Dict[str, ProductPatch]:
        """Load all overrides; missing or corrupt data loads as empty."""
        raw = decode_stored(self.storage.read(self.key), self.key)
        overrides: Dict[str, ProductPatch] = {}
        for product_id, record in raw.items():
            try:
                patch = ProductPatch.from_dict(record, product_id=product_id)
            except ValidationError as e:
                logger.warning("Skipping malformed override '%s': %s", product_id, e)
                continue
            overrides[patch.id] = patch
        return overrides

    def save(self, overrides: Mapping[str, ProductPatch]) -> None:
        """Replace the whole table in one write."""
        self.storage.write(self.key, encode_document(overrides_to_document(overrides)))

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        return self.storage.subscribe(self.key, handler)
