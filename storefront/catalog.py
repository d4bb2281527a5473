"""Catalog facade: the merged product view and every write to it.

Reads merge the base catalog with the override store; writes only ever touch
the override store. Nothing is cached between calls, so a change written by
another storage context shows up on the next read.

Deleting a product that ships in the base catalog stores a tombstone
(``{"id": ..., "deleted": true}``); deleting a product that only exists as an
override removes the override entry entirely.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from storefront.base_catalog import BaseCatalog
from storefront.config import OVERRIDES_EXPORT_FILENAME
from storefront.errors import NotFoundError, ValidationError
from storefront.logging_config import log_catalog_event
from storefront.models import Product, ProductPatch, merge_product, slugify_id
from storefront.overrides import (
    OverrideStore,
    overrides_from_document,
    overrides_to_document,
)
from storefront.transfer import FileSinkFn, dump_document, parse_document

__all__ = ["Catalog", "slugify_id"]

logger = logging.getLogger(__name__)

ProductInput = Union[Mapping[str, Any], Product, ProductPatch]
VersionListener = Callable[[int], None]


class Catalog:
    """Merged view of the base catalog and the override store."""

    def __init__(self, base: BaseCatalog, overrides: OverrideStore) -> None:
        self.base = base
        self.overrides = overrides
        self.version = 0
        self._listeners: List[VersionListener] = []
        self._unsubscribe = overrides.subscribe(self._on_storage_change)

    def close(self) -> None:
        self._unsubscribe()

    # ---------- change tracking ----------

    def _bump(self) -> None:
        self.version += 1

    def _on_storage_change(self, key: str) -> None:
        self._bump()
        logger.debug("Overrides changed externally (%s), catalog version %d", key, self.version)
        for listener in list(self._listeners):
            listener(self.version)

    def on_external_change(self, listener: VersionListener) -> Callable[[], None]:
        """Call ``listener(version)`` when another context changes the overrides."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ---------- reads ----------

    @staticmethod
    def _apply(base: Optional[Product], patch: ProductPatch) -> Optional[Product]:
        try:
            return merge_product(base, patch)
        except ValidationError as e:
            # Only reachable with hand-edited or legacy storage content
            logger.warning("Ignoring invalid override '%s': %s", patch.id, e)
            return base

    def _merged(self) -> List[Product]:
        overrides = self.overrides.load()
        products: List[Product] = []

        for base_product in self.base:
            patch = overrides.get(base_product.id)
            product = base_product if patch is None else self._apply(base_product, patch)
            if product is not None:
                products.append(product)

        for product_id, patch in overrides.items():
            if product_id in self.base:
                continue
            product = self._apply(None, patch)
            if product is not None:
                products.append(product)

        return products

    def get_products(self, include_hidden: bool = False) -> List[Product]:
        """Return merged products: base order first, then added products in insertion order."""
        products = self._merged()
        if include_hidden:
            return products
        return [p for p in products if not p.hidden]

    def get_product(self, product_id: str) -> Optional[Product]:
        """Return one merged product (hidden included), or None if absent or deleted."""
        base = self.base.get(product_id)
        patch = self.overrides.load().get(product_id)
        if patch is None:
            return base
        return self._apply(base, patch)

    def list_categories(self) -> List[str]:
        """Distinct categories in first-seen order, hidden products included."""
        categories: List[str] = []
        for product in self.get_products(include_hidden=True):
            if product.category not in categories:
                categories.append(product.category)
        return categories

    # ---------- writes ----------

    @staticmethod
    def _to_patch(record: ProductInput) -> ProductPatch:
        if isinstance(record, (Product, ProductPatch)):
            data: Dict[str, Any] = record.to_dict()
        elif isinstance(record, Mapping):
            data = dict(record)
        else:
            raise ValidationError(f"Cannot save a {type(record).__name__} as a product")

        if data.get("deleted"):
            raise ValidationError("Use delete_product() to delete a product")
        product_id = data.get("id")
        if product_id is None or (isinstance(product_id, str) and not product_id.strip()):
            data["id"] = slugify_id(data.get("title"))
        return ProductPatch.from_dict(data)

    def upsert_product(self, record: ProductInput) -> Product:
        """Add or edit a product.

        Fields present in ``record`` replace the stored ones; absent fields
        keep their override or base values. The id is derived from the title
        when missing.

        Returns:
            The merged product after the write.

        Raises:
            ValidationError: If a field is invalid or the merged record is
                incomplete. Nothing is written in that case.
        """
        patch = self._to_patch(record)
        overrides = self.overrides.load()
        existing = overrides.get(patch.id)
        combined = existing.combine(patch) if existing is not None else patch

        merged = merge_product(self.base.get(patch.id), combined)

        overrides[patch.id] = combined
        self.overrides.save(overrides)
        self._bump()
        log_catalog_event("product_upsert", {
            "message": f"Saved product {patch.id}",
            "product_id": patch.id,
            "fields": sorted(patch.set_fields()),
            "created": existing is None and patch.id not in self.base,
        })
        return merged

    def delete_product(self, product_id: str) -> None:
        """Remove a product from the merged view. Unknown ids are a no-op."""
        overrides = self.overrides.load()
        existing = overrides.get(product_id)

        if product_id in self.base:
            if existing is not None and existing.deleted:
                return
            overrides[product_id] = ProductPatch.tombstone(product_id)
        elif existing is not None:
            del overrides[product_id]
        else:
            return

        self.overrides.save(overrides)
        self._bump()
        log_catalog_event("product_delete", {
            "message": f"Deleted product {product_id}",
            "product_id": product_id,
            "tombstone": product_id in self.base,
        })

    def set_hidden(self, product_id: str, hidden: bool) -> Product:
        """Show or hide a product without touching its other fields.

        Raises:
            NotFoundError: If the product is not in the merged catalog.
            ValidationError: If ``hidden`` is not a boolean.
        """
        if not isinstance(hidden, bool):
            raise ValidationError(f"'hidden' must be a boolean, got {hidden!r}")
        if self.get_product(product_id) is None:
            raise NotFoundError(f"No product with id '{product_id}'")

        overrides = self.overrides.load()
        flag = ProductPatch(id=product_id, hidden=hidden)
        existing = overrides.get(product_id)
        overrides[product_id] = existing.combine(flag) if existing is not None else flag

        self.overrides.save(overrides)
        self._bump()
        log_catalog_event("product_visibility", {
            "product_id": product_id,
            "hidden": hidden,
        })
        return merge_product(self.base.get(product_id), overrides[product_id])

    def _unique_id(self, candidate: str) -> str:
        taken = set(self.base.ids()) | set(self.overrides.load())
        product_id, n = candidate, 1
        while product_id in taken:
            n += 1
            product_id = f"{candidate}-{n}"
        return product_id

    def duplicate_product(self, product_id: str) -> Product:
        """Save a copy of a product titled '<title> Copy' under a fresh id.

        Raises:
            NotFoundError: If the source product is not in the merged catalog.
        """
        source = self.get_product(product_id)
        if source is None:
            raise NotFoundError(f"No product with id '{product_id}'")
        title = f"{source.title} Copy"
        copy = replace(source, id=self._unique_id(slugify_id(title)), title=title)
        return self.upsert_product(copy)

    # ---------- import / export ----------

    def export_overrides(self, sink: Optional[FileSinkFn] = None) -> str:
        """Serialize the override table; hand it to ``sink`` when given."""
        text = dump_document(overrides_to_document(self.overrides.load()))
        if sink is not None:
            sink(OVERRIDES_EXPORT_FILENAME, text)
        return text

    def import_overrides(self, text: Union[str, bytes]) -> int:
        """Replace the whole override table with an exported document.

        Returns:
            Number of override records imported.

        Raises:
            ParseError: If the document is not valid JSON.
            ValidationError: If it is not a mapping of id -> override record,
                or a record would not merge into a complete product.
        """
        overrides = overrides_from_document(parse_document(text))
        for product_id, patch in overrides.items():
            merge_product(self.base.get(product_id), patch)
        self.overrides.save(overrides)
        self._bump()
        log_catalog_event("overrides_import", {
            "message": f"Imported {len(overrides)} overrides",
            "count": len(overrides),
        })
        return len(overrides)

    def clear_overrides(self) -> None:
        """Drop every override, restoring the plain base catalog."""
        self.overrides.save({})
        self._bump()
        log_catalog_event("overrides_clear", {"message": "Cleared all overrides"})
