"""The bundled, read-only base catalog."""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from storefront.config import BASE_CATALOG_PATH
from storefront.csv_utils import load_products_from_csv
from storefront.errors import ValidationError
from storefront.models import Product

__all__ = ["BaseCatalog", "load_base_catalog"]


class BaseCatalog:
    """Ordered, immutable collection of the products shipped with the store."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products = tuple(products)
        self._index: Dict[str, Product] = {}
        for product in self._products:
            if product.id in self._index:
                raise ValidationError(f"Duplicate product id in base catalog: '{product.id}'")
            self._index[product.id] = product

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "BaseCatalog":
        products = []
        for position, record in enumerate(records):
            try:
                products.append(Product.from_dict(record))
            except ValidationError as e:
                raise ValidationError(f"Base catalog entry {position}: {e}") from e
        return cls(products)

    def get(self, product_id: str) -> Optional[Product]:
        """Return a copy of the base record, or None."""
        product = self._index.get(product_id)
        return copy.deepcopy(product) if product is not None else None

    def ids(self) -> List[str]:
        return [p.id for p in self._products]

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._index

    def __iter__(self) -> Iterator[Product]:
        return (copy.deepcopy(p) for p in self._products)

    def __len__(self) -> int:
        return len(self._products)


def load_base_catalog(path: Union[str, Path] = BASE_CATALOG_PATH) -> BaseCatalog:
    """Load the base catalog from a JSON list of products or a CSV export.

    Raises:
        ValidationError: On duplicate ids, incomplete records or a bad file shape.
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        return BaseCatalog.from_records(load_products_from_csv(str(path)))

    with open(path, "r", encoding="utf-8") as f:
        try:
            records = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Base catalog {path} is not valid JSON: {e}") from e
    if not isinstance(records, list):
        raise ValidationError(f"Base catalog {path} must be a JSON list of products")
    return BaseCatalog.from_records(records)
