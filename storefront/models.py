"""Data models for catalog products and their override records.

A ``Product`` is the merged view the storefront shows. A ``ProductPatch`` is
what the override store persists: every field optional except ``id``, plus a
``deleted`` tombstone flag. ``merge_product`` applies a patch to an optional
base record.
"""

import math
import re
import unicodedata
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional

from storefront.config import DEFAULT_CATEGORY
from storefront.errors import ValidationError

__all__ = [
    "Product",
    "ProductPatch",
    "PRODUCT_FIELDS",
    "LIST_FIELDS",
    "FLAG_FIELDS",
    "slugify_id",
    "normalize_list",
    "merge_product",
    "validate_product",
]

# Attribute name -> persisted JSON key, where they differ
_JSON_KEYS: Dict[str, str] = {
    "is_new": "isNew",
    "is_best_seller": "isBestSeller",
    "on_sale": "onSale",
}
_ATTR_NAMES: Dict[str, str] = {v: k for k, v in _JSON_KEYS.items()}

LIST_FIELDS = ("images", "colors", "sizes", "tags")
FLAG_FIELDS = ("is_new", "is_best_seller", "on_sale", "hidden")

# Fields a new product must carry when there is no base record
REQUIRED_FIELDS = ("title", "price", "image")

_NON_WORD = re.compile(r"[\W_]+")


def slugify_id(title: Any) -> str:
    """Derive a product id from a title.

    Accents and other combining marks are dropped, letters lowercased and
    every run of other characters collapsed into a single ``-``. Letters
    outside Latin script are kept, so ``"عباية سوداء"`` becomes
    ``"عباية-سوداء"``.

    Raises:
        ValidationError: If the title is empty or has no letters or digits.
    """
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Cannot derive a product id from an empty title")

    folded = "".join(
        c for c in unicodedata.normalize("NFKD", title)
        if unicodedata.category(c) != "Mn"
    ).lower()
    slug = _NON_WORD.sub("-", folded).strip("-")
    if not slug:
        raise ValidationError(f"Cannot derive a product id from title {title!r}")
    return slug


def normalize_list(values: Any, field_name: str = "list") -> List[str]:
    """Trim, drop empties and deduplicate a list field, keeping order.

    A plain string is treated as a comma-separated list, the way the admin
    form submits colors and sizes.
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = values.split(",")
    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"'{field_name}' must be a list of strings")

    result: List[str] = []
    for value in values:
        if not isinstance(value, str):
            raise ValidationError(f"'{field_name}' must contain only strings, got {value!r}")
        value = value.strip()
        if value and value not in result:
            result.append(value)
    return result


def _check_price(price: Any) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError(f"Price must be a number, got {price!r}")
    if not math.isfinite(price) or price < 0:
        raise ValidationError(f"Price must be >= 0, got {price!r}")
    return price


def _check_text(name: str, value: Any, required: bool) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"'{name}' must be a string, got {value!r}")
    value = value.strip() if name != "description" else value
    if required and not value.strip():
        raise ValidationError(f"'{name}' is required")
    return value


@dataclass
class Product:
    """A product as shown in the storefront (base record with overrides applied)."""

    # Required fields
    id: str
    title: str
    price: float
    image: str

    images: List[str] = field(default_factory=list)
    description: str = ""
    category: str = DEFAULT_CATEGORY
    is_new: bool = False
    is_best_seller: bool = False
    on_sale: bool = False
    badge: Optional[str] = None
    colors: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    hidden: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the storefront's JSON keys."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in LIST_FIELDS:
                value = list(value)
            data[_JSON_KEYS.get(f.name, f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        """Build a complete product, raising ValidationError if fields are missing."""
        product = merge_product(None, ProductPatch.from_dict(data))
        if product is None:
            raise ValidationError(f"Product '{data.get('id')}' is marked as deleted")
        return product


PRODUCT_FIELDS = tuple(f.name for f in fields(Product) if f.name != "id")


@dataclass
class ProductPatch:
    """An override record: a partial product, or a tombstone when ``deleted``."""

    id: str
    title: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    description: Optional[str] = None
    category: Optional[str] = None
    is_new: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    on_sale: Optional[bool] = None
    badge: Optional[str] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    hidden: Optional[bool] = None
    deleted: bool = False

    @classmethod
    def tombstone(cls, product_id: str) -> "ProductPatch":
        return cls(id=product_id, deleted=True)

    @classmethod
    def from_product(cls, product: Product) -> "ProductPatch":
        values = {name: getattr(product, name) for name in PRODUCT_FIELDS}
        for name in LIST_FIELDS:
            values[name] = list(values[name])
        return cls(id=product.id, **values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], product_id: Optional[str] = None) -> "ProductPatch":
        """Parse and validate a persisted override record.

        ``null`` values count as absent. Unknown keys are ignored so that
        legacy records still load.

        Args:
            data: The record mapping.
            product_id: Id to use when the record carries none.

        Raises:
            ValidationError: On a missing id or a field of the wrong type or range.
        """
        if not isinstance(data, Mapping):
            raise ValidationError(f"Override record must be an object, got {type(data).__name__}")

        raw_id = data.get("id", product_id)
        if not isinstance(raw_id, str) or not raw_id.strip():
            raise ValidationError("Override record is missing an 'id'")
        patch_id = raw_id.strip()

        deleted = data.get("deleted", False)
        if not isinstance(deleted, bool):
            raise ValidationError(f"'deleted' must be a boolean for '{patch_id}'")
        if deleted:
            return cls.tombstone(patch_id)

        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ATTR_NAMES.get(key, key)
            if value is None or name not in PRODUCT_FIELDS:
                continue
            if name == "price":
                values[name] = _check_price(value)
            elif name in LIST_FIELDS:
                values[name] = normalize_list(value, name)
            elif name in FLAG_FIELDS:
                if not isinstance(value, bool):
                    raise ValidationError(f"'{key}' must be a boolean for '{patch_id}'")
                values[name] = value
            else:
                values[name] = _check_text(name, value, required=name in ("title", "image", "category"))
        return cls(id=patch_id, **values)

    def set_fields(self) -> Dict[str, Any]:
        """Return the product fields this patch overrides."""
        return {
            name: getattr(self, name)
            for name in PRODUCT_FIELDS
            if getattr(self, name) is not None
        }

    def combine(self, newer: "ProductPatch") -> "ProductPatch":
        """Layer ``newer`` over this patch; a tombstone is replaced outright."""
        if self.deleted:
            return replace(newer, deleted=False)
        return replace(self, **newer.set_fields())

    def to_dict(self) -> Dict[str, Any]:
        if self.deleted:
            return {"id": self.id, "deleted": True}
        data: Dict[str, Any] = {"id": self.id}
        for name, value in self.set_fields().items():
            data[_JSON_KEYS.get(name, name)] = list(value) if name in LIST_FIELDS else value
        return data


def validate_product(product: Product) -> None:
    """Check the invariants every merged product must satisfy."""
    if not product.id or not product.id.strip():
        raise ValidationError("Product id must not be empty")
    if not product.title.strip():
        raise ValidationError(f"Product '{product.id}' needs a title")
    if not product.image.strip():
        raise ValidationError(f"Product '{product.id}' needs a main image")
    if not product.category.strip():
        raise ValidationError(f"Product '{product.id}' needs a category")
    _check_price(product.price)


def merge_product(base: Optional[Product], patch: ProductPatch) -> Optional[Product]:
    """Apply an override patch to an optional base record.

    Returns None for a tombstone. Without a base record the patch must carry
    title, price and image.

    Raises:
        ValidationError: If the merged record is incomplete or invalid.
    """
    if patch.deleted:
        return None

    overrides = patch.set_fields()
    if base is None:
        missing = [name for name in REQUIRED_FIELDS if name not in overrides]
        if missing:
            raise ValidationError(
                f"Product '{patch.id}' has no base record and is missing: {', '.join(missing)}"
            )
        product = Product(id=patch.id, **overrides)
    else:
        product = replace(base, id=patch.id, **overrides)

    for name in LIST_FIELDS:
        setattr(product, name, list(getattr(product, name)))
    validate_product(product)
    return product
