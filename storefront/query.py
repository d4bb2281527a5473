"""Search, sorting and pagination for the admin product grid."""

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

from storefront.config import ITEMS_PER_PAGE, SORT_CHOICES
from storefront.errors import ValidationError
from storefront.models import Product

__all__ = [
    "ALL_CATEGORIES",
    "Page",
    "filter_products",
    "sort_products",
    "paginate",
    "search_products",
]

ALL_CATEGORIES = "all"

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of results."""

    items: List[T] = field(default_factory=list)
    page: int = 1
    total_pages: int = 0
    total: int = 0


def _matches(product: Product, query: str) -> bool:
    return (
        query in product.title.lower()
        or query in (product.description or "").lower()
        or any(query in tag.lower() for tag in product.tags)
        or query in product.id.lower()
    )


def filter_products(
    products: Sequence[Product],
    query: str = "",
    category: str = ALL_CATEGORIES,
) -> List[Product]:
    """Filter by category and a case-insensitive text query.

    The query matches title, description, tags and id.
    """
    query = (query or "").strip().lower()
    result = []
    for product in products:
        if category and category != ALL_CATEGORIES and product.category != category:
            continue
        if query and not _matches(product, query):
            continue
        result.append(product)
    return result


def sort_products(products: Sequence[Product], sort_by: str = "name") -> List[Product]:
    """Sort by ``name`` (title), ``price`` (ascending) or ``newest`` (last added first)."""
    if sort_by not in SORT_CHOICES:
        raise ValidationError(f"Unknown sort order '{sort_by}'. Choices: {list(SORT_CHOICES)}")
    if sort_by == "name":
        return sorted(products, key=lambda p: p.title.casefold())
    if sort_by == "price":
        return sorted(products, key=lambda p: p.price)
    return list(reversed(products))


def paginate(items: Sequence[T], page: int = 1, per_page: int = ITEMS_PER_PAGE) -> Page[T]:
    """Slice ``items`` into a page, clamping ``page`` into the valid range."""
    if per_page < 1:
        raise ValidationError(f"per_page must be >= 1, got {per_page}")
    total = len(items)
    total_pages = math.ceil(total / per_page)
    page = min(max(page, 1), max(total_pages, 1))
    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        total_pages=total_pages,
        total=total,
    )


def search_products(
    products: Sequence[Product],
    query: str = "",
    category: str = ALL_CATEGORIES,
    sort_by: str = "name",
    page: int = 1,
    per_page: int = ITEMS_PER_PAGE,
) -> Page[Product]:
    """Filter, sort and paginate in one call."""
    filtered = filter_products(products, query=query, category=category)
    return paginate(sort_products(filtered, sort_by), page=page, per_page=per_page)
