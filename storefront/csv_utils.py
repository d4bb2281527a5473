"""CSV export and import of catalog products."""

import os
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from storefront.config import LIST_SEPARATOR
from storefront.errors import ValidationError
from storefront.models import Product

__all__ = [
    "CSV_COLUMNS",
    "product_to_row",
    "export_products_to_csv",
    "load_products_from_csv",
]

CSV_COLUMNS: List[str] = list(Product(id="", title="", price=0, image="").to_dict().keys())

_LIST_COLUMNS = {"images", "colors", "sizes", "tags"}
_FLAG_COLUMNS = {"isNew", "isBestSeller", "onSale", "hidden"}
_TRUE = {"true", "1", "yes", "y"}
_FALSE = {"false", "0", "no", "n", ""}


def _none_if_na(value: Any) -> Any:
    """Convert pandas NA values to None while leaving other types intact."""
    try:
        return None if pd.isna(value) else value
    except (TypeError, ValueError):
        return value


def product_to_row(product: Product) -> Dict[str, Any]:
    """Convert a Product into a CSV-ready row.

    List fields are joined with ``|``; flags are written as true/false.
    """
    row = product.to_dict()
    for column in _LIST_COLUMNS:
        row[column] = LIST_SEPARATOR.join(row[column])
    for column in _FLAG_COLUMNS:
        row[column] = "true" if row[column] else "false"
    if row.get("badge") is None:
        row["badge"] = ""
    return row


def export_products_to_csv(products: Iterable[Product], csv_path: str) -> int:
    """Write products to a CSV file.

    Returns:
        Number of products exported
    """
    rows = [product_to_row(p) for p in products]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)

    os.makedirs(os.path.dirname(csv_path) or ".", exist_ok=True)
    df.to_csv(csv_path, index=False, encoding="utf-8")
    return len(rows)


def _parse_flag(column: str, value: Optional[str], row_number: int) -> Optional[bool]:
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"Row {row_number}: '{column}' must be true or false, got {value!r}")


def _parse_price(value: Any, row_number: int) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Row {row_number}: price must be a number, got {value!r}")


def load_products_from_csv(csv_path: str) -> List[Dict[str, Any]]:
    """Load product records from a CSV file written by ``export_products_to_csv``.

    Returns raw records (JSON keys); unknown columns are kept and later
    ignored by the model.
    """
    df = pd.read_csv(csv_path, dtype=str)

    records: List[Dict[str, Any]] = []
    for row_number, row in enumerate(df.to_dict(orient="records"), start=2):
        record: Dict[str, Any] = {}
        for column, raw in row.items():
            value = _none_if_na(raw)
            if column in _LIST_COLUMNS:
                record[column] = value.split(LIST_SEPARATOR) if value else []
            elif column in _FLAG_COLUMNS:
                record[column] = _parse_flag(column, value, row_number)
            elif column == "price":
                record[column] = _parse_price(value, row_number)
            else:
                record[column] = value
        records.append(record)
    return records
