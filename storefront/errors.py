"""Error kinds raised by the catalog, inventory and content stores."""

__all__ = [
    "CatalogError",
    "ValidationError",
    "ParseError",
    "NotFoundError",
]


class CatalogError(Exception):
    """Base class for storefront data errors."""
    pass


class ValidationError(CatalogError, ValueError):
    """Raised when a record or value fails validation before a write."""
    pass


class ParseError(CatalogError, ValueError):
    """Raised when an import document is not valid JSON."""
    pass


class NotFoundError(CatalogError, KeyError):
    """Raised when an operation needs a product that is not in the catalog."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""
