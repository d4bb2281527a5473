"""Editable site texts and images (hero, banner, category tiles)."""

from typing import Any, Callable, Dict, Mapping

from storefront.config import CONTENT_DEFAULTS, CONTENT_KEY
from storefront.errors import ValidationError
from storefront.logging_config import log_catalog_event
from storefront.storage import ChangeHandler, Storage
from storefront.transfer import decode_stored, encode_document

__all__ = ["CONTENT_FIELDS", "ContentStore"]

CONTENT_FIELDS = tuple(CONTENT_DEFAULTS)


class ContentStore:
    """Content key -> string, falling back to built-in defaults on read."""

    def __init__(self, storage: Storage, key: str = CONTENT_KEY) -> None:
        self.storage = storage
        self.key = key

    def load_content(self) -> Dict[str, str]:
        """Return only the stored values (no defaults)."""
        raw = decode_stored(self.storage.read(self.key), self.key)
        return {k: v for k, v in raw.items() if k in CONTENT_DEFAULTS and isinstance(v, str)}

    def get_content(self, field_key: str) -> str:
        """Return the stored value, or the default when unset or blank."""
        if field_key not in CONTENT_DEFAULTS:
            raise ValidationError(f"Unknown content field '{field_key}'")
        value = self.load_content().get(field_key, "")
        return value if value.strip() else CONTENT_DEFAULTS[field_key]

    def resolved_content(self) -> Dict[str, str]:
        """Every field with defaults applied."""
        stored = self.load_content()
        return {
            k: stored[k] if stored.get(k, "").strip() else default
            for k, default in CONTENT_DEFAULTS.items()
        }

    def save_content(self, content: Mapping[str, Any]) -> None:
        """Replace the stored content.

        Raises:
            ValidationError: For unknown fields or non-string values.
        """
        unknown = sorted(k for k in content if k not in CONTENT_DEFAULTS)
        if unknown:
            raise ValidationError(f"Unknown content fields: {', '.join(unknown)}")
        for k, v in content.items():
            if not isinstance(v, str):
                raise ValidationError(f"Content field '{k}' must be a string, got {v!r}")
        self.storage.write(self.key, encode_document(dict(content)))
        log_catalog_event("content_save", {"fields": sorted(content)})

    def reset_content(self) -> None:
        self.storage.write(self.key, encode_document({}))
        log_catalog_event("content_reset", {"message": "Reset site content to defaults"})

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        return self.storage.subscribe(self.key, handler)
