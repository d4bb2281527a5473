"""JSON document helpers shared by the persisted stores.

Stored documents and export files have the same shape: a single JSON object
that is exactly the store's mapping, with no envelope or version field.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from storefront.errors import ParseError, ValidationError

__all__ = [
    "FileSinkFn",
    "FileSink",
    "encode_document",
    "decode_stored",
    "dump_document",
    "parse_document",
    "read_document_file",
]

logger = logging.getLogger(__name__)

# Receives (filename, document text) when a store is exported
FileSinkFn = Callable[[str, str], Any]


def encode_document(mapping: Mapping[str, Any]) -> bytes:
    """Serialize a mapping for storage (compact UTF-8 JSON)."""
    return json.dumps(mapping, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_stored(raw: Optional[bytes], key: str) -> Dict[str, Any]:
    """Decode a stored document, treating missing or corrupt data as empty."""
    if raw is None:
        return {}
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring corrupt data under '%s': %s", key, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring non-object data under '%s' (%s)", key, type(data).__name__)
        return {}
    return data


def dump_document(mapping: Mapping[str, Any]) -> str:
    """Serialize a mapping as a pretty-printed export document."""
    return json.dumps(mapping, ensure_ascii=False, indent=2)


def parse_document(text: Union[str, bytes]) -> Dict[str, Any]:
    """Parse an import document.

    Raises:
        ParseError: If the text is not valid JSON.
        ValidationError: If the top level is not a JSON object.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Import document is not valid UTF-8: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Import document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(
            f"Import document must be a JSON object, got {type(data).__name__}"
        )
    return data


def read_document_file(path: Union[str, Path]) -> str:
    """Read a user-selected import file."""
    return Path(path).read_text(encoding="utf-8")


class FileSink:
    """Writes exported documents into a directory."""

    def __init__(self, directory: Union[str, Path] = ".") -> None:
        self.directory = Path(directory)

    def __call__(self, filename: str, text: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_text(text + "\n", encoding="utf-8")
        logger.info("Exported %s", path)
        return path
