"""Tests for JSON document helpers and the file sink."""

import json

import pytest

from storefront.errors import ParseError, ValidationError
from storefront.transfer import (
    FileSink,
    decode_stored,
    dump_document,
    encode_document,
    parse_document,
    read_document_file,
)


class TestStoredDocuments:
    """Tests for encoding and decoding stored data."""

    def test_encode_is_compact_utf8(self):
        raw = encode_document({"title": "Café"})
        assert raw == '{"title":"Café"}'.encode("utf-8")

    def test_decode_missing(self):
        assert decode_stored(None, "k") == {}

    def test_decode_corrupt_is_empty(self):
        assert decode_stored(b"{oops", "k") == {}

    def test_decode_non_object_is_empty(self):
        assert decode_stored(b"[1, 2]", "k") == {}

    def test_decode_bad_utf8_is_empty(self):
        assert decode_stored(b"\xff\xfe", "k") == {}


class TestParseDocument:
    """Tests for import parsing."""

    def test_parses_text_and_bytes(self):
        assert parse_document('{"a": 1}') == {"a": 1}
        assert parse_document(b'{"a": 1}') == {"a": 1}

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_document("{not json")

    def test_invalid_utf8(self):
        with pytest.raises(ParseError):
            parse_document(b"\xff")

    def test_top_level_must_be_object(self):
        with pytest.raises(ValidationError):
            parse_document('["a"]')

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_document("")


class TestFileSink:
    """Tests for writing exports to disk."""

    def test_writes_file(self, tmp_path):
        sink = FileSink(tmp_path / "backup")
        path = sink("inventory.json", dump_document({"abaya-01": 3}))

        assert path == tmp_path / "backup" / "inventory.json"
        assert json.loads(path.read_text(encoding="utf-8")) == {"abaya-01": 3}

    def test_read_back(self, tmp_path):
        text = dump_document({"title": "Café"})
        path = FileSink(tmp_path)("doc.json", text)
        assert parse_document(read_document_file(path)) == {"title": "Café"}
