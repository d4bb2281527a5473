"""Tests for structured catalog event logging."""

import json
import logging

import pytest

from storefront.logging_config import log_catalog_event, setup_logging


@pytest.fixture
def log_dir(tmp_path):
    setup_logging(level=logging.INFO, log_to_console=False, log_dir=tmp_path)
    yield tmp_path
    logging.getLogger("storefront").handlers.clear()


def _entries(log_dir):
    lines = []
    for path in log_dir.glob("storefront_*.jsonl"):
        lines.extend(path.read_text(encoding="utf-8").splitlines())
    return [json.loads(line) for line in lines]


def test_event_written_as_jsonl(log_dir):
    log_catalog_event("product_upsert", {"message": "Saved product x", "product_id": "x"})

    entries = _entries(log_dir)
    assert len(entries) == 1
    assert entries[0]["event_type"] == "product_upsert"
    assert entries[0]["message"] == "Saved product x"
    assert entries[0]["product_id"] == "x"
    assert entries[0]["level"] == "INFO"


def test_catalog_writes_are_logged(log_dir, catalog):
    catalog.delete_product("abaya-01")
    events = [e.get("event_type") for e in _entries(log_dir)]
    assert "product_delete" in events


def test_events_use_events_logger(log_dir, inventory):
    inventory.set_stock("abaya-01", 3)

    entries = _entries(log_dir)
    assert entries[0]["logger"] == "storefront.events"
    assert entries[0]["event_type"] == "stock_set"
    assert entries[0]["level"] == "DEBUG"
    assert entries[0]["stock"] == 3
