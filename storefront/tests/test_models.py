"""Tests for product models, override patches and the merge function."""

import math

import pytest

from storefront.errors import ValidationError
from storefront.models import (
    Product,
    ProductPatch,
    merge_product,
    normalize_list,
    slugify_id,
)


def _base_product() -> Product:
    return Product(
        id="abaya-01",
        title="Classic Abaya",
        price=80,
        image="a.jpg",
        category="Abayas",
        colors=["Black"],
    )


class TestSlugifyId:
    """Tests for id derivation from titles."""

    def test_slug_is_deterministic(self):
        """Same title always yields the same id."""
        title = "Silk Abaya — Royal Blue"
        assert slugify_id(title) == slugify_id(title)

    def test_slug_has_no_whitespace_or_uppercase(self):
        slug = slugify_id("Silk Abaya — Royal Blue")
        assert slug == "silk-abaya-royal-blue"
        assert not any(c.isspace() for c in slug)
        assert slug == slug.lower()

    def test_accents_are_folded(self):
        assert slugify_id("Café Kaftan") == "cafe-kaftan"

    def test_non_latin_title_keeps_letters(self):
        """Arabic product names still get an id."""
        assert slugify_id("عباية سوداء") == "عباية-سوداء"

    def test_underscores_become_separators(self):
        assert slugify_id("Summer_Kaftan 2") == "summer-kaftan-2"

    def test_edges_are_trimmed(self):
        assert slugify_id("  --Prayer Set!!  ") == "prayer-set"

    @pytest.mark.parametrize("title", ["", "   ", None, "!!!"])
    def test_empty_or_symbol_only_title_fails(self, title):
        with pytest.raises(ValidationError):
            slugify_id(title)


class TestNormalizeList:
    """Tests for list field normalization."""

    def test_trims_and_deduplicates_in_order(self):
        assert normalize_list([" M", "L ", "M", "", "S"]) == ["M", "L", "S"]

    def test_comma_separated_string(self):
        assert normalize_list("Black, Navy ,Black") == ["Black", "Navy"]

    def test_none_is_empty(self):
        assert normalize_list(None) == []

    def test_non_string_items_rejected(self):
        with pytest.raises(ValidationError):
            normalize_list(["S", 4], "sizes")

    def test_non_list_rejected(self):
        with pytest.raises(ValidationError):
            normalize_list({"a": 1}, "tags")


class TestProductPatch:
    """Tests for parsing and combining override records."""

    def test_from_dict_reads_json_keys(self):
        patch = ProductPatch.from_dict({"id": "x", "isNew": True, "onSale": False, "price": 10})
        assert patch.is_new is True
        assert patch.on_sale is False
        assert patch.price == 10
        assert patch.title is None

    def test_null_counts_as_absent(self):
        patch = ProductPatch.from_dict({"id": "x", "title": None})
        assert "title" not in patch.set_fields()

    def test_unknown_keys_ignored(self):
        patch = ProductPatch.from_dict({"id": "x", "legacyField": 1})
        assert patch.set_fields() == {}

    def test_id_from_argument_when_missing(self):
        patch = ProductPatch.from_dict({"price": 5}, product_id="kaftan-01")
        assert patch.id == "kaftan-01"

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError):
            ProductPatch.from_dict({"price": 5})

    @pytest.mark.parametrize("price", [-1, "80", True, math.inf, math.nan])
    def test_bad_price_rejected(self, price):
        with pytest.raises(ValidationError):
            ProductPatch.from_dict({"id": "x", "price": price})

    def test_zero_price_allowed(self):
        assert ProductPatch.from_dict({"id": "x", "price": 0}).price == 0

    def test_non_bool_flag_rejected(self):
        with pytest.raises(ValidationError):
            ProductPatch.from_dict({"id": "x", "hidden": "yes"})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            ProductPatch.from_dict({"id": "x", "title": "   "})

    def test_tombstone_round_trip(self):
        patch = ProductPatch.from_dict({"id": "x", "deleted": True, "title": "ignored"})
        assert patch.deleted
        assert patch.to_dict() == {"id": "x", "deleted": True}

    def test_to_dict_only_set_fields(self):
        patch = ProductPatch(id="x", price=95, is_best_seller=True)
        assert patch.to_dict() == {"id": "x", "price": 95, "isBestSeller": True}

    def test_combine_newer_fields_win(self):
        older = ProductPatch(id="x", price=10, title="Old")
        combined = older.combine(ProductPatch(id="x", price=20))
        assert combined.price == 20
        assert combined.title == "Old"

    def test_combine_replaces_tombstone(self):
        combined = ProductPatch.tombstone("x").combine(ProductPatch(id="x", price=20))
        assert not combined.deleted
        assert combined.set_fields() == {"price": 20}


class TestMergeProduct:
    """Tests for applying a patch to an optional base record."""

    def test_inherits_unset_fields(self):
        merged = merge_product(_base_product(), ProductPatch(id="abaya-01", price=95))
        assert merged.price == 95
        assert merged.title == "Classic Abaya"
        assert merged.image == "a.jpg"
        assert merged.category == "Abayas"

    def test_tombstone_merges_to_none(self):
        assert merge_product(_base_product(), ProductPatch.tombstone("abaya-01")) is None

    def test_new_product_needs_required_fields(self):
        with pytest.raises(ValidationError, match="price"):
            merge_product(None, ProductPatch(id="new", title="New", image="n.jpg"))

    def test_new_product_gets_defaults(self):
        merged = merge_product(None, ProductPatch(id="new", title="New", price=1, image="n.jpg"))
        assert merged.hidden is False
        assert merged.tags == []
        assert merged.badge is None

    def test_does_not_share_lists_with_base(self):
        base = _base_product()
        merged = merge_product(base, ProductPatch(id="abaya-01"))
        merged.colors.append("Navy")
        assert base.colors == ["Black"]


class TestProduct:
    """Tests for Product serialization."""

    def test_to_dict_uses_json_keys(self):
        data = _base_product().to_dict()
        assert data["isNew"] is False
        assert data["isBestSeller"] is False
        assert data["onSale"] is False
        assert "is_new" not in data

    def test_from_dict_round_trip(self):
        product = _base_product()
        assert Product.from_dict(product.to_dict()) == product

    def test_from_dict_incomplete_rejected(self):
        with pytest.raises(ValidationError):
            Product.from_dict({"id": "x", "title": "No price"})
