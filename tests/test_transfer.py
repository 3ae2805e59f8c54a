"""
==============================================================================
Import / Export Tests
==============================================================================
"""

import csv
import io
import json

import pytest

from app.catalog.transfer import (
    CSV_HEADERS,
    dump_catalog,
    export_backup_json,
    export_csv,
    load_catalog,
    parse_import_document,
)


class TestStorageFormat:
    """Tests for the persisted document shape."""

    def test_dump_uses_camel_case(self, catalog):
        document = dump_catalog(catalog)
        assert set(document[0]) >= {"id", "name", "basePrice", "alertLimit", "subProducts"}

    def test_load_roundtrip(self, catalog):
        assert load_catalog(dump_catalog(catalog)) == catalog

    def test_load_rejects_non_list(self):
        with pytest.raises(ValueError):
            load_catalog({"products": []})


class TestImport:
    """Tests for the import sanitizer."""

    def test_backup_roundtrip(self, catalog, lamp):
        original = catalog + (lamp,)
        assert parse_import_document(export_backup_json(original)) == original

    def test_backup_is_indented(self, catalog):
        assert export_backup_json(catalog).startswith("[\n  {")

    def test_products_wrapper(self, catalog):
        text = json.dumps({"products": dump_catalog(catalog)})
        assert parse_import_document(text) == catalog

    def test_defaults_for_missing_fields(self):
        products = parse_import_document('[{"subProducts": [{}]}]')
        product = products[0]
        assert product.id
        assert product.name == "Imported Product"
        assert product.category == "Uncategorized"
        assert product.base_price == 0
        assert product.alert_limit == 0

        variant = product.sub_products[0]
        assert variant.id
        assert variant.sku == "UNKNOWN-SKU"
        assert variant.color == "Default"
        assert variant.quantity == 0

    def test_generated_ids_are_unique(self):
        products = parse_import_document("[{}, {}]")
        assert products[0].id != products[1].id

    def test_malformed_fields_are_defaulted(self):
        text = '[{"id": "x", "name": "Desk", "basePrice": "abc", "subProducts": "nope"}]'
        product = parse_import_document(text)[0]
        assert product.base_price == 0
        assert product.sub_products == ()

    def test_negative_quantity_clamped(self):
        text = '[{"id": "x", "name": "Desk", "subProducts": [{"id": "v", "quantity": -5}]}]'
        assert parse_import_document(text)[0].sub_products[0].quantity == 0

    def test_non_object_entries_skipped(self):
        assert len(parse_import_document('[1, "two", {"name": "Desk"}]')) == 1

    @pytest.mark.parametrize("text", ['{"name": "Desk"}', '"hello"', "42", "not json"])
    def test_rejects_non_array(self, text):
        with pytest.raises(ValueError):
            parse_import_document(text)


class TestCsvExport:
    """Tests for the flattened CSV export."""

    def test_one_row_per_variant(self, catalog, lamp):
        rows = list(csv.reader(io.StringIO(export_csv(catalog + (lamp,)))))
        assert rows[0] == CSV_HEADERS
        assert len(rows) == 1 + 3
        assert rows[1][:2] == ["1", "Royal Velvet Sofa"]
        assert rows[1][9] == "RVS-BLK-3S"
        assert rows[1][12] == "12"

    def test_product_without_variants(self):
        products = parse_import_document('[{"id": "x", "name": "Desk, Oak"}]')
        rows = list(csv.reader(io.StringIO(export_csv(products))))
        assert rows[1][1] == "Desk, Oak"
        assert rows[1][6:] == [""] * 9

    def test_variant_falls_back_to_parent_text(self, catalog):
        rows = list(csv.reader(io.StringIO(export_csv(catalog))))
        assert rows[1][7:9] == ["Royal Velvet Sofa (Midnight)", "3-Seater midnight black"]
        assert rows[2][7:9] == ["Royal Velvet Sofa", "Premium black velvet sofa with gold trim."]
        assert catalog[0].sub_products[1].name == ""
