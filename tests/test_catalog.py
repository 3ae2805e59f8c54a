"""
==============================================================================
Catalog Unit Tests
==============================================================================

Tests for models, pure mutations and alert derivation.

==============================================================================
"""

import pytest

from app.catalog import mutations
from app.catalog.alerts import compute_alerts, low_stock_digest
from app.catalog.models import Product, SubProduct, variant_display_name


def _variant(variant_id: str, quantity: int, **kwargs) -> SubProduct:
    return SubProduct(id=variant_id, sku=f"SKU-{variant_id}", color="Black", quantity=quantity, **kwargs)


class TestModels:
    """Tests for catalog models."""

    def test_quantity_is_clamped_on_validation(self):
        assert _variant("a", -4).quantity == 0

    def test_camel_case_aliases(self, catalog):
        data = catalog[0].model_dump(by_alias=True)
        assert data["basePrice"] == 1200
        assert data["alertLimit"] == 5
        assert data["subProducts"][0]["sku"] == "RVS-BLK-3S"

    def test_display_name_falls_back_to_parent(self, catalog):
        product = catalog[0]
        named, unnamed = product.sub_products
        assert variant_display_name(product, named) == "Royal Velvet Sofa (Midnight)"
        assert variant_display_name(product, unnamed) == "Royal Velvet Sofa"
        # fallback is never written back
        assert unnamed.name == ""


class TestMutations:
    """Tests for pure catalog transitions."""

    def test_upsert_appends_new_product(self, catalog, lamp):
        result = mutations.upsert_product(catalog, lamp)
        assert [p.id for p in result] == ["1", "2"]
        assert len(catalog) == 1

    def test_upsert_replaces_in_place(self, catalog, lamp):
        two = mutations.upsert_product(catalog, lamp)
        renamed = catalog[0].model_copy(update={"name": "Sofa"})
        result = mutations.upsert_product(two, renamed)
        assert [p.name for p in result] == ["Sofa", "Brass Floor Lamp"]

    def test_delete_product(self, catalog):
        assert mutations.delete_product(catalog, "1") == ()

    def test_missing_ids_are_noops(self, catalog):
        assert mutations.delete_product(catalog, "nope") is catalog
        assert mutations.delete_variant(catalog, "nope", "1-1") is catalog
        assert mutations.adjust_variant_stock(catalog, "nope", "1-1", 5) is catalog
        assert mutations.upsert_variant(catalog, "nope", _variant("x", 1)) is catalog

    def test_missing_variant_keeps_values(self, catalog):
        result = mutations.delete_variant(catalog, "1", "nope")
        assert result == catalog

    def test_upsert_variant(self, catalog):
        result = mutations.upsert_variant(catalog, "1", _variant("1-3", 2))
        assert [v.id for v in result[0].sub_products] == ["1-1", "1-2", "1-3"]

        replaced = mutations.upsert_variant(result, "1", _variant("1-1", 99))
        assert replaced[0].sub_products[0].quantity == 99
        assert len(replaced[0].sub_products) == 3

    def test_delete_variant(self, catalog):
        result = mutations.delete_variant(catalog, "1", "1-1")
        assert [v.id for v in result[0].sub_products] == ["1-2"]

    def test_patch_variant_field(self, catalog):
        result = mutations.patch_variant_field(catalog, "1", "1-2", "name", "Gold Sofa")
        assert result[0].sub_products[1].name == "Gold Sofa"
        assert result[0].sub_products[0] is catalog[0].sub_products[0]

    def test_patch_rejects_other_fields(self, catalog):
        with pytest.raises(ValueError):
            mutations.patch_variant_field(catalog, "1", "1-1", "sku", "X")

    def test_adjust_stock_clamps_at_zero(self, catalog):
        result = mutations.adjust_variant_stock(catalog, "1", "1-2", -10)
        assert result[0].sub_products[1].quantity == 0

    @pytest.mark.parametrize("changes", [[-3, -3, -3, -3, -3], [5, -20, 2], [1, 1, -1]])
    def test_sequence_never_goes_negative(self, catalog, changes):
        result = catalog
        for delta in changes:
            result = mutations.adjust_variant_stock(result, "1", "1-1", delta)
            assert result[0].sub_products[0].quantity >= 0

    def test_search(self, catalog, lamp):
        two = mutations.upsert_product(catalog, lamp)
        assert [p.id for p in mutations.search_products(two, "LAMP")] == ["2"]
        assert [p.id for p in mutations.search_products(two, "rvs-gld")] == ["1"]
        assert mutations.search_products(two, "  ") == two


class TestAlerts:
    """Tests for low-stock alert derivation."""

    def test_one_alert_for_low_variant(self):
        product = Product(
            id="p", name="Chair", alert_limit=5,
            sub_products=(_variant("a", 3), _variant("b", 10)),
        )
        alerts = compute_alerts((product,), now_ms=1000)
        assert len(alerts) == 1
        assert alerts[0].id == "p-a"
        assert alerts[0].current_quantity == 3
        assert alerts[0].limit == 5
        assert alerts[0].timestamp == 1000

    def test_limit_is_inclusive(self):
        product = Product(id="p", name="Chair", alert_limit=5, sub_products=(_variant("a", 5),))
        assert len(compute_alerts((product,))) == 1

    def test_alert_uses_display_name(self, catalog):
        alerts = compute_alerts(catalog)
        assert [a.product_name for a in alerts] == ["Royal Velvet Sofa"]
        assert alerts[0].sku == "RVS-GLD-3S"

    def test_digest(self, catalog):
        digest = low_stock_digest(compute_alerts(catalog))
        assert digest["subject"] == "Low Stock Alert - Royal Collection Inventory"
        assert "RVS-GLD-3S" in digest["body"]
        assert "4 remaining (Limit: 5)" in digest["body"]

    def test_empty_digest(self):
        assert low_stock_digest(())["body"] == "No active alerts to notify."
