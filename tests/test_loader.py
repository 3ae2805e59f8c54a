"""
==============================================================================
Reconciliation Loader Tests
==============================================================================
"""

import json

import pytest

from app.catalog.transfer import dump_catalog
from app.services.loader import ReconciliationLoader
from app.storage import BACKUP_KEY, PRIMARY_KEY, SAFETY_BACKUP_KEY, ROOT_KEY

LOOSE_LEGACY_CHAIR = [{
    "id": "a",
    "name": "Chair",
    "category": "Seating",
    "subProducts": [{"id": "v", "sku": "CH-1", "quantity": 3}],
}]


class TestLoadOrder:
    """Tests for the source-of-truth decision."""

    @pytest.mark.asyncio
    async def test_snapshot_wins_over_legacy(self, sources, snapshot_store, legacy_store, catalog, lamp):
        await snapshot_store.put(ROOT_KEY, dump_catalog((lamp,)))
        await legacy_store.set(PRIMARY_KEY, json.dumps(dump_catalog(catalog)))

        result = await ReconciliationLoader(sources).load()

        assert result.source == "snapshot"
        assert result.products == (lamp,)
        assert result.migrated is False

    @pytest.mark.asyncio
    async def test_migrates_legacy_once(self, sources, snapshot_store, legacy_store, lamp):
        await legacy_store.set(PRIMARY_KEY, json.dumps(dump_catalog((lamp,))))

        first = await ReconciliationLoader(sources).load()
        assert first.source == "legacy-primary"
        assert first.migrated is True
        assert await snapshot_store.get(ROOT_KEY) == dump_catalog((lamp,))
        # legacy keys are left in place
        assert await legacy_store.get(PRIMARY_KEY) is not None

        await legacy_store.set(PRIMARY_KEY, "[]")
        second = await ReconciliationLoader(sources).load()
        assert second.source == "snapshot"
        assert second.products == (lamp,)

    @pytest.mark.asyncio
    async def test_empty_snapshot_falls_through(self, sources, snapshot_store, legacy_store, lamp):
        await snapshot_store.put(ROOT_KEY, [])
        await legacy_store.set(SAFETY_BACKUP_KEY, json.dumps(dump_catalog((lamp,))))

        result = await ReconciliationLoader(sources).load()
        assert result.source == "legacy-safety-backup"
        assert result.products == (lamp,)

    @pytest.mark.asyncio
    async def test_legacy_priority(self, sources, legacy_store, catalog, lamp):
        await legacy_store.set(BACKUP_KEY, json.dumps(dump_catalog(catalog)))
        await legacy_store.set(SAFETY_BACKUP_KEY, json.dumps(dump_catalog((lamp,))))

        result = await ReconciliationLoader(sources).load()
        assert result.source == "legacy-backup"
        assert result.products == catalog

    @pytest.mark.asyncio
    async def test_manually_cleared_snapshot_is_kept(self, sources, snapshot_store, legacy_store, lamp):
        await snapshot_store.put(ROOT_KEY, [])
        await legacy_store.set(PRIMARY_KEY, json.dumps(dump_catalog((lamp,))))

        result = await ReconciliationLoader(sources, manually_cleared=True).load()
        assert result.source == "snapshot"
        assert result.products == ()
        assert result.migrated is False

    @pytest.mark.asyncio
    async def test_missing_snapshot_ignores_cleared_flag(self, sources, legacy_store, lamp):
        await legacy_store.set(PRIMARY_KEY, json.dumps(dump_catalog((lamp,))))

        result = await ReconciliationLoader(sources, manually_cleared=True).load()
        assert result.source == "legacy-primary"
        assert result.products == (lamp,)


class TestLegacyShapes:
    """Tests for loosely shaped legacy documents."""

    @pytest.mark.asyncio
    async def test_missing_variant_fields_are_defaulted(self, sources, snapshot_store, legacy_store):
        await legacy_store.set(PRIMARY_KEY, json.dumps(LOOSE_LEGACY_CHAIR))

        result = await ReconciliationLoader(sources).load()
        assert result.source == "legacy-primary"
        assert result.migrated is True
        variant = result.products[0].sub_products[0]
        assert variant.sku == "CH-1"
        assert variant.color == "Default"
        assert variant.quantity == 3
        assert await snapshot_store.get(ROOT_KEY) == dump_catalog(result.products)

    @pytest.mark.asyncio
    async def test_numeric_ids_become_strings(self, sources, legacy_store):
        await legacy_store.set(PRIMARY_KEY, json.dumps([
            {"id": 42, "name": "Stool", "subProducts": [{"id": 1, "sku": "ST-1", "color": "Oak"}]},
        ]))

        result = await ReconciliationLoader(sources).load()
        assert result.source == "legacy-primary"
        assert result.products[0].id == "42"
        assert result.products[0].sub_products[0].id == "1"


class TestDemoFallback:
    """Tests for the demo catalog fallbacks."""

    @pytest.mark.asyncio
    async def test_no_data_anywhere(self, sources, catalog):
        result = await ReconciliationLoader(sources).load()
        assert result.source == "demo"
        assert result.products == catalog

    @pytest.mark.asyncio
    async def test_corrupted_legacy_json(self, sources, legacy_store, lamp):
        await legacy_store.set(PRIMARY_KEY, "{broken")
        await legacy_store.set(SAFETY_BACKUP_KEY, json.dumps(dump_catalog((lamp,))))

        result = await ReconciliationLoader(sources).load()
        assert result.source == "demo"

    @pytest.mark.asyncio
    async def test_legacy_not_a_list(self, sources, legacy_store):
        await legacy_store.set(PRIMARY_KEY, '{"products": "x"}')
        result = await ReconciliationLoader(sources).load()
        assert result.source == "demo"

    @pytest.mark.asyncio
    async def test_unavailable_legacy_store(self, sources, legacy_store, monkeypatch):
        async def broken_get(key):
            raise ConnectionError("down")

        monkeypatch.setattr(legacy_store, "get", broken_get)
        result = await ReconciliationLoader(sources).load()
        assert result.source == "demo"


class TestCompletionSignal:
    """Tests for the once-only completion signal."""

    @pytest.mark.asyncio
    async def test_signals_once(self, sources):
        seen = []
        loader = ReconciliationLoader(sources, on_complete=seen.append)

        await loader.load()
        await loader.load()

        assert loader.completed.is_set()
        assert len(seen) == 1
        assert seen[0].source == "demo"
