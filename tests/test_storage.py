"""
==============================================================================
Storage Tier Tests
==============================================================================

Tests for the Snapshot Store, the in-memory string store and the source
chain.

==============================================================================
"""

import pytest

from app.storage import (
    BACKUP_KEY,
    MemoryStringStore,
    StringStoreQuotaError,
    build_catalog_sources,
)


class TestSnapshotStore:
    """Tests for the SQL-backed document store."""

    @pytest.mark.asyncio
    async def test_missing_key_is_none(self, snapshot_store):
        assert await snapshot_store.get("root") is None

    @pytest.mark.asyncio
    async def test_put_overwrites(self, snapshot_store):
        await snapshot_store.put("root", [{"id": "1"}])
        await snapshot_store.put("root", [])
        assert await snapshot_store.get("root") == []

    def test_ping(self, snapshot_store):
        assert snapshot_store.ping() is True


class TestMemoryStringStore:
    """Tests for the process-local string store."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        store = MemoryStringStore()
        await store.set("k", "v")
        assert await store.get("k") == "v"
        await store.delete("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_quota(self):
        store = MemoryStringStore(quota=3)
        with pytest.raises(StringStoreQuotaError):
            await store.set("k", "toolong")


class TestCatalogSources:
    """Tests for the ordered source chain."""

    def test_priority_order(self, sources):
        assert [s.name for s in sources] == [
            "snapshot", "legacy-primary", "legacy-backup", "legacy-safety-backup",
        ]
        assert sources.primary.authoritative is True

    def test_named_unknown(self, sources):
        with pytest.raises(KeyError):
            sources.named("missing")

    @pytest.mark.asyncio
    async def test_legacy_decode_error(self, sources, legacy_store):
        await legacy_store.set(BACKUP_KEY, "{not json")
        with pytest.raises(ValueError):
            await sources.named("legacy-backup").get()

    @pytest.mark.asyncio
    async def test_mirror_ceiling(self, snapshot_store, legacy_store):
        sources = build_catalog_sources(snapshot_store, legacy_store, mirror_size_limit=10)
        with pytest.raises(StringStoreQuotaError):
            await sources.named("legacy-backup").put([{"name": "a long product name"}])
        assert await legacy_store.get(BACKUP_KEY) is None
