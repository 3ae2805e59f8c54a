"""
==============================================================================
Autosave Tests
==============================================================================

Tests for the write queue and the write guard.

==============================================================================
"""

import asyncio
import json

import pytest

from app.catalog.transfer import dump_catalog
from app.services.autosave import AutosaveEffect, WriteQueue
from app.storage import BACKUP_KEY, ROOT_KEY, build_catalog_sources


class TestWriteQueue:
    """Tests for single in-flight, latest-wins writes."""

    @pytest.mark.asyncio
    async def test_coalesces_to_latest(self):
        written = []
        gate = asyncio.Event()

        async def writer(value):
            await gate.wait()
            written.append(value)
            return True

        queue = WriteQueue(writer)
        queue.submit(1)
        await asyncio.sleep(0)
        queue.submit(2)
        queue.submit(3)
        gate.set()

        assert await queue.flush() is True
        assert written == [1, 3]
        assert queue.is_idle

    @pytest.mark.asyncio
    async def test_one_write_in_flight(self):
        active = 0
        peak = 0

        async def writer(value):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return True

        queue = WriteQueue(writer)
        for i in range(5):
            queue.submit(i)
            await asyncio.sleep(0.005)
        await queue.flush()
        assert peak == 1

    @pytest.mark.asyncio
    async def test_failure_is_recorded(self):
        async def writer(value):
            raise OSError("disk full")

        queue = WriteQueue(writer)
        queue.submit("x")
        assert await queue.flush() is False


class TestWriteGuard:
    """Tests for the autosave decision and save sequence."""

    @pytest.mark.asyncio
    async def test_skips_first_notification(self, sources, snapshot_store, catalog):
        effect = AutosaveEffect(sources.primary)
        assert effect.on_change(catalog, False) is False
        await effect.flush()
        assert await snapshot_store.get(ROOT_KEY) is None

        assert effect.on_change(catalog, False) is True
        await effect.flush()
        assert await snapshot_store.get(ROOT_KEY) == dump_catalog(catalog)
        assert effect.last_saved_at is not None

    @pytest.mark.asyncio
    async def test_empty_without_manual_clear_is_skipped(self, sources, snapshot_store, catalog):
        effect = AutosaveEffect(sources.primary)
        effect.on_change(catalog, False)
        effect.on_change(catalog, False)
        await effect.flush()

        assert effect.on_change((), False) is False
        await effect.flush()
        assert await snapshot_store.get(ROOT_KEY) == dump_catalog(catalog)

    @pytest.mark.asyncio
    async def test_empty_with_manual_clear_is_saved(self, sources, snapshot_store):
        effect = AutosaveEffect(sources.primary)
        effect.on_change((), True)
        assert effect.on_change((), True) is True
        await effect.flush()
        assert await snapshot_store.get(ROOT_KEY) == []

    @pytest.mark.asyncio
    async def test_mirrors_to_legacy_backup(self, sources, legacy_store, catalog):
        effect = AutosaveEffect(sources.primary, mirror=sources.named("legacy-backup"))
        assert await effect.save_now(catalog) is True
        assert json.loads(await legacy_store.get(BACKUP_KEY)) == dump_catalog(catalog)

    @pytest.mark.asyncio
    async def test_mirror_over_ceiling_is_skipped(self, snapshot_store, legacy_store, catalog):
        sources = build_catalog_sources(snapshot_store, legacy_store, mirror_size_limit=50)
        effect = AutosaveEffect(sources.primary, mirror=sources.named("legacy-backup"))

        assert await effect.save_now(catalog) is True
        assert await legacy_store.get(BACKUP_KEY) is None
        assert await snapshot_store.get(ROOT_KEY) == dump_catalog(catalog)

    @pytest.mark.asyncio
    async def test_primary_failure_reports_false(self, sources, snapshot_store, catalog, monkeypatch):
        async def broken_put(key, value):
            raise OSError("disk full")

        monkeypatch.setattr(snapshot_store, "put", broken_put)
        effect = AutosaveEffect(sources.primary)
        assert await effect.save_now(catalog) is False
        assert effect.last_saved_at is None
