"""
==============================================================================
Autosave Module
==============================================================================

Write-guard and background persistence for catalog changes.

This module implements:
- WriteQueue: single in-flight async writer; pending values coalesce so
  only the latest one is written next
- AutosaveEffect: decides whether a published catalog is persisted, then
  writes it to the snapshot source and mirrors it to the legacy backup

Write Guard:
-----------
- The first change notification after load is skipped (it is the loaded
  state, not a mutation).
- An empty catalog is only persisted when the manually-cleared flag is set.

Save Sequence:
-------------
1. Snapshot source write (failures logged; last_saved_at only on success)
2. Legacy backup mirror if under the size ceiling (failures swallowed)

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from app.catalog.models import Catalog
from app.catalog.transfer import dump_catalog
from app.storage.legacy import StringStoreQuotaError
from app.storage.sources import CatalogSource


# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")

_EMPTY: Any = object()


class WriteQueue(Generic[T]):
    """
    Serializes async writes with latest-wins coalescing.

    At most one write runs at a time. Values submitted while a write is in
    flight replace each other; when the in-flight write finishes, only the
    most recent pending value is written.

    Attributes:
        last_succeeded: Result of the most recent completed write
        writes: Number of completed writes

    Example:
        >>> queue = WriteQueue(save)
        >>> queue.submit(a); queue.submit(b); queue.submit(c)
        >>> await queue.flush()  # writes a, then c
    """

    def __init__(self, writer: Callable[[T], Awaitable[bool]], name: str = "write-queue") -> None:
        self._writer = writer
        self._name = name
        self._pending: Any = _EMPTY
        self._task: Optional[asyncio.Task] = None
        self.last_succeeded: Optional[bool] = None
        self.writes = 0

    @property
    def is_idle(self) -> bool:
        return self._pending is _EMPTY and (self._task is None or self._task.done())

    def submit(self, value: T) -> None:
        """Queue ``value``; starts the drain task if none is running."""
        self._pending = value
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._drain(), name=self._name)

    async def _drain(self) -> None:
        while self._pending is not _EMPTY:
            value, self._pending = self._pending, _EMPTY
            try:
                self.last_succeeded = bool(await self._writer(value))
            except Exception:
                logger.exception(f"{self._name}: write failed")
                self.last_succeeded = False
            self.writes += 1

    async def flush(self) -> Optional[bool]:
        """Wait until no write is pending or in flight."""
        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)
        return self.last_succeeded


class AutosaveEffect:
    """
    Persists published catalogs subject to the write guard.

    Args:
        primary: Authoritative source (Snapshot Store)
        mirror: Size-capped legacy backup source, or None
    """

    def __init__(self, primary: CatalogSource, mirror: Optional[CatalogSource] = None) -> None:
        self._primary = primary
        self._mirror = mirror
        self._queue: WriteQueue[Catalog] = WriteQueue(self._save, name="autosave")
        self._skip_next = True
        self.last_saved_at: Optional[datetime] = None

    @property
    def queue(self) -> WriteQueue[Catalog]:
        return self._queue

    def on_change(self, products: Catalog, manually_cleared: bool) -> bool:
        """
        React to a published catalog.

        Returns:
            True if a save was scheduled
        """
        if self._skip_next:
            self._skip_next = False
            logger.debug("Skipping save for freshly loaded catalog")
            return False

        if not products and not manually_cleared:
            logger.warning("Catalog is empty but was not cleared manually; save skipped")
            return False

        self._queue.submit(products)
        return True

    async def save_now(self, products: Catalog) -> bool:
        """Write immediately (bypassing the guard) and report success."""
        self._queue.submit(products)
        return bool(await self._queue.flush())

    async def flush(self) -> Optional[bool]:
        return await self._queue.flush()

    async def _save(self, products: Catalog) -> bool:
        document = dump_catalog(products)
        saved = False

        try:
            await self._primary.put(document)
            saved = True
            self.last_saved_at = datetime.now(timezone.utc)
            logger.debug(f"Saved {len(products)} products to {self._primary.name}")
        except Exception as e:
            logger.error(f"{self._primary.name} save error: {e}")

        if self._mirror is not None:
            try:
                await self._mirror.put(document)
            except StringStoreQuotaError as e:
                logger.info(f"Backup mirror skipped: {e}")
            except Exception as e:
                logger.warning(f"Backup mirror failed: {e}")

        return saved
