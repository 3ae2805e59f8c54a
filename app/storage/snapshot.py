"""
==============================================================================
Snapshot Store Module
==============================================================================

Structured local persistence for whole documents.

The store keeps one JSON document per key in the ``catalog_snapshots``
table. The catalog lives under ``ROOT_KEY``. All operations are async:
blocking SQLAlchemy work runs in a worker thread via ``asyncio.to_thread``.

Usage:
------
    store = SnapshotStore(DatabaseManager("sqlite://"))
    await store.open()
    await store.put(ROOT_KEY, [{"id": "1", "name": "Sofa"}])
    products = await store.get(ROOT_KEY)

==============================================================================
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from app.db.database import DatabaseManager
from app.db.models import CatalogSnapshot


# Module logger
logger = logging.getLogger(__name__)

ROOT_KEY = "root"


class SnapshotStore:
    """
    Async key/document store backed by a SQL table.

    Attributes:
        _db: DatabaseManager owning the engine
        _opened: Whether tables have been created

    Example:
        >>> store = SnapshotStore(DatabaseManager("sqlite://"))
        >>> await store.put("root", [])
        >>> await store.get("root")
        []
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db = db_manager
        self._opened = False

    async def open(self) -> None:
        """Create the backing table if needed. Safe to call repeatedly."""
        if self._opened:
            return
        await asyncio.to_thread(self._db.create_tables)
        self._opened = True
        logger.debug("Snapshot store opened")

    async def get(self, key: str) -> Optional[Any]:
        """
        Read and decode the document stored under ``key``.

        Returns:
            Decoded JSON value, or None when the key has never been written

        Raises:
            SQLAlchemyError: If the database is unavailable
            ValueError: If the stored payload is not valid JSON
        """
        await self.open()
        return await asyncio.to_thread(self._get_sync, key)

    async def put(self, key: str, value: Any) -> None:
        """
        Serialize ``value`` and overwrite the document under ``key``.

        Raises:
            SQLAlchemyError: If the database is unavailable
        """
        await self.open()
        payload = json.dumps(value, ensure_ascii=False)
        await asyncio.to_thread(self._put_sync, key, payload)
        logger.debug(f"Snapshot '{key}' written ({len(payload)} chars)")

    def _get_sync(self, key: str) -> Optional[Any]:
        with self._db.session_scope() as session:
            row = session.get(CatalogSnapshot, key)
            if row is None:
                return None
            return json.loads(row.payload)

    def _put_sync(self, key: str, payload: str) -> None:
        with self._db.session_scope() as session:
            session.merge(CatalogSnapshot(key=key, payload=payload))

    def ping(self) -> bool:
        """Check database connectivity."""
        return self._db.verify_connection()

    def close(self) -> None:
        """Release pooled connections."""
        self._db.dispose()
