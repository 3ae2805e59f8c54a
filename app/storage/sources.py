"""
==============================================================================
Catalog Sources Module
==============================================================================

Ordered, named storage backends that can hold a catalog document.

Each source exposes async ``get()`` / ``put()`` over the decoded document
(a JSON list of products). The loader walks them in priority order; only
the first source is authoritative, the rest are read for one-way
migration.

Priority:
--------
    1. snapshot              Snapshot Store, key "root"
    2. legacy-primary        ai-inventory-data
    3. legacy-backup         ai-inventory-data-backup (size-capped mirror)
    4. legacy-safety-backup  ai-inventory-data-safety-backup

==============================================================================
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple

from .legacy import (
    BACKUP_KEY,
    PRIMARY_KEY,
    SAFETY_BACKUP_KEY,
    LegacyStringStore,
    StringStoreQuotaError,
)
from .snapshot import ROOT_KEY, SnapshotStore


# Module logger
logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """A named place a catalog document can be read from and written to."""

    name: str
    authoritative: bool = False

    @abstractmethod
    async def get(self) -> Optional[Any]:
        """
        Return the decoded document, or None when nothing is stored.

        Raises:
            ValueError: If stored data cannot be decoded
        """

    @abstractmethod
    async def put(self, document: Any) -> None:
        """Overwrite the stored document."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class SnapshotSource(CatalogSource):
    """The Snapshot Store document under ``root``."""

    authoritative = True

    def __init__(self, store: SnapshotStore, key: str = ROOT_KEY) -> None:
        self.name = "snapshot"
        self._store = store
        self._key = key

    async def get(self) -> Optional[Any]:
        return await self._store.get(self._key)

    async def put(self, document: Any) -> None:
        await self._store.put(self._key, document)


class LegacyKeySource(CatalogSource):
    """
    One Legacy String Store key holding catalog JSON text.

    Args:
        name: Source name used in logs
        store: Backing string store
        key: Storage key
        max_size: Reject writes whose serialized length reaches this size
    """

    def __init__(
        self,
        name: str,
        store: LegacyStringStore,
        key: str,
        max_size: Optional[int] = None,
    ) -> None:
        self.name = name
        self._store = store
        self._key = key
        self._max_size = max_size

    @property
    def key(self) -> str:
        return self._key

    async def get(self) -> Optional[Any]:
        raw = await self._store.get(self._key)
        if not raw:
            return None
        return json.loads(raw)

    async def put(self, document: Any) -> None:
        """
        Raises:
            StringStoreQuotaError: If the serialized document is too large
        """
        text = json.dumps(document, ensure_ascii=False)
        if self._max_size is not None and len(text) >= self._max_size:
            raise StringStoreQuotaError(
                f"{self.name}: {len(text)} chars exceeds limit of {self._max_size}"
            )
        await self._store.set(self._key, text)


@dataclass(frozen=True)
class CatalogSources:
    """The ordered source chain. ``primary`` is always first."""

    primary: CatalogSource
    legacy: Tuple[LegacyKeySource, ...]

    def __iter__(self) -> Iterator[CatalogSource]:
        yield self.primary
        yield from self.legacy

    def named(self, name: str) -> CatalogSource:
        for source in self:
            if source.name == name:
                return source
        raise KeyError(name)


def build_catalog_sources(
    snapshot_store: SnapshotStore,
    legacy_store: LegacyStringStore,
    mirror_size_limit: Optional[int] = None,
) -> CatalogSources:
    """Assemble the source chain in load priority order."""
    return CatalogSources(
        primary=SnapshotSource(snapshot_store),
        legacy=(
            LegacyKeySource("legacy-primary", legacy_store, PRIMARY_KEY),
            LegacyKeySource("legacy-backup", legacy_store, BACKUP_KEY, max_size=mirror_size_limit),
            LegacyKeySource("legacy-safety-backup", legacy_store, SAFETY_BACKUP_KEY),
        ),
    )
