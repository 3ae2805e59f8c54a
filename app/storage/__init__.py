"""
==============================================================================
Storage Package - Local Persistence Tiers
==============================================================================

Modules:
--------
- snapshot: SnapshotStore (SQLAlchemy table, one JSON document per key)
- legacy: LegacyStringStore (in-memory or Redis string key/value)
- sources: Named catalog sources in load priority order

==============================================================================
"""

from .legacy import (
    BACKUP_KEY,
    CURRENCY_KEY,
    MANUAL_CLEAR_KEY,
    PRIMARY_KEY,
    SAFETY_BACKUP_KEY,
    LegacyStringStore,
    MemoryStringStore,
    RedisStringStore,
    StringStoreQuotaError,
    create_legacy_store,
)
from .snapshot import ROOT_KEY, SnapshotStore
from .sources import (
    CatalogSource,
    CatalogSources,
    LegacyKeySource,
    SnapshotSource,
    build_catalog_sources,
)

__all__ = [
    "ROOT_KEY",
    "PRIMARY_KEY",
    "BACKUP_KEY",
    "SAFETY_BACKUP_KEY",
    "CURRENCY_KEY",
    "MANUAL_CLEAR_KEY",
    "SnapshotStore",
    "LegacyStringStore",
    "MemoryStringStore",
    "RedisStringStore",
    "StringStoreQuotaError",
    "create_legacy_store",
    "CatalogSource",
    "CatalogSources",
    "LegacyKeySource",
    "SnapshotSource",
    "build_catalog_sources",
]
