"""
==============================================================================
Catalog Store Module
==============================================================================

The single owner of the in-memory catalog.

This module implements:
- CatalogState: immutable snapshot of the session (products, alerts,
  manually-cleared flag, currency, loading status)
- CatalogStore: the update entry point. Every mutation computes the next
  product tuple synchronously with a pure function from
  ``app.catalog.mutations``, publishes a new CatalogState, and only then
  hands the catalog to the autosave effect.

Data Flow:
---------
    ┌──────────────┐   reducer   ┌──────────────┐  publish  ┌────────────────┐
    │ API / voice  │ ──────────▶ │ CatalogStore │ ────────▶ │ AutosaveEffect │
    └──────────────┘             └──────┬───────┘           └───────┬────────┘
                                        │ alerts                    │ WriteQueue
                                        ▼                           ▼
                                 compute_alerts()            Snapshot + mirror

Manually-Cleared Flag:
---------------------
Set when a delete empties the catalog, cleared when a restore/import
populates it. Persisted to the Legacy String Store through its own
latest-wins queue so the write guard survives restarts.

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from app.catalog import mutations
from app.catalog.alerts import compute_alerts, low_stock_digest
from app.catalog.models import Alert, Catalog, Product, SubProduct
from app.catalog.transfer import sanitize_catalog
from app.core import exceptions
from app.services.autosave import AutosaveEffect, WriteQueue
from app.services.loader import LoadResult, ReconciliationLoader
from app.storage.legacy import CURRENCY_KEY, MANUAL_CLEAR_KEY, LegacyStringStore
from app.storage.sources import CatalogSources


# Module logger
logger = logging.getLogger(__name__)

Reducer = Callable[[Catalog], Catalog]


@dataclass(frozen=True)
class CatalogState:
    """Immutable view of the session."""

    products: Catalog = ()
    alerts: Tuple[Alert, ...] = ()
    manually_cleared: bool = False
    currency: str = "$"
    is_loading: bool = True


class CatalogStore:
    """
    State container for the product catalog.

    All reads return the current immutable state; all writes go through
    ``apply`` (or the named operations built on it).

    Example:
        >>> store = CatalogStore(sources, legacy_store)
        >>> await store.initialize()
        >>> store.upsert_product(product)
        >>> await store.flush()
    """

    def __init__(
        self,
        sources: CatalogSources,
        legacy_store: LegacyStringStore,
        default_currency: str = "$",
    ) -> None:
        self._sources = sources
        self._legacy = legacy_store
        self._state = CatalogState(currency=default_currency)
        self._autosave = AutosaveEffect(
            sources.primary, mirror=self._mirror_source(sources)
        )
        self._flag_queue: WriteQueue[bool] = WriteQueue(self._write_flag, name="manual-clear-flag")
        self._load_result: Optional[LoadResult] = None

    @staticmethod
    def _mirror_source(sources: CatalogSources):
        try:
            return sources.named("legacy-backup")
        except KeyError:
            return None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def products(self) -> Catalog:
        return self._state.products

    @property
    def alerts(self) -> Tuple[Alert, ...]:
        return self._state.alerts

    @property
    def is_loaded(self) -> bool:
        return not self._state.is_loading

    @property
    def load_result(self) -> Optional[LoadResult]:
        return self._load_result

    @property
    def last_saved_at(self) -> Optional[datetime]:
        return self._autosave.last_saved_at

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def initialize(self) -> LoadResult:
        """Restore preferences, run the loader and publish the loaded catalog."""
        manually_cleared = self._state.manually_cleared
        currency = self._state.currency
        try:
            manually_cleared = (await self._legacy.get(MANUAL_CLEAR_KEY)) == "true"
            currency = (await self._legacy.get(CURRENCY_KEY)) or currency
        except Exception as e:
            logger.error(f"Could not read preferences: {e}")

        self._state = replace(self._state, manually_cleared=manually_cleared, currency=currency)

        loader = ReconciliationLoader(self._sources, manually_cleared=manually_cleared)
        result = await loader.load()
        self._load_result = result

        self._state = replace(self._state, is_loading=False)
        self._publish(result.products)
        logger.info(f"Catalog ready: {len(result.products)} products from {result.source}")
        return result

    async def flush(self) -> None:
        """Wait for pending catalog and flag writes."""
        await self._autosave.flush()
        await self._flag_queue.flush()

    async def close(self) -> None:
        await self.flush()

    # =========================================================================
    # UPDATE ENTRY POINT
    # =========================================================================

    def apply(self, reducer: Reducer, manually_cleared: Optional[bool] = None) -> CatalogState:
        """
        Compute the next catalog with ``reducer`` and publish it.

        Args:
            reducer: Pure function from the current catalog to the next
            manually_cleared: New flag value, or None to keep it

        Returns:
            The published state
        """
        if self._state.is_loading:
            raise exceptions.catalog_not_loaded()
        products = reducer(self._state.products)
        return self._publish(products, manually_cleared)

    def _publish(self, products: Catalog, manually_cleared: Optional[bool] = None) -> CatalogState:
        flag = self._state.manually_cleared if manually_cleared is None else manually_cleared
        if flag != self._state.manually_cleared:
            self._flag_queue.submit(flag)

        self._state = replace(
            self._state,
            products=products,
            alerts=compute_alerts(products),
            manually_cleared=flag,
        )
        self._autosave.on_change(products, flag)
        return self._state

    async def _write_flag(self, value: bool) -> bool:
        await self._legacy.set(MANUAL_CLEAR_KEY, "true" if value else "false")
        return True

    # =========================================================================
    # CATALOG OPERATIONS
    # =========================================================================

    def upsert_product(self, product: Product) -> CatalogState:
        return self.apply(lambda c: mutations.upsert_product(c, product))

    def delete_product(self, product_id: str) -> CatalogState:
        """Remove a product; removing the last one marks the catalog manually cleared."""
        current = self._state.products
        products = mutations.delete_product(current, product_id)
        cleared = not products and len(products) < len(current)
        return self.apply(lambda _: products, manually_cleared=True if cleared else None)

    def delete_all(self) -> CatalogState:
        return self.apply(lambda _: (), manually_cleared=True)

    def upsert_variant(self, product_id: str, variant: SubProduct) -> CatalogState:
        return self.apply(lambda c: mutations.upsert_variant(c, product_id, variant))

    def delete_variant(self, product_id: str, variant_id: str) -> CatalogState:
        return self.apply(lambda c: mutations.delete_variant(c, product_id, variant_id))

    def patch_variant_field(self, product_id: str, variant_id: str, field: str, value: str) -> CatalogState:
        return self.apply(
            lambda c: mutations.patch_variant_field(c, product_id, variant_id, field, value)
        )

    def adjust_stock(self, product_id: str, variant_id: str, delta: int) -> CatalogState:
        return self.apply(lambda c: mutations.adjust_variant_stock(c, product_id, variant_id, delta))

    def replace_products(self, products: Catalog) -> CatalogState:
        return self.apply(lambda _: products)

    # =========================================================================
    # RESTORE & SAVE
    # =========================================================================

    async def restore(self, products: Catalog) -> bool:
        """
        Replace the catalog (import/restore) and save it immediately.

        Returns:
            True if the Snapshot Store write succeeded
        """
        self.apply(lambda _: products, manually_cleared=False)
        saved = await self._autosave.save_now(products)
        if saved:
            logger.info(f"Restored {len(products)} products and saved")
        else:
            logger.error(f"Restored {len(products)} products but the save failed")
        return saved

    async def restore_from_safety_backup(self) -> bool:
        """
        Restore from the legacy backup mirror, else the safety backup.

        Raises:
            AppException: NO_BACKUP_FOUND or BACKUP_CORRUPTED
        """
        document = None
        for name in ("legacy-backup", "legacy-safety-backup"):
            try:
                document = await self._sources.named(name).get()
            except ValueError:
                raise exceptions.backup_corrupted()
            if document:
                logger.info(f"Restoring from {name}")
                break

        if not document:
            raise exceptions.no_backup_found()

        try:
            products = sanitize_catalog(document)
        except ValueError:
            raise exceptions.backup_corrupted()

        return await self.restore(products)

    async def manual_save(self) -> datetime:
        """
        Write the current catalog now, bypassing the write guard.

        Raises:
            AppException: SAVE_FAILED
        """
        if not await self._autosave.save_now(self._state.products):
            raise exceptions.manual_save_failed()
        return self._autosave.last_saved_at

    # =========================================================================
    # PREFERENCES & QUERIES
    # =========================================================================

    async def set_currency(self, symbol: str) -> str:
        self._state = replace(self._state, currency=symbol)
        try:
            await self._legacy.set(CURRENCY_KEY, symbol)
        except Exception as e:
            logger.error(f"Could not persist currency: {e}")
        return symbol

    def search(self, term: str) -> Catalog:
        return mutations.search_products(self._state.products, term)

    def find_product(self, product_id: str) -> Optional[Product]:
        return mutations.find_product(self._state.products, product_id)

    def low_stock_digest(self) -> Dict[str, str]:
        return low_stock_digest(self._state.alerts)
