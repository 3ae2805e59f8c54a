"""
==============================================================================
Reconciliation Loader Module
==============================================================================

Decides the catalog's source of truth at startup.

Load Order:
----------
1. Snapshot source. A non-empty product list is used as-is.
2. Legacy sources in priority order; the first non-empty value wins.
   If it decodes to a product list it becomes the catalog and is written
   to the snapshot source (one-way migration; legacy keys are kept).
3. A legacy value that does not decode, or no data anywhere, loads the
   demo catalog.
4. Any unexpected failure loads the demo catalog.

An empty snapshot list counts as "no data" and falls through to step 2,
unless the catalog was manually cleared; then the empty list is the catalog.
The snapshot is validated strictly; legacy values are sanitized leniently.
Completion is signalled exactly once, whichever path is taken.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app.catalog.demo import demo_catalog
from app.catalog.models import Catalog
from app.catalog.transfer import dump_catalog, load_catalog, sanitize_catalog
from app.storage.sources import CatalogSource, CatalogSources


# Module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """
    Outcome of a startup load.

    Attributes:
        products: The initial catalog
        source: Name of the source used, or "demo"
        migrated: True when legacy data was copied into the snapshot source
    """

    products: Catalog
    source: str
    migrated: bool = False


class ReconciliationLoader:
    """
    Produces the initial catalog from the source chain.

    Example:
        >>> loader = ReconciliationLoader(sources)
        >>> result = await loader.load()
        >>> result.source
        'snapshot'
    """

    def __init__(
        self,
        sources: CatalogSources,
        on_complete: Optional[Callable[[LoadResult], None]] = None,
        manually_cleared: bool = False,
    ) -> None:
        self._sources = sources
        self._on_complete = on_complete
        self._manually_cleared = manually_cleared
        self._completed = asyncio.Event()

    @property
    def completed(self) -> asyncio.Event:
        """Set once loading has finished."""
        return self._completed

    async def load(self) -> LoadResult:
        """Run the load order and signal completion."""
        result: Optional[LoadResult] = None
        try:
            result = await self._load()
        except Exception:
            logger.exception("Catalog initialization failed, loading demo data")
            result = self._demo()
        finally:
            if result is None:
                result = self._demo()
            self._signal(result)
        return result

    async def _load(self) -> LoadResult:
        primary = self._sources.primary
        products = await self._read_primary(primary)
        if products == () and self._manually_cleared:
            logger.info(f"{primary.name} was cleared manually, starting empty")
            return LoadResult(products, primary.name)
        if products:
            logger.info(f"Loaded {len(products)} products from {primary.name}")
            return LoadResult(products, primary.name)

        logger.warning(f"{primary.name} empty, checking legacy storage...")

        for source in self._sources.legacy:
            try:
                data = await source.get()
            except ValueError:
                logger.error(f"Migration failed, corrupted data in {source.name}")
                return self._demo()

            if not data:
                continue

            try:
                products = sanitize_catalog(data)
            except ValueError:
                logger.error(f"Migration failed, invalid format in {source.name}")
                return self._demo()

            logger.info(f"Migrating {len(products)} products from {source.name} to {primary.name}...")
            migrated = await self._migrate(primary, products)
            return LoadResult(products, source.name, migrated=migrated)

        logger.info("No stored catalog found")
        return self._demo()

    async def _read_primary(self, primary: CatalogSource) -> Optional[Catalog]:
        """Stored catalog, or None when there is nothing usable."""
        try:
            data = await primary.get()
        except Exception as e:
            logger.error(f"{primary.name} load error: {e}")
            return None

        if data is None:
            return None

        try:
            return load_catalog(data)
        except ValueError as e:
            logger.error(f"{primary.name} holds an invalid catalog: {e}")
            return None

    async def _migrate(self, primary: CatalogSource, products: Catalog) -> bool:
        try:
            await primary.put(dump_catalog(products))
            return True
        except Exception as e:
            logger.error(f"Migration write to {primary.name} failed: {e}")
            return False

    def _demo(self) -> LoadResult:
        logger.info("Loading demo catalog")
        return LoadResult(demo_catalog(), "demo")

    def _signal(self, result: LoadResult) -> None:
        if self._completed.is_set():
            return
        self._completed.set()
        if self._on_complete is not None:
            self._on_complete(result)
