"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides storage, catalog, classifier and client fixtures.

==============================================================================
"""

import pytest
import pytest_asyncio
from pathlib import Path
from typing import Any, Generator, List
from fastapi.testclient import TestClient

from app.catalog.demo import demo_catalog
from app.catalog.models import Catalog, Product, SubProduct
from app.config import Settings
from app.db.database import DatabaseManager
from app.main import Application
from app.services.catalog_store import CatalogStore
from app.services.commands import Intent, UnknownIntent
from app.storage import (
    CatalogSources,
    MemoryStringStore,
    SnapshotStore,
    build_catalog_sources,
)


# ============================================================================
# STORAGE FIXTURES
# ============================================================================

@pytest.fixture
def snapshot_store() -> Generator[SnapshotStore, None, None]:
    """Snapshot Store on a fresh in-memory SQLite database."""
    store = SnapshotStore(DatabaseManager("sqlite://"))
    yield store
    store.close()


@pytest.fixture
def legacy_store() -> MemoryStringStore:
    return MemoryStringStore()


@pytest.fixture
def sources(snapshot_store: SnapshotStore, legacy_store: MemoryStringStore) -> CatalogSources:
    return build_catalog_sources(snapshot_store, legacy_store, mirror_size_limit=4_500_000)


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def catalog() -> Catalog:
    """The demo catalog: one sofa, variants 1-1 (qty 12) and 1-2 (qty 4)."""
    return demo_catalog()


@pytest.fixture
def lamp() -> Product:
    return Product(
        id="2",
        name="Brass Floor Lamp",
        category="Lighting",
        alert_limit=2,
        sub_products=(
            SubProduct(id="2-1", sku="BFL-BRS", name="Brass Lamp", color="Brass", quantity=7),
        ),
    )


@pytest_asyncio.fixture
async def store(sources: CatalogSources, legacy_store: MemoryStringStore):
    """Initialized CatalogStore over empty storage (demo catalog)."""
    catalog_store = CatalogStore(sources, legacy_store)
    await catalog_store.initialize()
    yield catalog_store
    await catalog_store.close()


# ============================================================================
# CLASSIFIER FIXTURES
# ============================================================================

class ScriptedClassifier:
    """Returns queued intents in order, then UNKNOWN."""

    def __init__(self) -> None:
        self.intents: List[Intent] = []
        self.calls: List[Any] = []

    def queue(self, intent: Intent) -> None:
        self.intents.append(intent)

    async def classify(self, transcript: str, context: str) -> Intent:
        self.calls.append((transcript, context))
        if self.intents:
            return self.intents.pop(0)
        return UnknownIntent(reason="Nothing scripted")


@pytest.fixture
def classifier() -> ScriptedClassifier:
    return ScriptedClassifier()


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """File-backed database so stored data survives application shutdown."""
    return tmp_path / "inventory.db"


@pytest.fixture
def app_snapshot_store(db_path: Path) -> SnapshotStore:
    return SnapshotStore(DatabaseManager(f"sqlite:///{db_path}"))


@pytest.fixture
def test_settings(db_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{db_path}",
        legacy_store_url="",
        gemini_api_key="",
        debug=False,
    )


@pytest.fixture
def application(
    test_settings: Settings,
    app_snapshot_store: SnapshotStore,
    legacy_store: MemoryStringStore,
    classifier: ScriptedClassifier,
) -> Application:
    return Application(
        settings=test_settings,
        snapshot_store=app_snapshot_store,
        legacy_store=legacy_store,
        classifier=classifier,
    )


@pytest.fixture
def client(application: Application) -> Generator[TestClient, None, None]:
    """Started application; startup loads the demo catalog from empty storage."""
    with TestClient(application.app) as test_client:
        yield test_client
