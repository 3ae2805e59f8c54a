"""
==============================================================================
Royal Inventory - Application Entry Point
==============================================================================

FastAPI application with:
- RESTful catalog, alert, backup and settings endpoints
- Free-text and WebSocket voice commands
- Startup reconciliation of persisted catalog data
- Write-guarded autosave to the Snapshot Store

Usage:
------
    # Development
    uvicorn app.main:app --reload

    # Production
    uvicorn app.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.config import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.db.database import DatabaseManager
from app.api.router import api_router
from app.websockets import voice_router
from app.services.catalog_store import CatalogStore
from app.services.classifier import GeminiIntentClassifier, IntentClassifier
from app.services.commands import CommandInterpreter
from app.storage import (
    LegacyStringStore,
    SnapshotStore,
    build_catalog_sources,
    create_legacy_store,
)


# ============================================================================
# LOGGING SETUP
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================

class Application:
    """
    FastAPI application factory and manager.

    Handles application lifecycle including:
    - Storage wiring and the startup catalog load
    - Middleware configuration
    - Router registration
    - Exception handler setup

    Storage backends and the classifier can be injected (tests pass an
    in-memory database and string store); otherwise they are built from
    settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        snapshot_store: Optional[SnapshotStore] = None,
        legacy_store: Optional[LegacyStringStore] = None,
        classifier: Optional[IntentClassifier] = None,
    ):
        """Initialize the application."""
        self._settings = settings or get_settings()
        self._snapshot_store = snapshot_store or SnapshotStore(
            DatabaseManager(self._settings.database_url, echo=False)
        )
        self._legacy_store = legacy_store or create_legacy_store(self._settings.legacy_store_url)
        self._classifier = classifier or self._build_classifier()
        self._app = self._create_app()

    def _build_classifier(self) -> Optional[IntentClassifier]:
        if not self._settings.commands_enabled:
            logger.warning("GEMINI_API_KEY not set, commands disabled")
            return None
        return GeminiIntentClassifier(
            api_key=self._settings.gemini_api_key,
            model=self._settings.gemini_model,
        )

    def _create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Inventory catalog with autosave, backups and voice commands",
            lifespan=self._lifespan,
            docs_url="/docs",
            redoc_url="/redoc",
        )

        # Configure middleware
        self._configure_middleware(app)

        # Register exception handlers
        register_exception_handlers(app)

        # Register routers
        self._register_routers(app)

        # Register root endpoint
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Application lifespan manager."""
        # Startup
        await self._startup(app)
        yield
        # Shutdown
        await self._shutdown(app)

    async def _startup(self, app: FastAPI) -> None:
        """Application startup tasks."""
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {self._settings.app_name}")
        logger.info("=" * 60)

        try:
            await self._snapshot_store.open()
        except Exception as e:
            logger.error(f"❌ Snapshot store unavailable: {e}")

        sources = build_catalog_sources(
            self._snapshot_store,
            self._legacy_store,
            mirror_size_limit=self._settings.mirror_size_limit,
        )
        store = CatalogStore(
            sources,
            self._legacy_store,
            default_currency=self._settings.default_currency,
        )

        app.state.snapshot_store = self._snapshot_store
        app.state.legacy_store = self._legacy_store
        app.state.catalog_store = store
        app.state.command_interpreter = None
        if self._classifier is not None:
            app.state.command_interpreter = CommandInterpreter(
                store,
                self._classifier,
                placeholder_image=self._settings.placeholder_image_url,
            )

        result = await store.initialize()

        logger.info("=" * 60)
        logger.info(f"✅ {self._settings.app_name} ready ({len(result.products)} products from {result.source})")
        logger.info(f"📍 Running on http://{self._settings.host}:{self._settings.port}")
        logger.info(f"📖 API Docs: http://{self._settings.host}:{self._settings.port}/docs")
        logger.info("=" * 60)

    async def _shutdown(self, app: FastAPI) -> None:
        """Application shutdown tasks."""
        logger.info("🛑 Shutting down...")
        store: Optional[CatalogStore] = getattr(app.state, "catalog_store", None)
        if store is not None:
            await store.close()
        await self._legacy_store.close()
        self._snapshot_store.close()
        logger.info("✅ Shutdown complete")

    def _configure_middleware(self, app: FastAPI) -> None:
        """Configure application middleware."""
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _register_routers(self, app: FastAPI) -> None:
        """Register API routers."""
        # REST API routes
        app.include_router(api_router)

        # WebSocket routes
        app.include_router(voice_router)

    def _register_root(self, app: FastAPI) -> None:
        """Register root endpoint."""

        @app.get("/", include_in_schema=False)
        async def root():
            """Redirect to the API docs."""
            return RedirectResponse(url="/docs")

    @property
    def app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self._app


# ============================================================================
# APPLICATION INSTANCE
# ============================================================================

# Create application instance
application = Application()
app = application.app


# ============================================================================
# ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
