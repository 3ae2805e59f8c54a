"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Request

from app.services.catalog_store import CatalogStore
from app.storage import LegacyStringStore, SnapshotStore


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, request: Request):
        state = request.app.state
        self._snapshot: Optional[SnapshotStore] = getattr(state, "snapshot_store", None)
        self._legacy: Optional[LegacyStringStore] = getattr(state, "legacy_store", None)
        self._store: Optional[CatalogStore] = getattr(state, "catalog_store", None)

    def check_snapshot_store(self) -> str:
        """Check Snapshot Store connectivity."""
        if self._snapshot is None:
            return "unavailable"
        return "healthy" if self._snapshot.ping() else "unhealthy"

    async def check_legacy_store(self) -> str:
        if self._legacy is None:
            return "unavailable"
        return "healthy" if await self._legacy.ping() else "unhealthy"

    def check_catalog(self) -> dict:
        """Check catalog status."""
        if self._store is not None and self._store.is_loaded:
            result = self._store.load_result
            return {
                "status": "healthy",
                "products": len(self._store.products),
                "source": result.source if result else None,
            }
        return {"status": "not_loaded", "products": 0, "source": None}

    async def get_health(self) -> dict:
        """Get full health status."""
        snapshot_status = self.check_snapshot_store()
        legacy_status = await self.check_legacy_store()
        catalog_info = self.check_catalog()

        overall = "healthy" if snapshot_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "snapshot_store": snapshot_status,
                "legacy_store": legacy_status,
                "catalog": catalog_info["status"],
            },
            "details": {
                "products_loaded": catalog_info["products"],
                "loaded_from": catalog_info["source"],
            },
        }


@router.get("")
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns system status including API, storage tiers, and catalog.
    """
    controller = HealthController(request)
    return await controller.get_health()


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness probe: true once the startup load has completed."""
    controller = HealthController(request)
    return {"ready": controller.check_catalog()["status"] == "healthy"}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
