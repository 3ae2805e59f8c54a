"""
Low-stock alert endpoints.

Alerts are derived from the current catalog on every change and are never
stored.
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import require_loaded_store
from app.services.catalog_store import CatalogStore


router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("")
async def list_alerts(store: CatalogStore = Depends(require_loaded_store)):
    """One alert per variant at or below its product's alert limit."""
    alerts = store.alerts
    return {
        "success": True,
        "total": len(alerts),
        "alerts": [a.model_dump(by_alias=True) for a in alerts],
    }


@router.get("/digest")
async def alert_digest(store: CatalogStore = Depends(require_loaded_store)):
    """Subject and body for a low-stock notification message."""
    return {"success": True, **store.low_stock_digest()}
