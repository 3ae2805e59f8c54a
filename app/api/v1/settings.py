"""
Display preference endpoints.
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_catalog_store
from app.schemas.catalog import CurrencyUpdate
from app.services.catalog_store import CatalogStore


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/currency")
async def get_currency(store: CatalogStore = Depends(get_catalog_store)):
    return {"success": True, "currency": store.state.currency}


@router.put("/currency")
async def set_currency(body: CurrencyUpdate, store: CatalogStore = Depends(get_catalog_store)):
    """Set the currency symbol used for display."""
    currency = await store.set_currency(body.symbol)
    return {"success": True, "currency": currency}
