"""
==============================================================================
Product Catalog Endpoints
==============================================================================

Endpoints for browsing and mutating the product catalog.

Mutations follow catalog semantics: a missing product or variant id is a
silent no-op and the unchanged catalog is returned. Only the single-product
read reports 404.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.catalog.models import Product
from app.core import exceptions
from app.core.dependencies import require_loaded_store
from app.schemas.catalog import (
    ProductUpsertRequest,
    StockAdjustRequest,
    VariantFieldPatch,
    VariantUpsertRequest,
)
from app.services.catalog_store import CatalogState, CatalogStore


router = APIRouter(prefix="/products", tags=["Products"])


def _dump(product: Product) -> dict:
    return product.model_dump(by_alias=True)


class ProductController:
    """Controller for product catalog operations."""

    def __init__(self, store: CatalogStore):
        self._store = store

    def _catalog_response(self, state: CatalogState) -> dict:
        return {
            "success": True,
            "total": len(state.products),
            "products": [_dump(p) for p in state.products],
        }

    def list_products(self, query: Optional[str]) -> dict:
        """List products, filtered by a search term when given."""
        products = self._store.search(query) if query else self._store.products
        return {
            "success": True,
            "query": query,
            "total": len(products),
            "products": [_dump(p) for p in products],
        }

    def get_product(self, product_id: str) -> dict:
        product = self._store.find_product(product_id)
        if not product:
            raise exceptions.product_not_found(product_id)
        return {"success": True, "product": _dump(product)}

    def upsert_product(self, product_id: str, body: ProductUpsertRequest) -> dict:
        return self._catalog_response(self._store.upsert_product(body.to_product(product_id)))

    def delete_product(self, product_id: str) -> dict:
        return self._catalog_response(self._store.delete_product(product_id))

    def delete_all(self) -> dict:
        return self._catalog_response(self._store.delete_all())

    def upsert_variant(self, product_id: str, variant_id: str, body: VariantUpsertRequest) -> dict:
        state = self._store.upsert_variant(product_id, body.to_variant(variant_id))
        return self._catalog_response(state)

    def delete_variant(self, product_id: str, variant_id: str) -> dict:
        return self._catalog_response(self._store.delete_variant(product_id, variant_id))

    def patch_variant(self, product_id: str, variant_id: str, body: VariantFieldPatch) -> dict:
        state = self._store.patch_variant_field(product_id, variant_id, body.field, body.value)
        return self._catalog_response(state)

    def adjust_stock(self, product_id: str, variant_id: str, body: StockAdjustRequest) -> dict:
        state = self._store.adjust_stock(product_id, variant_id, body.delta)
        return self._catalog_response(state)


@router.get("")
async def list_products(
    q: Optional[str] = Query(None, max_length=200),
    store: CatalogStore = Depends(require_loaded_store),
):
    """List products; ``q`` filters by product name, category, variant SKU and variant name."""
    return ProductController(store).list_products(q)


@router.delete("")
async def delete_all_products(store: CatalogStore = Depends(require_loaded_store)):
    """Remove every product and mark the catalog as manually cleared."""
    return ProductController(store).delete_all()


@router.get("/{product_id}")
async def get_product(product_id: str, store: CatalogStore = Depends(require_loaded_store)):
    return ProductController(store).get_product(product_id)


@router.put("/{product_id}")
async def upsert_product(
    product_id: str,
    body: ProductUpsertRequest,
    store: CatalogStore = Depends(require_loaded_store),
):
    """Create or replace a product."""
    return ProductController(store).upsert_product(product_id, body)


@router.delete("/{product_id}")
async def delete_product(product_id: str, store: CatalogStore = Depends(require_loaded_store)):
    return ProductController(store).delete_product(product_id)


@router.put("/{product_id}/variants/{variant_id}")
async def upsert_variant(
    product_id: str,
    variant_id: str,
    body: VariantUpsertRequest,
    store: CatalogStore = Depends(require_loaded_store),
):
    """Create or replace a variant within its parent product."""
    return ProductController(store).upsert_variant(product_id, variant_id, body)


@router.delete("/{product_id}/variants/{variant_id}")
async def delete_variant(
    product_id: str,
    variant_id: str,
    store: CatalogStore = Depends(require_loaded_store),
):
    return ProductController(store).delete_variant(product_id, variant_id)


@router.patch("/{product_id}/variants/{variant_id}")
async def patch_variant(
    product_id: str,
    variant_id: str,
    body: VariantFieldPatch,
    store: CatalogStore = Depends(require_loaded_store),
):
    """Update a variant's name or description."""
    return ProductController(store).patch_variant(product_id, variant_id, body)


@router.post("/{product_id}/variants/{variant_id}/stock")
async def adjust_stock(
    product_id: str,
    variant_id: str,
    body: StockAdjustRequest,
    store: CatalogStore = Depends(require_loaded_store),
):
    """Add a signed delta to one variant's quantity (floored at zero)."""
    return ProductController(store).adjust_stock(product_id, variant_id, body)
