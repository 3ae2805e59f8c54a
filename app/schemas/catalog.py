"""
==============================================================================
Catalog Schemas Module
==============================================================================

Request bodies for the catalog, command, backup and settings endpoints.

Product and variant ids come from the URL path; the bodies carry the
remaining fields in the same camelCase shape as the stored catalog.

==============================================================================
"""

from typing import List, Literal

from pydantic import Field

from app.catalog.models import CatalogModel, Product, SubProduct


class VariantUpsertRequest(CatalogModel):
    """Variant fields for PUT /products/{id}/variants/{vid}."""
    sku: str
    name: str = ""
    description: str = ""
    color: str
    price: float = Field(default=0, ge=0)
    quantity: int = Field(default=0, ge=0)
    weight: str = ""
    dimensions: str = ""
    image: str = ""
    remarks: str = ""

    def to_variant(self, variant_id: str) -> SubProduct:
        return SubProduct(id=variant_id, **self.model_dump())


class ProductUpsertRequest(CatalogModel):
    """Product fields for PUT /products/{id}."""
    name: str = Field(..., min_length=1)
    category: str = ""
    description: str = ""
    base_price: float = Field(default=0, ge=0)
    image: str = ""
    remarks: str = ""
    alert_limit: int = Field(default=0, ge=0)
    sub_products: List[SubProduct] = Field(default_factory=list)

    def to_product(self, product_id: str) -> Product:
        data = self.model_dump(exclude={"sub_products"})
        return Product(id=product_id, sub_products=tuple(self.sub_products), **data)


class VariantFieldPatch(CatalogModel):
    """Single display-field update."""
    field: Literal["name", "description"]
    value: str


class StockAdjustRequest(CatalogModel):
    """Signed quantity change for one variant."""
    delta: int


class CommandRequest(CatalogModel):
    transcript: str = Field(..., min_length=1, max_length=500)


class CurrencyUpdate(CatalogModel):
    symbol: str = Field(..., min_length=1, max_length=8)
