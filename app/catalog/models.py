"""
==============================================================================
Catalog Models Module
==============================================================================

Pydantic models for the inventory catalog.

Field names are snake_case in Python and camelCase on the wire
(``basePrice``, ``alertLimit``, ``subProducts``) so that persisted
documents, backups and API payloads share a single shape.

Models are frozen: every catalog change builds new Product / SubProduct
instances with ``model_copy(update=...)`` instead of mutating in place.

==============================================================================
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base model with camelCase aliases and immutable instances."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class SubProduct(CatalogModel):
    """
    A concrete purchasable variant of a product.

    ``name`` and ``description`` are optional overrides; readers fall back
    to the parent product's values when they are empty (see
    ``variant_display_name``). The fallback is never written back.

    Attributes:
        id: Identifier, unique within the parent product
        sku: Stock keeping unit, expected to be unique catalog-wide
        name: Optional display name override
        description: Optional description override
        color: Visual variant identity
        price: Unit price
        quantity: Units on hand (never negative once validated)
        weight: Free-text weight
        dimensions: Free-text dimensions
        image: Image URI
        remarks: Free-text annotation
    """

    id: str = Field(..., min_length=1)
    sku: str
    name: str = ""
    description: str = ""
    color: str
    price: float = Field(default=0, ge=0)
    quantity: int = 0
    weight: str = ""
    dimensions: str = ""
    image: str = ""
    remarks: str = ""

    @field_validator("quantity")
    @classmethod
    def clamp_quantity(cls, value: int) -> int:
        """Stock never goes below zero."""
        return max(0, value)


class Product(CatalogModel):
    """
    A top-level catalog entry sharing attributes across its variants.

    Attributes:
        id: Opaque identifier, immutable after creation
        name: Display name (required)
        category: Display category
        description: Display description
        base_price: Fallback price reference for variants
        image: Image URI
        remarks: Free-text annotation
        alert_limit: Variants at or below this quantity raise an alert
        sub_products: Ordered variants
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = ""
    description: str = ""
    base_price: float = Field(default=0, ge=0)
    image: str = ""
    remarks: str = ""
    alert_limit: int = Field(default=0, ge=0)
    sub_products: Tuple[SubProduct, ...] = ()


class Alert(CatalogModel):
    """Low-stock alert derived from the catalog. Never persisted."""

    id: str
    product_name: str
    sku: str
    current_quantity: int
    limit: int
    timestamp: int


Catalog = Tuple[Product, ...]


def variant_display_name(product: Product, variant: SubProduct) -> str:
    """Variant name, falling back to the parent product's name."""
    return variant.name or product.name


def variant_display_description(product: Product, variant: SubProduct) -> str:
    """Variant description, falling back to the parent product's description."""
    return variant.description or product.description
