"""
==============================================================================
Catalog Mutations Module
==============================================================================

Pure state transitions over the catalog.

Every function takes the current catalog and returns the next one. Input
products and variants are never modified; unchanged entries are shared
between the old and new catalog.

A reference to a missing product or variant is a silent no-op: the input
catalog is returned as-is.

==============================================================================
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from .models import Catalog, Product, SubProduct


PATCHABLE_VARIANT_FIELDS = frozenset({"name", "description"})


def _replace_variants(product: Product, variants: Iterable[SubProduct]) -> Product:
    return product.model_copy(update={"sub_products": tuple(variants)})


def _map_product(catalog: Catalog, product_id: str, transform) -> Catalog:
    """Apply ``transform`` to the product with ``product_id``; no-op if absent."""
    if not any(p.id == product_id for p in catalog):
        return catalog
    return tuple(transform(p) if p.id == product_id else p for p in catalog)


def upsert_product(catalog: Catalog, product: Product) -> Catalog:
    """Replace the product with the same id, or append it."""
    if any(p.id == product.id for p in catalog):
        return tuple(product if p.id == product.id else p for p in catalog)
    return catalog + (product,)


def delete_product(catalog: Catalog, product_id: str) -> Catalog:
    """Remove the product with ``product_id``."""
    remaining = tuple(p for p in catalog if p.id != product_id)
    if len(remaining) == len(catalog):
        return catalog
    return remaining


def upsert_variant(catalog: Catalog, product_id: str, variant: SubProduct) -> Catalog:
    """Within the parent, replace the variant with the same id or append it."""

    def transform(product: Product) -> Product:
        if any(v.id == variant.id for v in product.sub_products):
            variants = (variant if v.id == variant.id else v for v in product.sub_products)
        else:
            variants = product.sub_products + (variant,)
        return _replace_variants(product, variants)

    return _map_product(catalog, product_id, transform)


def delete_variant(catalog: Catalog, product_id: str, variant_id: str) -> Catalog:
    """Remove a variant from its parent's sequence."""

    def transform(product: Product) -> Product:
        return _replace_variants(
            product, (v for v in product.sub_products if v.id != variant_id)
        )

    return _map_product(catalog, product_id, transform)


def patch_variant_field(
    catalog: Catalog,
    product_id: str,
    variant_id: str,
    field: str,
    value: str,
) -> Catalog:
    """
    Update a single display field of one variant.

    Raises:
        ValueError: If ``field`` is not ``name`` or ``description``
    """
    if field not in PATCHABLE_VARIANT_FIELDS:
        raise ValueError(f"Field '{field}' cannot be patched")

    def transform(product: Product) -> Product:
        return _replace_variants(
            product,
            (
                v.model_copy(update={field: value}) if v.id == variant_id else v
                for v in product.sub_products
            ),
        )

    return _map_product(catalog, product_id, transform)


def adjust_variant_stock(
    catalog: Catalog,
    product_id: str,
    variant_id: str,
    delta: int,
) -> Catalog:
    """Add ``delta`` to one variant's quantity, clamping the result at zero."""

    def transform(product: Product) -> Product:
        return _replace_variants(
            product,
            (
                v.model_copy(update={"quantity": max(0, v.quantity + delta)})
                if v.id == variant_id else v
                for v in product.sub_products
            ),
        )

    return _map_product(catalog, product_id, transform)


def find_product(catalog: Catalog, product_id: str) -> Optional[Product]:
    """Return the product with ``product_id`` or None."""
    for product in catalog:
        if product.id == product_id:
            return product
    return None


def search_products(catalog: Catalog, term: str) -> Tuple[Product, ...]:
    """
    Case-insensitive filter over product name, category, variant SKU
    and variant name. An empty term returns the whole catalog.
    """
    needle = term.strip().lower()
    if not needle:
        return catalog

    def matches(product: Product) -> bool:
        if needle in product.name.lower() or needle in product.category.lower():
            return True
        return any(
            needle in v.sku.lower() or needle in v.name.lower()
            for v in product.sub_products
        )

    return tuple(p for p in catalog if matches(p))
