"""
==============================================================================
Catalog Package - Inventory Domain
==============================================================================

Products with nested variants, and the pure functions that transform them.

Modules:
--------
- models: Product, SubProduct, Alert (frozen Pydantic models)
- mutations: Immutable catalog state transitions
- alerts: Low-stock alert derivation
- transfer: Stored document, import sanitizer, JSON/CSV export
- demo: Seed catalog

==============================================================================
"""

from .models import (
    Alert,
    Catalog,
    Product,
    SubProduct,
    variant_display_description,
    variant_display_name,
)
from .alerts import compute_alerts, low_stock_digest
from .demo import demo_catalog

__all__ = [
    "Alert",
    "Catalog",
    "Product",
    "SubProduct",
    "variant_display_name",
    "variant_display_description",
    "compute_alerts",
    "low_stock_digest",
    "demo_catalog",
]
