"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Catalog: Product, variant, command and settings request bodies

==============================================================================
"""

from .catalog import (
    CommandRequest,
    CurrencyUpdate,
    ProductUpsertRequest,
    StockAdjustRequest,
    VariantFieldPatch,
    VariantUpsertRequest,
)

__all__ = [
    "ProductUpsertRequest",
    "VariantUpsertRequest",
    "VariantFieldPatch",
    "StockAdjustRequest",
    "CommandRequest",
    "CurrencyUpdate",
]
