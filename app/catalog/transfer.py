"""
==============================================================================
Catalog Transfer Module
==============================================================================

Serialization of the catalog for storage, backup, import and export.

Formats:
--------
- Stored document: JSON array of camelCase product objects. Quantities
  are clamped at zero when a catalog is dumped for storage.
- Backup file: the stored document, indented for diffing.
- Import file: a bare array of product-like objects, or an object with a
  ``products`` array. Each field is defaulted independently; individual
  products are never rejected.
- Legacy document: a list written by an older client, rebuilt with the
  import sanitizer instead of strict validation.
- CSV export: one header row, one row per variant, and one row with
  blank variant columns for a product without variants. Empty variant
  names and descriptions are exported with the parent's values.

==============================================================================
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import uuid
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter

from .models import (
    Catalog,
    Product,
    SubProduct,
    variant_display_description,
    variant_display_name,
)


# Module logger
logger = logging.getLogger(__name__)

_CATALOG_ADAPTER = TypeAdapter(Tuple[Product, ...])

CSV_HEADERS = [
    "Product ID", "Product Name", "Category", "Description", "Base Price",
    "Alert Limit", "Sub ID", "Sub Name", "Sub Description", "SKU", "Color",
    "Price", "Quantity", "Weight", "Dimensions",
]


# =============================================================================
# STORED DOCUMENT
# =============================================================================

def dump_catalog(catalog: Catalog) -> List[Dict[str, Any]]:
    """
    Convert the catalog into its JSON-ready stored shape.

    Quantities below zero are written as zero.
    """
    documents = []
    for product in catalog:
        data = product.model_dump(mode="json", by_alias=True)
        for variant in data["subProducts"]:
            variant["quantity"] = max(0, variant["quantity"])
        documents.append(data)
    return documents


def load_catalog(data: Any) -> Catalog:
    """
    Validate a decoded stored document.

    Raises:
        ValueError: If the document is not a list of valid products
    """
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of products, got {type(data).__name__}")
    return _CATALOG_ADAPTER.validate_python(data)


def catalog_to_json(catalog: Catalog, indent: Optional[int] = None) -> str:
    """Serialize the catalog as stored document text."""
    return json.dumps(dump_catalog(catalog), indent=indent, ensure_ascii=False)


# =============================================================================
# IMPORT SANITIZER
# =============================================================================

def _new_id() -> str:
    return str(uuid.uuid4())


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "" or value is False:
        return default
    return str(value)


def _number(value: Any) -> float:
    """Lenient numeric coercion: anything unparseable becomes 0."""
    if value is None:
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def _count(value: Any) -> int:
    return max(0, int(_number(value)))


def _amount(value: Any) -> float:
    return max(0.0, _number(value))


def sanitize_variant(raw: Dict[str, Any]) -> SubProduct:
    """Build a variant from an untrusted mapping, defaulting every field."""
    return SubProduct(
        id=_text(raw.get("id")) or _new_id(),
        sku=_text(raw.get("sku"), "UNKNOWN-SKU"),
        name=_text(raw.get("name")),
        description=_text(raw.get("description")),
        color=_text(raw.get("color"), "Default"),
        price=_amount(raw.get("price")),
        quantity=_count(raw.get("quantity")),
        weight=_text(raw.get("weight")),
        dimensions=_text(raw.get("dimensions")),
        image=_text(raw.get("image")),
        remarks=_text(raw.get("remarks")),
    )


def sanitize_product(raw: Dict[str, Any]) -> Product:
    """Build a product from an untrusted mapping, defaulting every field."""
    raw_variants = raw.get("subProducts")
    variants = tuple(
        sanitize_variant(v)
        for v in (raw_variants if isinstance(raw_variants, list) else [])
        if isinstance(v, dict)
    )
    return Product(
        id=_text(raw.get("id")) or _new_id(),
        name=_text(raw.get("name"), "Imported Product"),
        category=_text(raw.get("category"), "Uncategorized"),
        description=_text(raw.get("description")),
        base_price=_amount(raw.get("basePrice")),
        image=_text(raw.get("image")),
        remarks=_text(raw.get("remarks")),
        alert_limit=_count(raw.get("alertLimit")),
        sub_products=variants,
    )


def sanitize_catalog(data: Any) -> Catalog:
    """
    Leniently rebuild a product list written by an older client.

    Only the outer shape is checked; each entry is sanitized field by field.

    Raises:
        ValueError: If ``data`` is not a list
    """
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of products, got {type(data).__name__}")

    products = tuple(sanitize_product(p) for p in data if isinstance(p, dict))
    skipped = len(data) - len(products)
    if skipped:
        logger.warning(f"Skipped {skipped} non-object entries")
    return products


def parse_import_document(text: str) -> Catalog:
    """
    Parse a user-supplied backup file.

    Accepts a bare array or ``{"products": [...]}``.

    Raises:
        ValueError: If the text is not JSON or holds no product array
    """
    data = json.loads(text)

    if isinstance(data, dict) and isinstance(data.get("products"), list):
        data = data["products"]

    if not isinstance(data, list):
        raise ValueError("Backup must be a list of products.")
    return sanitize_catalog(data)


# =============================================================================
# EXPORT
# =============================================================================

def export_backup_json(catalog: Catalog) -> str:
    """Full catalog as indented JSON."""
    return catalog_to_json(catalog, indent=2)


def _cell(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def export_csv(catalog: Catalog) -> str:
    """Flatten the catalog to one row per variant."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for product in catalog:
        head = [
            product.id, product.name, product.category, product.description,
            _cell(product.base_price), product.alert_limit,
        ]
        if not product.sub_products:
            writer.writerow(head + [""] * 9)
            continue
        for v in product.sub_products:
            writer.writerow(head + [
                v.id,
                variant_display_name(product, v),
                variant_display_description(product, v),
                v.sku, v.color,
                _cell(v.price), max(0, v.quantity), v.weight, v.dimensions,
            ])

    return buffer.getvalue()
