"""
Low-stock alert derivation.

Alerts are recomputed from scratch after every catalog change by scanning
every variant of every product; nothing is maintained incrementally.
"""

from __future__ import annotations

import time
from typing import Dict, Optional, Tuple

from .models import Alert, Catalog, variant_display_name


def compute_alerts(catalog: Catalog, now_ms: Optional[int] = None) -> Tuple[Alert, ...]:
    """
    Build one alert per variant whose quantity is at or below the parent's
    alert limit.

    Args:
        catalog: Products to scan
        now_ms: Timestamp in epoch milliseconds (defaults to now)

    Returns:
        Alerts in catalog order
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)

    return tuple(
        Alert(
            id=f"{product.id}-{variant.id}",
            product_name=variant_display_name(product, variant),
            sku=variant.sku,
            current_quantity=variant.quantity,
            limit=product.alert_limit,
            timestamp=timestamp,
        )
        for product in catalog
        for variant in product.sub_products
        if variant.quantity <= product.alert_limit
    )


def low_stock_digest(alerts: Tuple[Alert, ...]) -> Dict[str, str]:
    """Subject and body text for a restock notification."""
    if not alerts:
        return {"subject": "", "body": "No active alerts to notify."}

    lines = [
        f"- {a.product_name} (SKU: {a.sku}): {a.current_quantity} remaining (Limit: {a.limit})"
        for a in alerts
    ]
    body = (
        "The following items are running low on stock:\n\n"
        + "\n".join(lines)
        + "\n\nPlease restock immediately."
    )
    return {"subject": "Low Stock Alert - Royal Collection Inventory", "body": body}
