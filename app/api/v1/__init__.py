"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- products: Product and variant CRUD, stock adjustment
- alerts: Low-stock alerts and notification digest
- commands: Free-text inventory commands
- backup: Export, import, manual save, safety restore
- settings: Display preferences

==============================================================================
"""

from . import health, products, alerts, commands, backup, settings

__all__ = ["health", "products", "alerts", "commands", "backup", "settings"]
