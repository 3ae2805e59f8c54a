"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the long-lived application services.

The Application builds one CatalogStore (and, when a classifier is
configured, one CommandInterpreter) during startup and keeps them on
``app.state``. Routes receive them through these dependencies so tests
can swap the backing stores without touching route code.

Dependency Hierarchy:
--------------------
                    ┌─────────────────────┐
                    │  request.app.state  │
                    └──────────┬──────────┘
                               │
             ┌─────────────────┼──────────────────┐
             │                                    │
    ┌────────▼─────────┐             ┌────────────▼────────────┐
    │ get_catalog_store│             │ get_command_interpreter │
    └────────┬─────────┘             └─────────────────────────┘
             │
    ┌────────▼────────────┐
    │ require_loaded_store│
    └─────────────────────┘

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from starlette.requests import HTTPConnection

from app.core import exceptions
from app.services.catalog_store import CatalogStore
from app.services.commands import CommandInterpreter


# Module logger
logger = logging.getLogger(__name__)


def get_catalog_store(connection: HTTPConnection) -> CatalogStore:
    """The application's CatalogStore (works for HTTP and WebSocket)."""
    store: Optional[CatalogStore] = getattr(connection.app.state, "catalog_store", None)
    if store is None:
        raise exceptions.catalog_not_loaded()
    return store


def require_loaded_store(store: CatalogStore = Depends(get_catalog_store)) -> CatalogStore:
    """CatalogStore whose startup load has completed."""
    if not store.is_loaded:
        raise exceptions.catalog_not_loaded()
    return store


def get_command_interpreter(request: Request) -> CommandInterpreter:
    interpreter: Optional[CommandInterpreter] = getattr(
        request.app.state, "command_interpreter", None
    )
    if interpreter is None:
        raise exceptions.classifier_unavailable()
    return interpreter
