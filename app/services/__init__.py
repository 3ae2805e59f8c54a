"""
==============================================================================
Services Package - Catalog Logic Layer
==============================================================================

This package provides:
- ReconciliationLoader: Startup source-of-truth decision and migration
- AutosaveEffect / WriteQueue: Write guard and serialized persistence
- CatalogStore: Single owner of the in-memory catalog
- CommandInterpreter: Free-text command to catalog mutation
- GeminiIntentClassifier: google-genai intent classification
- VoiceCaptureSession: Single-shot listen/process guard

Architecture:
------------
    ┌─────────────────┐   ┌──────────────────────┐
    │   API Router    │   │  CommandInterpreter  │
    └────────┬────────┘   └──────────┬───────────┘
             │                       │
    ┌────────▼───────────────────────▼┐
    │          CatalogStore           │  ← Pure mutations + alerts
    └────────┬────────────────────────┘
             │
    ┌────────▼────────┐
    │ AutosaveEffect  │  ← Snapshot Store + legacy mirror
    └─────────────────┘

Usage:
------
    from app.services import CatalogStore

    store = CatalogStore(sources, legacy_store)
    await store.initialize()
    store.adjust_stock("1", "1-1", -2)

==============================================================================
"""

from .autosave import AutosaveEffect, WriteQueue
from .loader import LoadResult, ReconciliationLoader
from .catalog_store import CatalogState, CatalogStore
from .commands import (
    ActionType,
    CommandInterpreter,
    CommandOutcome,
    CreateProductIntent,
    UnknownIntent,
    UpdateStockIntent,
    apply_intent,
    parse_intent,
)
from .classifier import GeminiIntentClassifier, IntentClassifier
from .voice import VoiceCaptureSession

__all__ = [
    "AutosaveEffect",
    "WriteQueue",
    "LoadResult",
    "ReconciliationLoader",
    "CatalogState",
    "CatalogStore",
    "ActionType",
    "CommandInterpreter",
    "CommandOutcome",
    "CreateProductIntent",
    "UpdateStockIntent",
    "UnknownIntent",
    "apply_intent",
    "parse_intent",
    "GeminiIntentClassifier",
    "IntentClassifier",
    "VoiceCaptureSession",
]
