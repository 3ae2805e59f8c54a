"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers.

Handlers:
---------
- voice: Single-shot voice command capture and processing

==============================================================================
"""

from .voice import router as voice_router

__all__ = ["voice_router"]
