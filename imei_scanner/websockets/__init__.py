"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for barcode scanning.

Handlers:
---------
- scanner: Frame and manual-entry intake for the active session

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
