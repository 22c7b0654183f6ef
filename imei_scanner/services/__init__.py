"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes between the API layer and the scanning core.

Architecture Pattern: Service Layer
----------------------------------

    ┌─────────────────┐
    │ API / WebSocket │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   ScanService   │  ← Session lifecycle, persistence, sync
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   ScanSession   │  ← Classification & deduplication
    └─────────────────┘

==============================================================================
"""

from .scan_service import ScanService, get_scan_service, init_scan_service

__all__ = [
    "ScanService",
    "get_scan_service",
    "init_scan_service",
]
