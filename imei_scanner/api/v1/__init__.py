"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- sessions: Operator session lifecycle
- scans: Scan intake, log, export, backup and sync
- settings: Client-visible settings

==============================================================================
"""

from . import health, sessions, scans, settings

__all__ = ["health", "sessions", "scans", "settings"]
