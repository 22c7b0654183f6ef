"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection functions for route handlers.

Usage:
------
    @router.get("/scans")
    async def list_scans(service: ScanService = Depends(get_service)):
        ...

==============================================================================
"""

from __future__ import annotations

from imei_scanner.core import exceptions
from imei_scanner.scanning.session import ScanSession
from imei_scanner.services.scan_service import ScanService, get_scan_service


def get_service() -> ScanService:
    """
    Get the global scan service.

    Raises:
        AppException: INTERNAL_ERROR if the application has not started it
    """
    service = get_scan_service()
    if service is None:
        raise exceptions.internal_error("Scan service not initialized")
    return service


def get_active_session() -> ScanSession:
    """
    Get the active scan session.

    Raises:
        AppException: SESSION_NOT_STARTED if no user has been selected
    """
    return get_service().require_session()
