"""
==============================================================================
Settings Endpoints
==============================================================================

Read-only view of the client-visible configuration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from imei_scanner.core.dependencies import get_service
from imei_scanner.schemas.scan import SettingsResponse
from imei_scanner.services.scan_service import ScanService


router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse)
async def get_settings_view(service: ScanService = Depends(get_service)):
    """Get scanning and sync settings."""
    return SettingsResponse(
        settings=service.settings.public_view(),
        sync_status=service.last_sync_status
    )
