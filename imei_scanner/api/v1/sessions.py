"""
==============================================================================
Session Endpoints
==============================================================================

Operator selection and session lifecycle.

==============================================================================
"""

from fastapi import APIRouter, Depends

from imei_scanner.core.dependencies import get_active_session, get_service
from imei_scanner.schemas.common import MessageResponse
from imei_scanner.schemas.scan import SessionDetail, SessionResponse, SessionStart
from imei_scanner.scanning.session import ScanSession
from imei_scanner.services.scan_service import ScanService


router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post("", response_model=SessionResponse)
async def start_session(data: SessionStart, service: ScanService = Depends(get_service)):
    """Start a session for the selected operator."""
    session = service.start_session(data.user)
    return SessionResponse(session=SessionDetail.from_session(session))


@router.get("/current", response_model=SessionResponse)
async def current_session(session: ScanSession = Depends(get_active_session)):
    """Get the active session."""
    return SessionResponse(session=SessionDetail.from_session(session))


@router.delete("/current", response_model=MessageResponse)
async def end_session(service: ScanService = Depends(get_service)):
    """End the active session; recorded scans are kept."""
    session_id = service.end_session()
    if session_id is None:
        return MessageResponse(message="No active session")
    return MessageResponse(message=f"Session {session_id} ended")
