"""
==============================================================================
Scan Endpoints
==============================================================================

Endpoints for scan intake, the scan log, export, backup and sync.

==============================================================================
"""

from typing import Any, Optional
from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query
from fastapi.responses import JSONResponse, Response

from imei_scanner.core.dependencies import get_service
from imei_scanner.export.backup import backup_filename
from imei_scanner.scanning.models import Detection
from imei_scanner.scanning.record_factory import epoch_millis
from imei_scanner.schemas.common import MessageResponse
from imei_scanner.schemas.scan import (
    ClassifyRequest,
    ClassifyResponse,
    DetectionBatch,
    RestoreResponse,
    ScanListResponse,
    StatisticsResponse,
    SubmitResponse,
    SyncResponse,
)
from imei_scanner.services.scan_service import ScanService


router = APIRouter(prefix="/scans", tags=["Scans"])


class ScanController:
    """Controller for scan log operations."""

    def __init__(self, service: ScanService):
        self._service = service

    def submit(self, batch: DetectionBatch, background_tasks: BackgroundTasks) -> SubmitResponse:
        """Submit detections and schedule auto-sync when something was accepted."""
        outcomes = self._service.submit(batch.detections)

        if self._service.should_auto_sync(outcomes):
            background_tasks.add_task(self._service.sync_in_background)

        return SubmitResponse.from_outcomes(outcomes)

    def list_recent(self, limit: Optional[int]) -> ScanListResponse:
        """List recent scans, newest first."""
        scans = self._service.recent(limit)
        return ScanListResponse(total=len(self._service.records()), scans=scans)

    def get_stats(self) -> StatisticsResponse:
        """Get dashboard counters."""
        session = self._service.require_session()
        return StatisticsResponse(session_id=session.session_id, stats=self._service.statistics())

    def export_csv(self) -> Response:
        """Build the CSV download."""
        filename, content = self._service.export_csv()
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )

    def backup(self) -> JSONResponse:
        """Build the JSON backup download."""
        document = self._service.backup()
        return JSONResponse(
            content=document,
            headers={"Content-Disposition": f'attachment; filename="{backup_filename(epoch_millis())}"'}
        )

    def restore(self, document: Any) -> RestoreResponse:
        """Restore records from a backup document."""
        report = self._service.restore(document)
        return RestoreResponse(loaded=report.loaded, skipped=report.skipped, errors=report.errors)


# =============================================================================
# INTAKE
# =============================================================================

@router.post("/classify", response_model=ClassifyResponse)
async def classify_text(data: ClassifyRequest, service: ScanService = Depends(get_service)):
    """Classify a decoded text without recording it."""
    return ClassifyResponse(classification=service.classify(data.text))


@router.post("", response_model=SubmitResponse)
async def submit_detections(
    batch: DetectionBatch,
    background_tasks: BackgroundTasks,
    service: ScanService = Depends(get_service)
):
    """
    Submit decoder detections.

    Each detection is classified, checked for duplicates and recorded.
    Invalid texts are rejected silently; duplicates are counted.
    """
    return ScanController(service).submit(batch, background_tasks)


@router.post("/text", response_model=SubmitResponse)
async def submit_text(
    data: ClassifyRequest,
    background_tasks: BackgroundTasks,
    service: ScanService = Depends(get_service)
):
    """Submit a single manually entered text."""
    batch = DetectionBatch(detections=[Detection(text=data.text, format="MANUAL")])
    return ScanController(service).submit(batch, background_tasks)


# =============================================================================
# LOG
# =============================================================================

@router.get("", response_model=ScanListResponse)
async def list_scans(
    limit: Optional[int] = Query(None, ge=0, le=1000),
    service: ScanService = Depends(get_service)
):
    """List recent scans, newest first."""
    return ScanController(service).list_recent(limit)


@router.get("/stats", response_model=StatisticsResponse)
async def get_stats(service: ScanService = Depends(get_service)):
    """Get session statistics."""
    return ScanController(service).get_stats()


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_scan(record_id: str, service: ScanService = Depends(get_service)):
    """Delete a single scan record."""
    service.delete(record_id)
    return MessageResponse(message=f"Record {record_id} deleted")


@router.delete("", response_model=MessageResponse)
async def clear_scans(service: ScanService = Depends(get_service)):
    """Clear all scan records and reset counters."""
    removed = service.clear()
    return MessageResponse(message=f"Cleared {removed} records")


# =============================================================================
# EXPORT / BACKUP / SYNC
# =============================================================================

@router.get("/export")
async def export_csv(service: ScanService = Depends(get_service)):
    """Download the scan log as CSV."""
    return ScanController(service).export_csv()


@router.post("/export", response_model=MessageResponse)
async def save_export(service: ScanService = Depends(get_service)):
    """Write the CSV export into the server export directory."""
    path = service.save_csv()
    return MessageResponse(message=f"Saved {path.name}")


@router.get("/backup")
async def backup(service: ScanService = Depends(get_service)):
    """Download a JSON backup of the scan log."""
    return ScanController(service).backup()


@router.post("/restore", response_model=RestoreResponse)
async def restore(document: Any = Body(...), service: ScanService = Depends(get_service)):
    """Restore records from a JSON backup."""
    return ScanController(service).restore(document)


@router.post("/sync", response_model=SyncResponse)
async def sync(service: ScanService = Depends(get_service)):
    """Push the scan log to the configured spreadsheet endpoint."""
    count = await service.sync()
    return SyncResponse(synced=count, status=service.last_sync_status)
