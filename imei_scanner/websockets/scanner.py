"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Real-time barcode scanning via WebSocket connection.

Protocol:
---------
1. Client connects with the operator name as query parameter (?user=)
2. Server starts or resumes that operator's session and sends "ready"
3. Client sends frames as base64 ({"type": "frame", "frame": ...})
   or manual entries ({"type": "text", "text": ..., "format": ...})
4. Server answers with "detection" / "duplicate" / "error" messages
5. Client sends {"type": "stop"} to end the stream

==============================================================================
"""

import asyncio
import logging
from typing import List, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query

from imei_scanner.core.exceptions import AppException
from imei_scanner.scanner import BarcodeDecoder
from imei_scanner.scanning.models import Detection, ScanOutcome, ScanStatus
from imei_scanner.services.scan_service import ScanService, get_scan_service


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ScannerWebSocketHandler:
    """
    Handler for scanning WebSocket connections.

    Manages the lifecycle of a scanning stream including:
    - Session selection
    - Frame decoding
    - Detection intake and reporting
    - Auto-sync scheduling
    """

    def __init__(self, websocket: WebSocket, service: ScanService):
        self._websocket = websocket
        self._service = service
        self._decoder = BarcodeDecoder()
        self._sync_tasks: Set[asyncio.Task] = set()

    async def send_error(self, message: str, code: str = "ERROR") -> None:
        """Send error message to client."""
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def send_outcomes(self, outcomes: List[ScanOutcome], frame_id: Optional[int] = None) -> None:
        """Report accepted and duplicate outcomes. Rejected texts are not reported."""
        accepted = [o.record.to_dict() for o in outcomes if o.status == ScanStatus.ACCEPTED]
        duplicates = [o.classification.text for o in outcomes if o.status == ScanStatus.DUPLICATE]

        if accepted:
            await self._websocket.send_json({
                "type": "detection",
                "frame_id": frame_id,
                "records": accepted,
                "stats": self._service.statistics()
            })

        if duplicates:
            await self._websocket.send_json({
                "type": "duplicate",
                "frame_id": frame_id,
                "texts": duplicates
            })

    def schedule_sync(self, outcomes: List[ScanOutcome]) -> None:
        """Start a background sync when the batch accepted something."""
        if not self._service.should_auto_sync(outcomes):
            return

        task = asyncio.create_task(self._service.sync_in_background())
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_tasks.discard)

    async def submit(self, detections: List[Detection], frame_id: Optional[int] = None) -> None:
        """Run detections through the pipeline and report the result."""
        if not detections:
            return

        outcomes = self._service.submit(detections)
        self.schedule_sync(outcomes)
        await self.send_outcomes(outcomes, frame_id)

    async def handle_frame(self, data: dict, frame_id: int) -> None:
        """Handle frame message from client."""
        try:
            detections = self._decoder.decode_base64(data.get("frame") or "")
        except AppException as e:
            self._service.record_error()
            await self.send_error(e.message, e.code)
            return

        await self.submit(detections, frame_id)

    async def handle_text(self, data: dict) -> None:
        """Handle manual text entry from client."""
        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            await self.send_error("Text is required", "INVALID_MESSAGE")
            return

        detection = Detection(text=text, format=data.get("format") or "MANUAL")
        await self.submit([detection])

    async def run(self, user: Optional[str]) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Scanner WebSocket connected")

        session = self._service.ensure_session(user)
        await self._websocket.send_json({
            "type": "ready",
            "session_id": session.session_id,
            "user": session.user,
            "records": len(session.log)
        })

        try:
            frame_count = 0

            while True:
                data = await self._websocket.receive_json()
                message_type = data.get("type")

                if message_type == "frame":
                    frame_count += 1
                    await self.handle_frame(data, frame_count)

                elif message_type == "text":
                    await self.handle_text(data)

                elif message_type == "stop":
                    logger.info("🛑 Client requested stop")
                    break

                else:
                    await self.send_error(f"Unknown message type: {message_type}", "INVALID_MESSAGE")

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        except AppException as e:
            logger.warning(f"Scan stream stopped: {e.message}")
            await self.send_error(e.message, e.code)
        finally:
            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/scan")
async def websocket_scan(websocket: WebSocket, user: str = Query(None)):
    """Real-time barcode scanning via WebSocket."""
    service = get_scan_service()
    if service is None:
        await websocket.accept()
        await websocket.send_json({
            "type": "error",
            "code": "INTERNAL_ERROR",
            "message": "Scan service not initialized"
        })
        await websocket.close()
        return

    handler = ScannerWebSocketHandler(websocket, service)
    await handler.run(user)
