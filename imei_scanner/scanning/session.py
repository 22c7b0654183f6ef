"""
==============================================================================
Scan Session Module
==============================================================================

Explicit session context for one operator's scanning run.

Pipeline (once per detection):
------------------------------

    Detection ──▶ classify ──▶ valid? ──no──▶ REJECTED
                                  │
                                 yes
                                  ▼
                            is_duplicate ──yes──▶ DUPLICATE (counted)
                                  │
                                  no
                                  ▼
                         create record ──▶ append ──▶ ACCEPTED

The duplicate check and the append run under one session lock. The API
routes and the WebSocket handler run on the event loop, so the lock only
matters for callers that drive a session from several threads; two such
threads processing the same text cannot both be accepted under BLOCK.

==============================================================================
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from imei_scanner.barcodes.classifier import BarcodeClassifier
from imei_scanner.config.settings import DuplicateHandling

from .duplicate_guard import is_duplicate
from .models import Detection, ScanOutcome, ScanStatus
from .record_factory import ScanRecordFactory
from .scan_log import ScanLog


# Module logger
logger = logging.getLogger(__name__)


class ScanSession:
    """
    Scanning session for one operator.

    Attributes:
        user: Operator name
        session_id: "<user>_<start epoch ms>"
        started_at: Session start in epoch milliseconds
        log: Accepted records
        duplicate_count: Detections dropped as duplicates
        error_count: Decode failures reported by the adapter
        total_scans: Records accepted since the last clear

    Example:
        >>> session = ScanSession("alice")
        >>> outcome = session.process(Detection(text="036000291452"), DuplicateHandling.BLOCK)
        >>> outcome.status
        <ScanStatus.ACCEPTED: 'accepted'>
    """

    def __init__(
        self,
        user: str,
        classifier: Optional[BarcodeClassifier] = None,
        factory: Optional[ScanRecordFactory] = None,
        log: Optional[ScanLog] = None,
        started_at: Optional[int] = None
    ) -> None:
        self._lock = threading.RLock()
        self._classifier = classifier or BarcodeClassifier()
        self._factory = factory or ScanRecordFactory()

        self.user = user
        self.started_at = started_at if started_at is not None else self._factory.now()
        self.session_id = f"{user}_{self.started_at}"
        self.log = log if log is not None else ScanLog()

        self.duplicate_count = 0
        self.error_count = 0
        self.total_scans = 0
        self.scan_started_at: Optional[int] = None

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def process(self, detection: Detection, policy: DuplicateHandling) -> ScanOutcome:
        """
        Run one detection through classify, duplicate check, create, append.

        Args:
            detection: Decoder output
            policy: Duplicate handling snapshot for this cycle

        Returns:
            ScanOutcome describing what happened
        """
        classification = self._classifier.classify(detection.text)

        if not classification.is_valid:
            logger.debug(f"Rejected {classification.text!r}: unrecognized shape")
            return ScanOutcome(status=ScanStatus.REJECTED, classification=classification)

        with self._lock:
            if self.scan_started_at is None:
                self.scan_started_at = self._factory.now()

            if is_duplicate(classification.text, self.log.records(), policy):
                self.duplicate_count += 1
                logger.warning(f"Duplicate detected: {classification.text}")
                return ScanOutcome(status=ScanStatus.DUPLICATE, classification=classification)

            record = self._factory.create(classification, detection, self.user, self.session_id)
            self.log.append(record)
            self.total_scans += 1

        logger.info(
            f"Accepted {record.type.value} {record.text} "
            f"(vendor={record.vendor}, checksum={'ok' if record.checksum_valid else 'bad'})"
        )
        return ScanOutcome(status=ScanStatus.ACCEPTED, classification=classification, record=record)

    def process_many(self, detections: List[Detection], policy: DuplicateHandling) -> List[ScanOutcome]:
        """Process detections in order; later ones see earlier acceptances."""
        return [self.process(detection, policy) for detection in detections]

    def record_error(self) -> None:
        """Count a failed decode attempt."""
        with self._lock:
            self.error_count += 1

    # =========================================================================
    # LOG MANAGEMENT
    # =========================================================================

    def delete(self, record_id: str) -> bool:
        """Delete one record by id."""
        return self.log.delete_by_id(record_id)

    def clear(self) -> None:
        """Empty the log and reset counters."""
        with self._lock:
            self.log.clear()
            self.duplicate_count = 0
            self.error_count = 0
            self.total_scans = 0
            self.scan_started_at = None
        logger.info(f"Session {self.session_id} cleared")

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def scan_rate(self, now: Optional[int] = None) -> int:
        """
        Records per minute since the first detection was processed.

        Returns:
            Rounded rate, 0 before anything was scanned
        """
        count = len(self.log)
        if self.scan_started_at is None or count == 0:
            return 0

        now = now if now is not None else self._factory.now()
        elapsed_minutes = (now - self.scan_started_at) / 60_000
        if elapsed_minutes <= 0:
            return 0
        return round(count / elapsed_minutes)

    def statistics(self, now: Optional[int] = None) -> Dict[str, int]:
        """Counters shown on the operator dashboard."""
        with self._lock:
            return {
                "session_scans": len(self.log),
                "valid_scans": self.log.valid_count(),
                "duplicates_blocked": self.duplicate_count,
                "errors": self.error_count,
                "scan_rate_per_minute": self.scan_rate(now),
                "total_scans": self.total_scans,
            }

    def __repr__(self) -> str:
        return f"ScanSession(session_id={self.session_id!r}, records={len(self.log)})"
