"""
==============================================================================
Scanning Package - Deduplication & Scan Log
==============================================================================

Turns classified barcodes into session scan records.

Classes:
--------
- Detection, ScanRecord, ScanOutcome, LoadReport: Pydantic models
- ScanRecordFactory: Record creation with injectable id/clock
- ScanLog: Thread-safe ordered record collection
- ScanSession: Session context running the scan pipeline

Functions:
----------
- is_duplicate: Duplicate policy check

==============================================================================
"""

from .models import Detection, LoadReport, Region, ScanOutcome, ScanRecord, ScanStatus
from .duplicate_guard import is_duplicate
from .record_factory import ScanRecordFactory, epoch_millis, new_record_id
from .scan_log import ScanLog
from .session import ScanSession

__all__ = [
    "Detection",
    "LoadReport",
    "Region",
    "ScanOutcome",
    "ScanRecord",
    "ScanStatus",
    "is_duplicate",
    "ScanRecordFactory",
    "epoch_millis",
    "new_record_id",
    "ScanLog",
    "ScanSession",
]
