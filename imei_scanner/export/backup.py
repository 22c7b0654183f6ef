"""
==============================================================================
Backup Module
==============================================================================

JSON backup and restore of a scan session.

Backup Layout:
--------------
    {
      "timestamp": "2024-01-15T10:30:45.123Z",
      "version": "1.0",
      "scan_data": [ <ScanRecord dicts> ],
      "settings": { ... },
      "statistics": {"total_scans": 3, "duplicate_count": 1, "error_count": 0}
    }

Restores also accept the camelCase "scanData" key of older backups.

==============================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List

from imei_scanner.core import exceptions
from imei_scanner.scanning.session import ScanSession

from .csv_exporter import iso_timestamp


BACKUP_VERSION = "1.0"


def build_backup(session: ScanSession, settings: Dict[str, Any], now: int) -> Dict[str, Any]:
    """
    Snapshot a session for download.

    Args:
        session: Session to back up
        settings: Public settings view
        now: Backup time in epoch milliseconds
    """
    return {
        "timestamp": iso_timestamp(now),
        "version": BACKUP_VERSION,
        "session_id": session.session_id,
        "user": session.user,
        "scan_data": session.log.to_dicts(),
        "settings": settings,
        "statistics": {
            "total_scans": session.total_scans,
            "duplicate_count": session.duplicate_count,
            "error_count": session.error_count,
        },
    }


def backup_filename(now: int) -> str:
    """Download file name for a backup taken at the given time."""
    return f"imei_scanner_backup_{iso_timestamp(now)[:10]}.json"


def extract_records(backup: Any) -> List[Any]:
    """
    Pull the serialized records out of a backup document.

    Individual records are validated later, one by one, by ScanLog.load.

    Raises:
        AppException: INVALID_BACKUP if the document has no record list
    """
    if not isinstance(backup, dict):
        raise exceptions.invalid_backup("document must be a JSON object")

    records = backup.get("scan_data", backup.get("scanData"))
    if records is None:
        raise exceptions.invalid_backup("missing 'scan_data'")
    if not isinstance(records, list):
        raise exceptions.invalid_backup("'scan_data' must be a list")

    return records
