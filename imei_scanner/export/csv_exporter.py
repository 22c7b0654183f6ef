"""
==============================================================================
CSV Export Module
==============================================================================

Spreadsheet-friendly export of the scan log.

Format:
-------
- Header: Timestamp, Type, Value, Vendor, User, Session ID, Checksum Valid
- Every field double-quoted, rows separated by "\\n"
- Timestamp as ISO-8601 UTC with milliseconds ("2024-01-15T10:30:45.123Z")
- Checksum rendered "Yes" / "No"

File Name:
----------
imei_upc_scan_{YYYY-MM-DD}.csv

==============================================================================
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from imei_scanner.scanning.models import ScanRecord


CSV_HEADERS = ["Timestamp", "Type", "Value", "Vendor", "User", "Session ID", "Checksum Valid"]


def iso_timestamp(epoch_ms: int) -> str:
    """Render epoch milliseconds as ISO-8601 UTC with a trailing Z."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def record_to_row(record: ScanRecord) -> List[str]:
    """Project one record onto the CSV columns."""
    return [
        iso_timestamp(record.timestamp),
        record.type.value,
        record.text,
        record.vendor,
        record.user,
        record.session_id,
        "Yes" if record.checksum_valid else "No",
    ]


def generate_csv(records: Iterable[ScanRecord]) -> str:
    """
    Build the CSV document for a set of records.

    Args:
        records: Records in export order

    Returns:
        CSV text without a trailing newline
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(record_to_row(record))

    return buffer.getvalue().rstrip("\n")


def export_filename(today: Optional[datetime] = None) -> str:
    """Download file name for an export made on the given day."""
    today = today or datetime.now(timezone.utc)
    return f"imei_upc_scan_{today.strftime('%Y-%m-%d')}.csv"
