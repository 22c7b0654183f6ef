"""
==============================================================================
Export Package
==============================================================================

Read-only projections of the scan log.

Modules:
--------
- csv_exporter: CSV document for spreadsheet import
- sync: Spreadsheet row projection and HTTP sync client
- backup: JSON backup and restore helpers

==============================================================================
"""

from .csv_exporter import CSV_HEADERS, export_filename, generate_csv, iso_timestamp
from .sync import SheetsSyncClient, SyncError, build_sync_payload, to_sync_row
from .backup import BACKUP_VERSION, backup_filename, build_backup, extract_records

__all__ = [
    "CSV_HEADERS",
    "export_filename",
    "generate_csv",
    "iso_timestamp",
    "SheetsSyncClient",
    "SyncError",
    "build_sync_payload",
    "to_sync_row",
    "BACKUP_VERSION",
    "backup_filename",
    "build_backup",
    "extract_records",
]
