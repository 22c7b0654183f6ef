"""
==============================================================================
Spreadsheet Sync Module
==============================================================================

Projection of scan records onto spreadsheet rows and the HTTP client that
posts them to a Google Sheets web-app endpoint.

Field Routing:
--------------
- imei_meid: record text when the type is IMEI or MEID, else ""
- upc:       record text when the type starts with UPC or EAN, else ""

Payload:
--------
    {
      "action": "addData",
      "sheetName": "<sheet>",
      "data": [ {timestamp, imei_meid, upc, vendor, user,
                 session_id, barcode_type}, ... ]
    }

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from imei_scanner.scanning.models import ScanRecord

from .csv_exporter import iso_timestamp


# Module logger
logger = logging.getLogger(__name__)


def to_sync_row(record: ScanRecord) -> Dict[str, str]:
    """
    Project one record onto a sync row.

    Pure function of the record fields.
    """
    return {
        "timestamp": iso_timestamp(record.timestamp),
        "imei_meid": record.text if record.type.is_device_id else "",
        "upc": record.text if record.type.is_product_code else "",
        "vendor": record.vendor,
        "user": record.user,
        "session_id": record.session_id,
        "barcode_type": record.type.value,
    }


def build_sync_payload(records: Iterable[ScanRecord], sheet_name: str) -> Dict[str, Any]:
    """Wrap projected rows in the web-app request envelope."""
    return {
        "action": "addData",
        "sheetName": sheet_name,
        "data": [to_sync_row(record) for record in records],
    }


class SyncError(Exception):
    """Raised when the sync endpoint rejects or cannot receive a payload."""


class SheetsSyncClient:
    """
    Fire-and-forget client for the spreadsheet endpoint.

    Attributes:
        url: Web-app endpoint
        sheet_name: Target sheet
        timeout: Request timeout in seconds

    Example:
        >>> client = SheetsSyncClient("https://script.google.com/macros/s/x/exec", "intake")
        >>> await client.push(records)
        12
    """

    def __init__(
        self,
        url: str,
        sheet_name: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.url = url
        self.sheet_name = sheet_name
        self.timeout = timeout
        self._transport = transport

    async def push(self, records: List[ScanRecord]) -> int:
        """
        POST all records to the endpoint.

        Args:
            records: Records to send

        Returns:
            Number of records sent

        Raises:
            SyncError: On transport errors or non-2xx responses
        """
        payload = build_sync_payload(records, self.sheet_name)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SyncError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SyncError(str(e) or e.__class__.__name__) from e

        logger.info(f"Synced {len(records)} records to sheet '{self.sheet_name}'")
        return len(records)
