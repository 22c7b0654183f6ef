"""
==============================================================================
Scan Log Module
==============================================================================

Ordered, thread-safe collection of accepted scan records for a session.

Invariants:
-----------
- Insertion order is detection order
- No two records share an id
- Texts are NOT unique: duplicate suppression happens before append

Concurrency:
------------
A single re-entrant lock guards every mutation and every snapshot read, so
readers never observe a partially applied append or delete.

==============================================================================
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, Iterator, List, Optional

from imei_scanner.core.exceptions import DuplicateIdError, MalformedRecordError

from .models import LoadReport, ScanRecord


# Module logger
logger = logging.getLogger(__name__)


class ScanLog:
    """
    Session scan log.

    Example:
        >>> log = ScanLog()
        >>> log.append(record)
        >>> log.recent(25)
        >>> log.delete_by_id(record.id)
        True
    """

    def __init__(self, records: Optional[Iterable[ScanRecord]] = None) -> None:
        self._lock = threading.RLock()
        self._records: List[ScanRecord] = []
        self._ids: set = set()

        for record in records or ():
            self.append(record)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def append(self, record: ScanRecord) -> None:
        """
        Add a record at the end of the log.

        Raises:
            DuplicateIdError: If a record with the same id is present
        """
        with self._lock:
            if record.id in self._ids:
                raise DuplicateIdError(record.id)
            self._records.append(record)
            self._ids.add(record.id)

    def delete_by_id(self, record_id: str) -> bool:
        """
        Remove the record with the given id.

        Returns:
            True if a record was removed
        """
        with self._lock:
            if record_id not in self._ids:
                return False
            self._records = [r for r in self._records if r.id != record_id]
            self._ids.discard(record_id)
            return True

    def clear(self) -> None:
        """Remove every record."""
        with self._lock:
            self._records.clear()
            self._ids.clear()

    # =========================================================================
    # QUERIES
    # =========================================================================

    def records(self) -> List[ScanRecord]:
        """Snapshot of all records in insertion order."""
        with self._lock:
            return list(self._records)

    def get(self, record_id: str) -> Optional[ScanRecord]:
        """Find a record by id."""
        with self._lock:
            for record in self._records:
                if record.id == record_id:
                    return record
            return None

    def valid_count(self) -> int:
        """Number of records whose checksum passed."""
        with self._lock:
            return sum(1 for r in self._records if r.checksum_valid)

    def recent(self, n: int) -> List[ScanRecord]:
        """
        Most recent records first.

        Records with equal timestamps keep their relative insertion order.

        Args:
            n: Maximum number of records

        Returns:
            Up to n records sorted by timestamp descending
        """
        if n <= 0:
            return []
        with self._lock:
            ordered = sorted(self._records, key=lambda r: r.timestamp, reverse=True)
        return ordered[:n]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[ScanRecord]:
        return iter(self.records())

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._ids

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_dicts(self) -> List[Dict[str, Any]]:
        """Serialize all records for persistence or export."""
        return [record.to_dict() for record in self.records()]

    def load(self, items: Iterable[Any]) -> LoadReport:
        """
        Append previously serialized records.

        Malformed entries and entries whose id is already present are
        skipped; the rest are appended in order.

        Args:
            items: Serialized records (dicts)

        Returns:
            LoadReport with loaded/skipped counts and skip reasons
        """
        report = LoadReport()

        for index, item in enumerate(items):
            try:
                record = ScanRecord.from_dict(item)
                self.append(record)
            except MalformedRecordError as e:
                report.skipped += 1
                report.errors.append(f"#{index}: {e.reason}")
                logger.warning(f"Skipping malformed record #{index}: {e.reason}")
                continue
            except DuplicateIdError as e:
                report.skipped += 1
                report.errors.append(f"#{index}: duplicate id {e.record_id}")
                logger.warning(f"Skipping record #{index} with duplicate id {e.record_id}")
                continue

            report.loaded += 1

        if report.loaded or report.skipped:
            logger.info(f"Loaded {report.loaded} records, skipped {report.skipped}")

        return report

    def __repr__(self) -> str:
        return f"ScanLog(records={len(self)})"
