"""
==============================================================================
Scan Service Module
==============================================================================

Service layer owning the active scan session.

This module implements:
- ScanService: Session lifecycle, detection intake, persistence,
  export, backup/restore and spreadsheet sync
- Module-level singleton management (get/init_scan_service)

Flow:
-----

    ┌──────────────┐   detections   ┌──────────────┐   accepted   ┌────────────────┐
    │ REST / WS    │ ─────────────▶ │ ScanSession  │ ───────────▶ │ ScanRepository │
    └──────────────┘                └──────────────┘              └────────────────┘
                                           │ auto_sync
                                           ▼
                                    ┌──────────────────┐
                                    │ SheetsSyncClient │
                                    └──────────────────┘

Persisted records are carried into every new session, so duplicate
blocking spans operator changes until the log is cleared.

==============================================================================
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import httpx

from imei_scanner.barcodes.classifier import BarcodeClassifier
from imei_scanner.barcodes.models import ClassificationResult
from imei_scanner.config.settings import Settings
from imei_scanner.core import exceptions
from imei_scanner.db.repository import ScanRepository
from imei_scanner.export.backup import build_backup, extract_records
from imei_scanner.export.csv_exporter import export_filename, generate_csv
from imei_scanner.export.sync import SheetsSyncClient, SyncError
from imei_scanner.scanning.models import Detection, LoadReport, ScanOutcome, ScanRecord
from imei_scanner.scanning.record_factory import ScanRecordFactory
from imei_scanner.scanning.scan_log import ScanLog
from imei_scanner.scanning.session import ScanSession


# Module logger
logger = logging.getLogger(__name__)


class ScanService:
    """
    Service for scan intake and session management.

    Attributes:
        _settings: Application settings
        _repository: Scan record persistence
        _factory: Record factory shared by all sessions
        _session: Active session (None until a user is selected)

    Example:
        >>> service = ScanService(settings, repository)
        >>> service.start_session("alice")
        >>> outcomes = service.submit([Detection(text="036000291452")])
        >>> service.statistics()["session_scans"]
        1
    """

    def __init__(
        self,
        settings: Settings,
        repository: ScanRepository,
        factory: Optional[ScanRecordFactory] = None,
        sync_transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._factory = factory or ScanRecordFactory()
        self._classifier = BarcodeClassifier()
        self._sync_transport = sync_transport
        self._lock = threading.RLock()
        self._session: Optional[ScanSession] = None

        self.synced_count = 0
        self.last_sync_status = "idle"

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def current_session(self) -> Optional[ScanSession]:
        return self._session

    def require_session(self) -> ScanSession:
        """
        Get the active session.

        Raises:
            AppException: SESSION_NOT_STARTED if no user has been selected
        """
        session = self._session
        if session is None:
            raise exceptions.session_not_started()
        return session

    def start_session(self, user: Optional[str] = None) -> ScanSession:
        """
        Start a session for an operator, carrying over persisted records.

        Args:
            user: Operator name (settings default when omitted)

        Returns:
            The new active session
        """
        user = (user or self._settings.default_user).strip() or self._settings.default_user

        log = ScanLog()
        report = log.load(self._repository.load_all())
        if report.skipped:
            logger.warning(f"Skipped {report.skipped} unreadable persisted records")

        with self._lock:
            self._session = ScanSession(user, classifier=self._classifier, factory=self._factory, log=log)

        logger.info(f"Session {self._session.session_id} started with {report.loaded} records")
        return self._session

    def ensure_session(self, user: Optional[str] = None) -> ScanSession:
        """Return the active session, starting one if needed or if the user changed."""
        session = self._session
        if session is None or (user and session.user != user):
            return self.start_session(user)
        return session

    def end_session(self) -> Optional[str]:
        """
        End the active session. Persisted records are kept.

        Returns:
            Id of the ended session, or None
        """
        with self._lock:
            session, self._session = self._session, None

        if session is None:
            return None

        logger.info(f"Session {session.session_id} ended")
        return session.session_id

    # =========================================================================
    # INTAKE
    # =========================================================================

    def classify(self, text: str) -> ClassificationResult:
        """Classify text without recording it."""
        return self._classifier.classify(text)

    def submit(self, detections: List[Detection]) -> List[ScanOutcome]:
        """
        Run detections through the pipeline and persist accepted records.

        Args:
            detections: Decoder output for one frame or batch

        Returns:
            One outcome per detection, in order

        Raises:
            Exception: Whatever the repository raised; the batch is rolled
                back out of the session log first
        """
        session = self.require_session()
        outcomes = session.process_many(detections, self._settings.duplicate_handling)

        accepted = [o.record for o in outcomes if o.record is not None]
        if accepted:
            try:
                self._repository.add_many(accepted)
            except Exception:
                # Unpersisted records must not stay in the log and block rescans
                for record in accepted:
                    session.delete(record.id)
                logger.error(f"Failed to persist {len(accepted)} scan record(s); removed from session log")
                raise

        return outcomes

    def record_error(self) -> None:
        """Count a failed decode attempt on the active session."""
        session = self._session
        if session is not None:
            session.record_error()

    def should_auto_sync(self, outcomes: List[ScanOutcome]) -> bool:
        """Auto-sync runs after batches that accepted at least one record."""
        return (
            self._settings.auto_sync
            and self._settings.sync_enabled
            and any(o.accepted for o in outcomes)
        )

    # =========================================================================
    # LOG MANAGEMENT
    # =========================================================================

    def records(self) -> List[ScanRecord]:
        """All records of the active session in detection order."""
        return self.require_session().log.records()

    def recent(self, limit: Optional[int] = None) -> List[ScanRecord]:
        """Most recent records first."""
        limit = limit if limit is not None else self._settings.recent_limit
        return self.require_session().log.recent(limit)

    def delete(self, record_id: str) -> None:
        """
        Delete one record from the log and from storage.

        Raises:
            AppException: RECORD_NOT_FOUND if the id is unknown
        """
        session = self.require_session()
        if not session.delete(record_id):
            raise exceptions.record_not_found(record_id)

        self._repository.delete(record_id)
        logger.info(f"Deleted scan record {record_id}")

    def clear(self) -> int:
        """
        Clear the session log, its counters and persisted records.

        Returns:
            Number of records removed
        """
        session = self.require_session()
        removed = len(session.log)
        session.clear()
        self._repository.clear()
        return removed

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def storage_usage(self) -> int:
        """Percentage of the storage budget used by the serialized log."""
        session = self._session
        if session is None:
            return 0

        used_kb = len(json.dumps(session.log.to_dicts())) / 1024
        return round(used_kb / self._settings.max_storage_kb * 100)

    def statistics(self) -> Dict[str, Any]:
        """Dashboard counters for the active session."""
        stats = self.require_session().statistics()
        stats["cloud_synced"] = self.synced_count
        stats["storage_used_percent"] = self.storage_usage()
        return stats

    # =========================================================================
    # EXPORT / BACKUP
    # =========================================================================

    def export_csv(self) -> Tuple[str, str]:
        """
        Build the CSV export of the active session.

        Returns:
            Tuple of (filename, csv_content)

        Raises:
            AppException: NOTHING_TO_EXPORT when the log is empty
        """
        records = self.records()
        if not records:
            raise exceptions.nothing_to_export()

        logger.info(f"Exported {len(records)} records to CSV")
        return export_filename(), generate_csv(records)

    def save_csv(self) -> Path:
        """
        Write the CSV export into the configured export directory.

        Returns:
            Path of the written file
        """
        filename, content = self.export_csv()
        path = self._settings.export_path / filename
        path.write_text(content, encoding="utf-8")

        logger.info(f"Saved CSV export to {path}")
        return path

    def backup(self) -> Dict[str, Any]:
        """JSON backup of the active session."""
        session = self.require_session()
        return build_backup(session, self._settings.public_view(), self._factory.now())

    def restore(self, document: Any) -> LoadReport:
        """
        Load records from a backup into the active session.

        Malformed records and ids already present are skipped.

        Raises:
            AppException: INVALID_BACKUP if the document has no record list
        """
        session = self.require_session()
        items = extract_records(document)

        known_ids = {record.id for record in session.log.records()}
        report = session.log.load(items)

        restored = [r for r in session.log.records() if r.id not in known_ids]
        self._repository.add_many(restored)

        logger.info(f"Restored {report.loaded} records ({report.skipped} skipped)")
        return report

    # =========================================================================
    # SYNC
    # =========================================================================

    async def sync(self) -> int:
        """
        Push the whole session log to the spreadsheet endpoint.

        Returns:
            Number of records synced

        Raises:
            AppException: SYNC_NOT_CONFIGURED, NOTHING_TO_EXPORT or SYNC_FAILED
        """
        if not self._settings.sync_enabled:
            raise exceptions.sync_not_configured()

        records = self.records()
        if not records:
            raise exceptions.nothing_to_export()

        client = SheetsSyncClient(
            self._settings.google_sheets_url,
            self._settings.sheet_name,
            timeout=self._settings.sync_timeout_seconds,
            transport=self._sync_transport,
        )

        self.last_sync_status = "syncing"
        try:
            count = await client.push(records)
        except SyncError as e:
            self.last_sync_status = "error"
            logger.error(f"Sync failed: {e}")
            raise exceptions.sync_failed(str(e)) from e

        self.synced_count = count
        self.last_sync_status = "synced"
        return count

    async def sync_in_background(self) -> None:
        """Fire-and-forget sync; failures are logged and reflected in status."""
        try:
            await self.sync()
        except exceptions.AppException as e:
            logger.warning(f"Background sync skipped: {e.message}")


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

_service_instance: Optional[ScanService] = None


def get_scan_service() -> Optional[ScanService]:
    """Get the global scan service instance."""
    return _service_instance


def init_scan_service(settings: Settings, repository: ScanRepository, **kwargs) -> ScanService:
    """
    Initialize the global scan service instance.

    Args:
        settings: Application settings
        repository: Scan record persistence

    Returns:
        ScanService instance
    """
    global _service_instance
    _service_instance = ScanService(settings, repository, **kwargs)
    return _service_instance
