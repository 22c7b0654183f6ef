"""
==============================================================================
Scan Service Tests
==============================================================================

Tests for session lifecycle, persistence, restore and sync through the
service layer.

==============================================================================
"""

import asyncio

import httpx
import pytest

from imei_scanner.config.settings import DuplicateHandling, Settings
from imei_scanner.core.exceptions import AppException
from imei_scanner.db.repository import ScanRepository
from imei_scanner.scanning import Detection, ScanRecordFactory, ScanStatus
from imei_scanner.services.scan_service import ScanService


def detections(*texts):
    return [Detection(text=text) for text in texts]


class TestSessionLifecycle:
    """Tests for starting and ending sessions."""

    def test_no_session_initially(self, service: ScanService):
        """Test operations need an active session."""
        assert service.current_session is None
        with pytest.raises(AppException) as exc_info:
            service.submit(detections("036000291452"))
        assert exc_info.value.code == "SESSION_NOT_STARTED"

    def test_start_session(self, service: ScanService, clock):
        """Test a session is created for the operator."""
        session = service.start_session("alice")
        assert service.current_session is session
        assert session.session_id == f"alice_{clock.now}"

    def test_default_user(self, service: ScanService):
        """Test the configured default operator is used when none is given."""
        assert service.start_session().user == "operator"
        assert service.start_session("   ").user == "operator"

    def test_ensure_session_switches_user(self, service: ScanService, clock):
        """Test a different user starts a new session."""
        first = service.ensure_session("alice")
        assert service.ensure_session("alice") is first

        clock.advance(1000)
        second = service.ensure_session("bob")
        assert second is not first
        assert second.user == "bob"

    def test_end_session(self, service: ScanService):
        """Test ending returns the id and clears the active session."""
        session = service.start_session("alice")
        assert service.end_session() == session.session_id
        assert service.current_session is None
        assert service.end_session() is None


class TestIntake:
    """Tests for submitting detections."""

    def test_accepted_records_persisted(self, service: ScanService, repository: ScanRepository):
        """Test accepted records are written to storage."""
        service.start_session("alice")
        outcomes = service.submit(detections("036000291452", "hello", "036000291452"))

        assert [o.status for o in outcomes] == [
            ScanStatus.ACCEPTED, ScanStatus.REJECTED, ScanStatus.DUPLICATE
        ]
        assert repository.count() == 1

    def test_records_carry_into_new_session(self, service: ScanService, clock):
        """Test a new session sees earlier records and blocks their texts."""
        service.start_session("alice")
        service.submit(detections("036000291452"))

        clock.advance(1000)
        session = service.start_session("bob")

        assert len(session.log) == 1
        outcomes = service.submit(detections("036000291452"))
        assert outcomes[0].status == ScanStatus.DUPLICATE

    def test_failed_persistence_rolls_back(self, service: ScanService, repository: ScanRepository, monkeypatch):
        """Test records that fail to persist leave the log and can be rescanned."""
        service.start_session("alice")

        def fail(records):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(repository, "add_many", fail)
        with pytest.raises(RuntimeError):
            service.submit(detections("036000291452"))

        assert service.records() == []

        monkeypatch.undo()
        outcomes = service.submit(detections("036000291452"))
        assert outcomes[0].status == ScanStatus.ACCEPTED
        assert repository.count() == 1

    def test_allow_policy_from_settings(
        self,
        repository: ScanRepository,
        factory: ScanRecordFactory,
        tmp_path
    ):
        """Test the configured policy is applied."""
        settings = Settings(
            _env_file=None,
            duplicate_handling="ALLOW",
            export_directory=str(tmp_path),
        )
        service = ScanService(settings, repository, factory=factory)
        service.start_session("alice")

        service.submit(detections("036000291452", "036000291452"))
        assert len(service.records()) == 2
        assert settings.duplicate_handling is DuplicateHandling.ALLOW

    def test_record_error_counted(self, service: ScanService):
        """Test decode failures show up in statistics."""
        service.record_error()
        service.start_session("alice")
        service.record_error()
        assert service.statistics()["errors"] == 1


class TestLogManagement:
    """Tests for delete, clear and listing."""

    def test_delete(self, service: ScanService, repository: ScanRepository):
        """Test delete removes from the log and from storage."""
        service.start_session("alice")
        record = service.submit(detections("036000291452"))[0].record

        service.delete(record.id)

        assert service.records() == []
        assert repository.count() == 0

    def test_delete_unknown(self, service: ScanService):
        """Test deleting an unknown id is an error."""
        service.start_session("alice")
        with pytest.raises(AppException) as exc_info:
            service.delete("missing")
        assert exc_info.value.status_code == 404

    def test_clear(self, service: ScanService, repository: ScanRepository):
        """Test clear empties log and storage."""
        service.start_session("alice")
        service.submit(detections("036000291452", "4006381333931"))

        assert service.clear() == 2
        assert service.records() == []
        assert repository.count() == 0

    def test_recent_uses_setting(self, service: ScanService, clock):
        """Test the default limit comes from settings."""
        service.start_session("alice")
        for index in range(30):
            clock.advance(1)
            service.submit(detections(f"{index:08d}"))

        recent = service.recent()
        assert len(recent) == 25
        assert recent[0].text == "00000029"


class TestStatistics:
    """Tests for service-level statistics."""

    def test_statistics(self, service: ScanService):
        """Test session counters plus sync and storage fields."""
        service.start_session("alice")
        service.submit(detections("036000291452", "036000291452"))

        stats = service.statistics()
        assert stats["session_scans"] == 1
        assert stats["duplicates_blocked"] == 1
        assert stats["cloud_synced"] == 0
        assert 0 <= stats["storage_used_percent"] <= 100

    def test_storage_usage_without_session(self, service: ScanService):
        """Test usage is zero before a session exists."""
        assert service.storage_usage() == 0


class TestExportAndBackup:
    """Tests for export, backup and restore."""

    def test_export_empty(self, service: ScanService):
        """Test exporting an empty log is refused."""
        service.start_session("alice")
        with pytest.raises(AppException) as exc_info:
            service.export_csv()
        assert exc_info.value.code == "NOTHING_TO_EXPORT"

    def test_export_csv(self, service: ScanService):
        """Test the export returns a dated file name and CSV content."""
        service.start_session("alice")
        service.submit(detections("036000291452"))

        filename, content = service.export_csv()
        assert filename.startswith("imei_upc_scan_")
        assert filename.endswith(".csv")
        assert '"UPC-A","036000291452","Product"' in content

    def test_save_csv(self, service: ScanService, settings: Settings):
        """Test the export is written into the export directory."""
        service.start_session("alice")
        service.submit(detections("036000291452"))

        path = service.save_csv()
        assert path.parent == settings.export_path
        assert "036000291452" in path.read_text(encoding="utf-8")

    def test_backup_restore_round_trip(self, service: ScanService, session_factory):
        """Test a backup restores into a fresh store."""
        service.start_session("alice")
        service.submit(detections("036000291452", "356938035643809"))
        backup = service.backup()

        service.clear()
        report = service.restore(backup)

        assert report.loaded == 2
        assert [r.text for r in service.records()] == ["036000291452", "356938035643809"]
        assert ScanRepository(session_factory).count() == 2

    def test_restore_skips_known_and_malformed(self, service: ScanService, repository: ScanRepository):
        """Test restoring twice and bad rows do not create duplicates."""
        service.start_session("alice")
        service.submit(detections("036000291452"))
        backup = service.backup()
        backup["scan_data"].append({"id": "broken"})

        report = service.restore(backup)

        assert report.loaded == 0
        assert report.skipped == 2
        assert repository.count() == 1


class TestSync:
    """Tests for spreadsheet sync."""

    def make_service(self, repository, factory, tmp_path, handler) -> ScanService:
        settings = Settings(
            _env_file=None,
            google_sheets_url="https://sheets.example.com/exec",
            export_directory=str(tmp_path),
        )
        return ScanService(
            settings,
            repository,
            factory=factory,
            sync_transport=httpx.MockTransport(handler),
        )

    def test_not_configured(self, service: ScanService):
        """Test sync without an endpoint is refused."""
        service.start_session("alice")
        with pytest.raises(AppException) as exc_info:
            asyncio.run(service.sync())
        assert exc_info.value.code == "SYNC_NOT_CONFIGURED"

    def test_sync_success(self, repository, factory, tmp_path):
        """Test a successful push updates the synced count."""
        service = self.make_service(
            repository, factory, tmp_path, lambda request: httpx.Response(200)
        )
        service.start_session("alice")
        service.submit(detections("036000291452", "356938035643809"))

        assert asyncio.run(service.sync()) == 2
        assert service.synced_count == 2
        assert service.last_sync_status == "synced"

    def test_sync_failure(self, repository, factory, tmp_path):
        """Test a failed push raises and marks the status."""
        service = self.make_service(
            repository, factory, tmp_path, lambda request: httpx.Response(503)
        )
        service.start_session("alice")
        service.submit(detections("036000291452"))

        with pytest.raises(AppException) as exc_info:
            asyncio.run(service.sync())
        assert exc_info.value.code == "SYNC_FAILED"
        assert service.last_sync_status == "error"

    def test_background_sync_swallows_failure(self, repository, factory, tmp_path):
        """Test background sync reports failure only through status."""
        service = self.make_service(
            repository, factory, tmp_path, lambda request: httpx.Response(500)
        )
        service.start_session("alice")
        service.submit(detections("036000291452"))

        asyncio.run(service.sync_in_background())
        assert service.last_sync_status == "error"

    def test_should_auto_sync(self, repository, factory, tmp_path):
        """Test auto-sync triggers only when something was accepted."""
        service = self.make_service(
            repository, factory, tmp_path, lambda request: httpx.Response(200)
        )
        service.start_session("alice")

        assert service.should_auto_sync(service.submit(detections("036000291452"))) is True
        assert service.should_auto_sync(service.submit(detections("036000291452"))) is False
        assert service.should_auto_sync(service.submit(detections("junk"))) is False
