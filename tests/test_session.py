"""
==============================================================================
Scan Session Tests
==============================================================================

Tests for the per-detection pipeline, counters and statistics.

==============================================================================
"""

import threading

import pytest

from imei_scanner.barcodes import BarcodeClassifier
from imei_scanner.config.settings import DuplicateHandling
from imei_scanner.scanning import Detection, ScanRecordFactory, ScanSession, ScanStatus


BLOCK = DuplicateHandling.BLOCK
ALLOW = DuplicateHandling.ALLOW


@pytest.fixture
def session(factory: ScanRecordFactory) -> ScanSession:
    return ScanSession("alice", classifier=BarcodeClassifier(), factory=factory)


class TestSessionIdentity:
    """Tests for session construction."""

    def test_session_id_from_user_and_start(self, session: ScanSession, clock):
        """Test the id combines user and start time."""
        assert session.session_id == f"alice_{clock.now}"
        assert session.started_at == clock.now

    def test_explicit_start(self, factory: ScanRecordFactory):
        """Test an explicit start time is used for the id."""
        session = ScanSession("bob", factory=factory, started_at=42)
        assert session.session_id == "bob_42"


class TestPipeline:
    """Tests for processing detections."""

    def test_accepts_valid_code(self, session: ScanSession):
        """Test a recognized code is recorded."""
        outcome = session.process(Detection(text="036000291452"), BLOCK)

        assert outcome.status == ScanStatus.ACCEPTED
        assert outcome.accepted is True
        assert outcome.record.user == "alice"
        assert outcome.record.session_id == session.session_id
        assert len(session.log) == 1
        assert session.total_scans == 1

    def test_rejects_unknown(self, session: ScanSession):
        """Test unrecognized text is dropped without counting."""
        outcome = session.process(Detection(text="hello world"), BLOCK)

        assert outcome.status == ScanStatus.REJECTED
        assert outcome.record is None
        assert len(session.log) == 0
        assert session.duplicate_count == 0
        assert session.error_count == 0

    def test_blocks_duplicate(self, session: ScanSession):
        """Test a repeated text is counted, not recorded."""
        session.process(Detection(text="036000291452"), BLOCK)
        outcome = session.process(Detection(text="036000291452"), BLOCK)

        assert outcome.status == ScanStatus.DUPLICATE
        assert len(session.log) == 1
        assert session.duplicate_count == 1

    def test_duplicate_after_trimming(self, session: ScanSession):
        """Test whitespace variants of one code are duplicates."""
        session.process(Detection(text="036000291452"), BLOCK)
        outcome = session.process(Detection(text="  036000291452 "), BLOCK)
        assert outcome.status == ScanStatus.DUPLICATE

    def test_allow_records_repeats(self, session: ScanSession):
        """Test ALLOW records every detection."""
        session.process(Detection(text="036000291452"), ALLOW)
        session.process(Detection(text="036000291452"), ALLOW)

        assert len(session.log) == 2
        assert session.duplicate_count == 0

    def test_same_frame_duplicates(self, session: ScanSession):
        """Test later detections in one batch see earlier acceptances."""
        outcomes = session.process_many(
            [Detection(text="036000291452"), Detection(text="036000291452"), Detection(text="x")],
            BLOCK,
        )
        assert [o.status for o in outcomes] == [ScanStatus.ACCEPTED, ScanStatus.DUPLICATE, ScanStatus.REJECTED]

    def test_bad_checksum_recorded(self, session: ScanSession):
        """Test a checksum failure is recorded with the flag cleared."""
        outcome = session.process(Detection(text="490154203237510"), BLOCK)
        assert outcome.accepted
        assert outcome.record.checksum_valid is False

    def test_concurrent_same_text_accepted_once(self, session: ScanSession):
        """Test racing threads cannot record the same text twice under BLOCK."""
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            session.process(Detection(text="4006381333931"), BLOCK)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(session.log) == 1
        assert session.duplicate_count == 7


class TestLogManagement:
    """Tests for delete and clear."""

    def test_delete_allows_rescan(self, session: ScanSession):
        """Test a deleted code can be scanned again."""
        outcome = session.process(Detection(text="036000291452"), BLOCK)
        assert session.delete(outcome.record.id) is True

        again = session.process(Detection(text="036000291452"), BLOCK)
        assert again.accepted

    def test_clear_resets_counters(self, session: ScanSession):
        """Test clear empties the log and zeroes counters."""
        session.process(Detection(text="036000291452"), BLOCK)
        session.process(Detection(text="036000291452"), BLOCK)
        session.record_error()

        session.clear()

        stats = session.statistics()
        assert stats["session_scans"] == 0
        assert stats["duplicates_blocked"] == 0
        assert stats["errors"] == 0
        assert stats["total_scans"] == 0


class TestStatistics:
    """Tests for dashboard counters."""

    def test_counts(self, session: ScanSession):
        """Test counters reflect processed detections."""
        session.process(Detection(text="490154203237518"), BLOCK)
        session.process(Detection(text="490154203237510"), BLOCK)
        session.process(Detection(text="490154203237518"), BLOCK)
        session.record_error()

        stats = session.statistics()
        assert stats["session_scans"] == 2
        assert stats["valid_scans"] == 1
        assert stats["duplicates_blocked"] == 1
        assert stats["errors"] == 1
        assert stats["total_scans"] == 2

    def test_scan_rate(self, session: ScanSession, clock):
        """Test rate is records per minute since the first detection."""
        for text in ("036000291452", "4006381333931", "356938035643809"):
            session.process(Detection(text=text), BLOCK)

        clock.advance(60_000)
        assert session.scan_rate() == 3

        clock.advance(60_000)
        assert session.scan_rate() == 2

    def test_scan_rate_before_scanning(self, session: ScanSession):
        """Test rate is zero before anything was accepted."""
        assert session.scan_rate() == 0

    def test_scan_rate_no_elapsed_time(self, session: ScanSession):
        """Test rate is zero when no time has passed."""
        session.process(Detection(text="036000291452"), BLOCK)
        assert session.scan_rate() == 0
