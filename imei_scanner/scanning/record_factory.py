"""
==============================================================================
Scan Record Factory Module
==============================================================================

Builds immutable ScanRecords from a positive classification.

Id and clock sources are injectable so tests can produce deterministic
records; the defaults are uuid4 hex ids and the wall clock in epoch
milliseconds.

==============================================================================
"""

from __future__ import annotations

import time
import uuid
from typing import Callable, Optional

from imei_scanner.barcodes.models import ClassificationResult

from .models import Detection, ScanRecord


def new_record_id() -> str:
    """Generate a random 128-bit record id."""
    return uuid.uuid4().hex


def epoch_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class ScanRecordFactory:
    """
    Factory for scan records.

    Attributes:
        _id_factory: Callable returning a fresh record id
        _clock: Callable returning epoch milliseconds

    Example:
        >>> factory = ScanRecordFactory()
        >>> record = factory.create(result, detection, "alice", "alice_1700000000000")
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], int]] = None
    ) -> None:
        self._id_factory = id_factory or new_record_id
        self._clock = clock or epoch_millis

    def now(self) -> int:
        """Read the factory clock."""
        return self._clock()

    def create(
        self,
        classification: ClassificationResult,
        detection: Detection,
        user: str,
        session_id: str,
        now: Optional[int] = None
    ) -> ScanRecord:
        """
        Create a record for an accepted detection.

        The timestamp is taken from `now`, then the detection's own
        timestamp, then the factory clock.

        Args:
            classification: Positive classification of the detection text
            detection: Raw detection from the decoder
            user: Operator name
            session_id: Current session id
            now: Explicit timestamp in epoch milliseconds

        Returns:
            New ScanRecord with a fresh id

        Raises:
            ValueError: If the classification is not valid
        """
        if not classification.is_valid:
            raise ValueError(
                f"Cannot record unrecognized barcode {classification.text!r}"
            )

        if now is None:
            now = detection.timestamp if detection.timestamp is not None else self._clock()

        return ScanRecord(
            id=self._id_factory(),
            text=classification.text,
            type=classification.type,
            vendor=classification.vendor,
            checksum_valid=classification.checksum_valid,
            user=user,
            session_id=session_id,
            timestamp=now,
            format=detection.format,
            region=detection.region,
        )
