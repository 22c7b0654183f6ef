"""
Duplicate suppression policy.

Decides whether a classified code has already been recorded in the current
session. Comparison is exact (case-sensitive) on the trimmed text, across
all barcode types.
"""

from typing import Iterable

from imei_scanner.config.settings import DuplicateHandling

from .models import ScanRecord


def is_duplicate(
    text: str,
    existing_records: Iterable[ScanRecord],
    policy: DuplicateHandling
) -> bool:
    """
    Check a candidate text against a snapshot of the session log.

    Args:
        text: Trimmed decoded value
        existing_records: Records already accepted in the session
        policy: Duplicate handling setting

    Returns:
        False under ALLOW; under BLOCK, True iff a record has the same text
    """
    if DuplicateHandling(policy) is DuplicateHandling.ALLOW:
        return False

    return any(record.text == text for record in existing_records)
