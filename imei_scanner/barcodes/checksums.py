"""
==============================================================================
Checksum Validators Module
==============================================================================

Check digit validation for the identifiers handled by the classifier.

Algorithms:
-----------
- IMEI: Luhn over the first 14 digits, check digit at position 14
- UPC-A / EAN-13: GS1 mod-10, data digits weighted 3,1,3,... starting
  from the digit nearest the check digit

Each validator checks its own input shape and raises ValueError for
anything that is not the expected number of ASCII digits.

==============================================================================
"""

from __future__ import annotations

import re
from typing import List


IMEI_LENGTH = 15
UPC_A_LENGTH = 12
EAN_13_LENGTH = 13

_DIGITS = re.compile(r"[0-9]+")


def _to_digits(value: str, length: int, kind: str) -> List[int]:
    """Convert a fixed-length ASCII digit string, rejecting anything else."""
    if not isinstance(value, str) or len(value) != length or not _DIGITS.fullmatch(value):
        raise ValueError(f"{kind} checksum requires exactly {length} digits, got {value!r}")
    return [int(ch) for ch in value]


def luhn_check_digit(digits: List[int]) -> int:
    """
    Compute the Luhn check digit for an IMEI body.

    Every digit at an odd (0-based) position is doubled, doubles above 9
    have 9 subtracted, and the check digit brings the sum to a multiple of 10.

    Example:
        >>> luhn_check_digit([4, 9, 0, 1, 5, 4, 2, 0, 3, 2, 3, 7, 5, 1])
        8
    """
    total = 0
    for position, digit in enumerate(digits):
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return (10 - total % 10) % 10


def gs1_check_digit(digits: List[int]) -> int:
    """
    Compute the GS1 mod-10 check digit shared by UPC-A and EAN-13.

    Weights alternate 3,1,3,... from the rightmost data digit, so the same
    routine serves 11-digit UPC-A and 12-digit EAN-13 bodies.

    Example:
        >>> gs1_check_digit([0, 3, 6, 0, 0, 0, 2, 9, 1, 4, 5])
        2
    """
    total = 0
    for offset, digit in enumerate(reversed(digits)):
        total += digit * (3 if offset % 2 == 0 else 1)
    return (10 - total % 10) % 10


def validate_imei_checksum(imei: str) -> bool:
    """
    Validate the check digit of a 15-digit IMEI.

    Args:
        imei: Exactly 15 ASCII digits

    Returns:
        True if the last digit matches the Luhn check digit

    Raises:
        ValueError: If imei is not 15 ASCII digits
    """
    digits = _to_digits(imei, IMEI_LENGTH, "IMEI")
    return luhn_check_digit(digits[:-1]) == digits[-1]


def validate_upc_a_checksum(upc: str) -> bool:
    """
    Validate the check digit of a 12-digit UPC-A code.

    Raises:
        ValueError: If upc is not 12 ASCII digits
    """
    digits = _to_digits(upc, UPC_A_LENGTH, "UPC-A")
    return gs1_check_digit(digits[:-1]) == digits[-1]


def validate_ean13_checksum(ean: str) -> bool:
    """
    Validate the check digit of a 13-digit EAN-13 code.

    Raises:
        ValueError: If ean is not 13 ASCII digits
    """
    digits = _to_digits(ean, EAN_13_LENGTH, "EAN-13")
    return gs1_check_digit(digits[:-1]) == digits[-1]
