"""
IMEI vendor lookup.

Maps the leading digits of an IMEI type allocation code to a manufacturer.
"""

from typing import Dict, Optional


UNKNOWN_VENDOR = "Unknown"

# Two-digit TAC prefixes recognized on intake labels
IMEI_VENDOR_PREFIXES: Dict[str, str] = {
    "01": "Apple",
    "35": "Samsung",
    "86": "Huawei",
    "99": "Xiaomi",
}


def get_imei_vendor(imei: Optional[str]) -> str:
    """
    Return the manufacturer for an IMEI, or "Unknown".

    Only the first two characters are consulted, so a bare prefix works too.

    Example:
        >>> get_imei_vendor("356938035643809")
        'Samsung'
        >>> get_imei_vendor("77")
        'Unknown'
    """
    if not imei:
        return UNKNOWN_VENDOR
    return IMEI_VENDOR_PREFIXES.get(imei[:2], UNKNOWN_VENDOR)
