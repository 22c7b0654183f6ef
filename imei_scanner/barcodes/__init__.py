"""
==============================================================================
Barcodes Package - Classification & Checksums
==============================================================================

Pure, side-effect free identification of decoded barcode text.

Classes:
--------
- BarcodeType: Identifier kinds (IMEI, MEID, UPC-A, UPC-E, EAN-13, Unknown)
- ClassificationResult: Type, validity, vendor and checksum outcome
- BarcodeClassifier: Fixed-priority shape rules

==============================================================================
"""

from .models import BarcodeType, ClassificationResult
from .checksums import (
    validate_ean13_checksum,
    validate_imei_checksum,
    validate_upc_a_checksum,
)
from .vendors import get_imei_vendor
from .classifier import BarcodeClassifier, classify

__all__ = [
    "BarcodeType",
    "ClassificationResult",
    "BarcodeClassifier",
    "classify",
    "get_imei_vendor",
    "validate_imei_checksum",
    "validate_upc_a_checksum",
    "validate_ean13_checksum",
]
