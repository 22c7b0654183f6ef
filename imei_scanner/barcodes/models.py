"""
==============================================================================
Barcode Models Module
==============================================================================

Pydantic models for barcode classification results.

==============================================================================
"""

import enum

from pydantic import BaseModel, ConfigDict, Field


class BarcodeType(str, enum.Enum):
    """
    Identifier kinds recognized by the classifier.

    The enum inherits from str so records serialize with the display value
    ("UPC-A", "EAN-13", ...).
    """

    IMEI = "IMEI"
    MEID = "MEID"
    UPC_A = "UPC-A"
    UPC_E = "UPC-E"
    EAN_13 = "EAN-13"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value

    @property
    def is_device_id(self) -> bool:
        """IMEI and MEID identify handsets rather than products."""
        return self in (BarcodeType.IMEI, BarcodeType.MEID)

    @property
    def is_product_code(self) -> bool:
        """UPC and EAN codes identify retail products."""
        return self.value.startswith(("UPC", "EAN"))


class ClassificationResult(BaseModel):
    """
    Outcome of classifying one decoded text.

    Attributes:
        text: Trimmed decoded value
        type: Identifier kind
        is_valid: True iff the text matched one of the recognized shapes
        vendor: Manufacturer for IMEIs, "Product" for retail codes
        checksum_valid: Check digit outcome, reported separately from is_valid
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Trimmed decoded value")
    type: BarcodeType = Field(..., description="Identifier kind")
    is_valid: bool = Field(..., description="Shape matched a known format")
    vendor: str = Field(..., description="Manufacturer or 'Product'")
    checksum_valid: bool = Field(..., description="Check digit outcome")
