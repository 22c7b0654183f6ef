"""
==============================================================================
Scanning Models Module
==============================================================================

Pydantic models for detections, scan records and pipeline outcomes.

Records accept both the snake_case field names and the camelCase keys
written by earlier browser-based versions of the scanner ("sessionId",
"checksum"), so old backups can be restored.

==============================================================================
"""

from __future__ import annotations

import enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from imei_scanner.barcodes.models import BarcodeType, ClassificationResult
from imei_scanner.core.exceptions import MalformedRecordError


class Region(BaseModel):
    """
    Bounding box of a detection in frame pixel coordinates.

    Coordinates may be fractional; older backups stored region-scan crops
    computed from a share of the frame size.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: float = Field(..., ge=0, validation_alias=AliasChoices("width", "w"))
    height: float = Field(..., ge=0, validation_alias=AliasChoices("height", "h"))


class Detection(BaseModel):
    """
    One decoded barcode reported by the decoder adapter.

    Attributes:
        text: Raw decoded text, possibly with surrounding whitespace
        format: Symbology reported by the decoder (e.g. "EAN_13")
        region: Optional bounding box
        timestamp: Detection time in epoch milliseconds
    """

    text: str = Field(..., description="Raw decoded text")
    format: str = Field(default="UNKNOWN", description="Decoder symbology")
    region: Optional[Region] = Field(default=None)
    timestamp: Optional[int] = Field(default=None, ge=0, description="Epoch milliseconds")


class ScanRecord(BaseModel):
    """
    Immutable record of one accepted scan.

    Attributes:
        id: Unique record identifier
        text: Trimmed decoded value
        type: Identifier kind
        vendor: Manufacturer or "Product"
        checksum_valid: Check digit outcome
        user: Operator who scanned the code
        session_id: Session the scan belongs to
        timestamp: Epoch milliseconds
        format: Decoder symbology
        region: Optional bounding box
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, max_length=64)
    text: str = Field(..., min_length=1, max_length=64)
    type: BarcodeType
    vendor: str
    checksum_valid: bool = Field(
        ...,
        validation_alias=AliasChoices("checksum_valid", "checksumValid", "checksum"),
    )
    user: str
    session_id: str = Field(
        ...,
        validation_alias=AliasChoices("session_id", "sessionId"),
    )
    timestamp: int = Field(..., ge=0)
    format: str = "UNKNOWN"
    region: Optional[Region] = None

    @field_validator("format", mode="before")
    @classmethod
    def coerce_format(cls, v: Any) -> Any:
        """Older decoders reported the symbology as a number."""
        if v is None:
            return "UNKNOWN"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def from_dict(cls, data: Any) -> "ScanRecord":
        """
        Rehydrate a record from its serialized form.

        Raises:
            MalformedRecordError: If required fields are missing or ill-typed
        """
        if not isinstance(data, dict):
            raise MalformedRecordError(f"expected an object, got {type(data).__name__}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise MalformedRecordError(
                f"invalid or missing fields: {', '.join(fields)}",
                record_id=data.get("id") if isinstance(data.get("id"), str) else None
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain JSON-compatible types."""
        return self.model_dump(mode="json")


class ScanStatus(str, enum.Enum):
    """Pipeline outcome for one detection."""

    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value


class ScanOutcome(BaseModel):
    """Result of running one detection through the pipeline."""

    model_config = ConfigDict(frozen=True)

    status: ScanStatus
    classification: ClassificationResult
    record: Optional[ScanRecord] = None

    @property
    def accepted(self) -> bool:
        return self.status is ScanStatus.ACCEPTED


class LoadReport(BaseModel):
    """Summary of a bulk load into a scan log."""

    loaded: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)
