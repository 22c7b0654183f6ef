"""
==============================================================================
Scan Schemas Module
==============================================================================

Request and response schemas for sessions and scan intake.

==============================================================================
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from imei_scanner.barcodes.models import ClassificationResult
from imei_scanner.scanning.models import Detection, ScanOutcome, ScanRecord
from imei_scanner.scanning.session import ScanSession


# =============================================================================
# SESSION SCHEMAS
# =============================================================================

class SessionStart(BaseModel):
    """Start a scanning session for an operator."""
    user: str = Field(..., min_length=1, max_length=50)

    @field_validator("user")
    @classmethod
    def strip_user(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("User cannot be blank")
        return v


class SessionDetail(BaseModel):
    """Active session information."""
    session_id: str
    user: str
    started_at: int
    records: int

    @classmethod
    def from_session(cls, session: ScanSession) -> "SessionDetail":
        return cls(
            session_id=session.session_id,
            user=session.user,
            started_at=session.started_at,
            records=len(session.log),
        )


class SessionResponse(BaseModel):
    """Single session response."""
    success: bool = Field(default=True)
    session: SessionDetail


# =============================================================================
# INTAKE SCHEMAS
# =============================================================================

class ClassifyRequest(BaseModel):
    """Classify a decoded text without recording it."""
    text: str = Field(..., max_length=256)


class ClassifyResponse(BaseModel):
    """Classification result."""
    success: bool = Field(default=True)
    classification: ClassificationResult


class DetectionBatch(BaseModel):
    """Detections from one frame or batch."""
    detections: List[Detection] = Field(..., min_length=1, max_length=100)


class SubmitResponse(BaseModel):
    """Outcomes of a submitted batch."""
    success: bool = Field(default=True)
    accepted: int = Field(ge=0)
    duplicates: int = Field(ge=0)
    rejected: int = Field(ge=0)
    outcomes: List[ScanOutcome]

    @classmethod
    def from_outcomes(cls, outcomes: List[ScanOutcome]) -> "SubmitResponse":
        counts = {"accepted": 0, "duplicate": 0, "rejected": 0}
        for outcome in outcomes:
            counts[outcome.status.value] += 1
        return cls(
            accepted=counts["accepted"],
            duplicates=counts["duplicate"],
            rejected=counts["rejected"],
            outcomes=outcomes,
        )


# =============================================================================
# LOG SCHEMAS
# =============================================================================

class ScanListResponse(BaseModel):
    """Recent scans, newest first."""
    success: bool = Field(default=True)
    total: int = Field(ge=0)
    scans: List[ScanRecord]


class StatisticsResponse(BaseModel):
    """Dashboard counters."""
    success: bool = Field(default=True)
    session_id: str
    stats: Dict[str, int]


class RestoreResponse(BaseModel):
    """Outcome of a backup restore."""
    success: bool = Field(default=True)
    loaded: int = Field(ge=0)
    skipped: int = Field(ge=0)
    errors: List[str] = Field(default_factory=list)


class SyncResponse(BaseModel):
    """Outcome of a manual sync."""
    success: bool = Field(default=True)
    synced: int = Field(ge=0)
    status: str


class SettingsResponse(BaseModel):
    """Client-visible settings."""
    success: bool = Field(default=True)
    settings: Dict[str, Any]
    sync_status: Optional[str] = None
