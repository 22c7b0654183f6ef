"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Scan: Session, intake, log, sync and settings schemas

==============================================================================
"""

from .common import MessageResponse
from .scan import (
    ClassifyRequest,
    ClassifyResponse,
    DetectionBatch,
    RestoreResponse,
    ScanListResponse,
    SessionDetail,
    SessionResponse,
    SessionStart,
    SettingsResponse,
    StatisticsResponse,
    SubmitResponse,
    SyncResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    # Scan
    "ClassifyRequest",
    "ClassifyResponse",
    "DetectionBatch",
    "RestoreResponse",
    "ScanListResponse",
    "SessionDetail",
    "SessionResponse",
    "SessionStart",
    "SettingsResponse",
    "StatisticsResponse",
    "SubmitResponse",
    "SyncResponse",
]
