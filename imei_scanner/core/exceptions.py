"""
Application Exception Handling

AppException base class for all application errors with FastAPI integration,
plus the two scan log errors raised by the core.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("No active session", "SESSION_NOT_STARTED", 409)
        raise AppException("Scan not found", "RECORD_NOT_FOUND", 404, {"id": "abc"})

    Error Codes:
        Session:
            - SESSION_NOT_STARTED (409)

        Scan log:
            - RECORD_NOT_FOUND (404)
            - DUPLICATE_ID (409)
            - MALFORMED_RECORD (422)
            - INVALID_BACKUP (400)
            - NOTHING_TO_EXPORT (404)

        Decoder:
            - INVALID_IMAGE (400)

        Sync:
            - SYNC_NOT_CONFIGURED (400)
            - SYNC_FAILED (502)

        General:
            - INVALID_MESSAGE (WebSocket only)
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "RECORD_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


class MalformedRecordError(AppException):
    """
    Raised when a persisted scan record cannot be rehydrated.

    Bulk loads catch it per record and skip the offending entry.
    """

    def __init__(self, reason: str, record_id: Optional[str] = None):
        details = {"reason": reason}
        if record_id:
            details["record_id"] = record_id
        super().__init__(
            f"Malformed scan record: {reason}",
            "MALFORMED_RECORD",
            422,
            details
        )
        self.reason = reason
        self.record_id = record_id


class DuplicateIdError(AppException):
    """Raised when a record id is appended to a log that already holds it."""

    def __init__(self, record_id: str):
        super().__init__(
            f"Scan record id already present: {record_id}",
            "DUPLICATE_ID",
            409,
            {"record_id": record_id}
        )
        self.record_id = record_id


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def session_not_started() -> AppException:
    """Create no active session exception."""
    return AppException(
        "No scan session is active. Select a user to start one.",
        "SESSION_NOT_STARTED",
        409
    )


def record_not_found(record_id: str) -> AppException:
    """Create scan record not found exception."""
    return AppException(
        "Scan record not found",
        "RECORD_NOT_FOUND",
        404,
        {"record_id": record_id}
    )


def nothing_to_export() -> AppException:
    """Create empty log exception for export and sync."""
    return AppException("No scan data available", "NOTHING_TO_EXPORT", 404)


def invalid_backup(reason: str) -> AppException:
    """Create invalid backup payload exception."""
    return AppException(
        f"Invalid backup: {reason}",
        "INVALID_BACKUP",
        400,
        {"reason": reason}
    )


def invalid_image() -> AppException:
    """Create undecodable image exception."""
    return AppException("Image data could not be decoded", "INVALID_IMAGE", 400)


def sync_not_configured() -> AppException:
    """Create missing sync endpoint exception."""
    return AppException(
        "Google Sheets URL not configured",
        "SYNC_NOT_CONFIGURED",
        400
    )


def sync_failed(reason: str) -> AppException:
    """Create sync failure exception."""
    return AppException(
        f"Sync failed: {reason}",
        "SYNC_FAILED",
        502,
        {"reason": reason}
    )


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
