"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

Modules:
--------
- exceptions: AppException, scan log errors and error factory functions
- dependencies: FastAPI dependency injection functions

Usage:
------
    from imei_scanner.core import AppException, MalformedRecordError

    # Or use exception factory functions via module
    from imei_scanner.core import exceptions
    raise exceptions.session_not_started()

==============================================================================
"""

from .exceptions import (
    AppException,
    DuplicateIdError,
    MalformedRecordError,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "DuplicateIdError",
    "MalformedRecordError",
    "register_exception_handlers",
]
