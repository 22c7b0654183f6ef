"""
==============================================================================
Configuration Package
==============================================================================

Centralized configuration management using Pydantic Settings.

Usage:
------
    from imei_scanner.config import get_settings, DuplicateHandling

    settings = get_settings()
    if settings.duplicate_handling is DuplicateHandling.BLOCK:
        ...

==============================================================================
"""

from .settings import DuplicateHandling, Settings, get_settings

__all__ = [
    "DuplicateHandling",
    "Settings",
    "get_settings",
]
