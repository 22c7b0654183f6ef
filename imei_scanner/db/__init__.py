"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy database infrastructure and scan log persistence.

Architecture:
------------
├── database.py   - DatabaseManager class, session factory, init_db
├── models.py     - ScanRecordRow ORM model
└── repository.py - ScanRepository data access

Usage:
------
    from imei_scanner.db import ScanRepository, get_database_manager

    repo = ScanRepository(get_database_manager().session_factory)
    log.load(repo.load_all())

==============================================================================
"""

from .database import Base, DatabaseManager, build_engine, get_database_manager, get_db, init_db
from .models import ScanRecordRow
from .repository import ScanRepository

__all__ = [
    "Base",
    "DatabaseManager",
    "build_engine",
    "get_database_manager",
    "get_db",
    "init_db",
    "ScanRecordRow",
    "ScanRepository",
]
