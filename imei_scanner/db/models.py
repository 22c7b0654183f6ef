"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

Persistent form of the scan log.

Database Schema:
---------------

    ┌─────────────────────────────────────────────────────────────────┐
    │                        scan_records                              │
    ├─────────────────────────────────────────────────────────────────┤
    │ seq (INTEGER, PK, AUTO INCREMENT) - insertion order             │
    │ id (VARCHAR(64), UNIQUE, NOT NULL)                              │
    │ text (VARCHAR(64), NOT NULL, INDEX)                             │
    │ type (VARCHAR(16), NOT NULL)                                    │
    │ vendor (VARCHAR(64), NOT NULL)                                  │
    │ checksum_valid (BOOLEAN, NOT NULL)                              │
    │ user (VARCHAR(50), NOT NULL)                                    │
    │ session_id (VARCHAR(100), NOT NULL, INDEX)                      │
    │ timestamp (BIGINT, NOT NULL) - epoch milliseconds               │
    │ format (VARCHAR(32), NOT NULL)                                  │
    │ region (JSON, NULLABLE)                                         │
    │ created_at (DATETIME, DEFAULT now)                              │
    └─────────────────────────────────────────────────────────────────┘

==============================================================================
"""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, Integer, String, func

from imei_scanner.db.database import Base
from imei_scanner.scanning.models import ScanRecord


class ScanRecordRow(Base):
    """
    Persisted scan record.

    Rows mirror ScanRecord field for field; `seq` preserves insertion order
    so the log can be rebuilt in detection order.
    """

    __tablename__ = "scan_records"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, nullable=False, index=True)
    text = Column(String(64), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    vendor = Column(String(64), nullable=False)
    checksum_valid = Column(Boolean, nullable=False)
    user = Column(String(50), nullable=False)
    session_id = Column(String(100), nullable=False, index=True)
    timestamp = Column(BigInteger, nullable=False)
    format = Column(String(32), nullable=False)
    region = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    @classmethod
    def from_record(cls, record: ScanRecord) -> "ScanRecordRow":
        """Build a row from a domain record."""
        data = record.to_dict()
        return cls(
            id=data["id"],
            text=data["text"],
            type=data["type"],
            vendor=data["vendor"],
            checksum_valid=data["checksum_valid"],
            user=data["user"],
            session_id=data["session_id"],
            timestamp=data["timestamp"],
            format=data["format"],
            region=data["region"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialized record in the shape ScanLog.load expects."""
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type,
            "vendor": self.vendor,
            "checksum_valid": self.checksum_valid,
            "user": self.user,
            "session_id": self.session_id,
            "timestamp": self.timestamp,
            "format": self.format,
            "region": self.region,
        }

    def __repr__(self) -> str:
        return f"<ScanRecordRow(id={self.id!r}, type={self.type!r}, text={self.text!r})>"
