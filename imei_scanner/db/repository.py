"""
==============================================================================
Scan Repository Module
==============================================================================

Persistence of scan records through SQLAlchemy.

The repository only moves serialized records in and out of the database;
validation on the way back in is done by ScanLog.load, which skips rows
that no longer form a valid record.

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from imei_scanner.scanning.models import ScanRecord

from .models import ScanRecordRow


# Module logger
logger = logging.getLogger(__name__)


class ScanRepository:
    """
    Data access for persisted scan records.

    Attributes:
        _session_factory: SQLAlchemy sessionmaker bound to the target engine

    Example:
        >>> repo = ScanRepository(get_database_manager().session_factory)
        >>> repo.add(record)
        >>> rows = repo.load_all()
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _scope(self) -> Generator[Session, None, None]:
        """Transactional scope: commit on success, rollback on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # =========================================================================
    # WRITES
    # =========================================================================

    def add(self, record: ScanRecord) -> None:
        """Persist one record."""
        self.add_many([record])

    def add_many(self, records: Iterable[ScanRecord]) -> int:
        """
        Persist records in order.

        Returns:
            Number of rows written
        """
        rows = [ScanRecordRow.from_record(record) for record in records]
        if not rows:
            return 0

        with self._scope() as session:
            session.add_all(rows)

        logger.debug(f"Persisted {len(rows)} scan records")
        return len(rows)

    def delete(self, record_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a row was deleted
        """
        with self._scope() as session:
            deleted = session.query(ScanRecordRow).filter(
                ScanRecordRow.id == record_id
            ).delete()

        return deleted > 0

    def clear(self, session_id: Optional[str] = None) -> int:
        """
        Delete all records, or only those of one session.

        Returns:
            Number of rows deleted
        """
        with self._scope() as session:
            query = session.query(ScanRecordRow)
            if session_id is not None:
                query = query.filter(ScanRecordRow.session_id == session_id)
            deleted = query.delete()

        if deleted:
            logger.info(f"Deleted {deleted} persisted scan records")
        return deleted

    # =========================================================================
    # READS
    # =========================================================================

    def load_all(self) -> List[Dict[str, Any]]:
        """All persisted records, serialized, in insertion order."""
        with self._scope() as session:
            rows = session.query(ScanRecordRow).order_by(ScanRecordRow.seq).all()
            return [row.to_dict() for row in rows]

    def count(self) -> int:
        """Number of persisted records."""
        with self._scope() as session:
            return session.query(ScanRecordRow).count()
