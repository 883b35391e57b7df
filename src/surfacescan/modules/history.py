"""Local history of recent scans, one entry per domain."""

import logging
from datetime import UTC
from pathlib import Path

from surfacescan.db import ScanRecord, get_session, init_db
from surfacescan.modules.scanner.models import HistoryEntry

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


class ScanHistory:
    """Keep the most recent scans in a small SQLite table.

    Recording a domain that is already present replaces its entry, and only
    the newest ``limit`` entries survive.
    """

    def __init__(self, db_path: Path, limit: int = DEFAULT_LIMIT):
        self.db_path = Path(db_path)
        self.limit = max(1, limit)
        init_db(self.db_path)

    def record(self, entry: HistoryEntry) -> None:
        session = get_session(self.db_path)
        try:
            session.query(ScanRecord).filter(ScanRecord.domain == entry.domain).delete()
            session.add(
                ScanRecord(
                    url=entry.url,
                    domain=entry.domain,
                    score=entry.score,
                    critical=entry.critical,
                    warnings=entry.warnings,
                    passed=entry.passed,
                    scanned_at=entry.scanned_at.astimezone(UTC),
                )
            )
            session.flush()

            stale = (
                session.query(ScanRecord)
                .order_by(ScanRecord.scanned_at.desc(), ScanRecord.id.desc())
                .offset(self.limit)
                .all()
            )
            for record in stale:
                session.delete(record)
            session.commit()
            logger.debug("history: recorded %s, trimmed %d", entry.domain, len(stale))
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def entries(self) -> list[HistoryEntry]:
        """Return remembered scans, newest first."""
        session = get_session(self.db_path)
        try:
            records = (
                session.query(ScanRecord)
                .order_by(ScanRecord.scanned_at.desc(), ScanRecord.id.desc())
                .limit(self.limit)
                .all()
            )
            return [_to_entry(record) for record in records]
        finally:
            session.close()

    def remove(self, domain: str) -> bool:
        """Forget one domain. Returns True if an entry was deleted."""
        session = get_session(self.db_path)
        try:
            deleted = session.query(ScanRecord).filter(ScanRecord.domain == domain).delete()
            session.commit()
            return deleted > 0
        finally:
            session.close()

    def clear(self) -> int:
        """Forget everything. Returns the number of deleted entries."""
        session = get_session(self.db_path)
        try:
            deleted = session.query(ScanRecord).delete()
            session.commit()
            return deleted
        finally:
            session.close()


def _to_entry(record: ScanRecord) -> HistoryEntry:
    scanned_at = record.scanned_at
    # Stored as UTC; SQLite drops tzinfo on the way back.
    if scanned_at is not None and scanned_at.tzinfo is None:
        scanned_at = scanned_at.replace(tzinfo=UTC)
    return HistoryEntry(
        url=record.url,
        domain=record.domain,
        score=record.score,
        critical=record.critical or 0,
        warnings=record.warnings or 0,
        passed=record.passed or 0,
        scanned_at=scanned_at,
    )
