"""Database models for SurfaceScan using SQLAlchemy."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base


def _utc_now() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class ScanRecord(Base):
    """One remembered scan; at most one row per domain."""

    __tablename__ = "scan_history"

    id = Column(Integer, primary_key=True)
    url = Column(String, nullable=False)
    domain = Column(String, nullable=False, unique=True)
    score = Column(Integer, nullable=False)
    critical = Column(Integer, default=0)
    warnings = Column(Integer, default=0)
    passed = Column(Integer, default=0)
    scanned_at = Column(DateTime(timezone=True), default=_utc_now, index=True)
