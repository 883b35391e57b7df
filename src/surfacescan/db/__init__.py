"""Local persistence for scan history."""

from .init import get_session, init_db
from .models import Base, ScanRecord

__all__ = ["Base", "ScanRecord", "get_session", "init_db"]
