"""Tests for the local scan history store."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

from surfacescan.modules.history import ScanHistory
from surfacescan.modules.scanner.models import HistoryEntry

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _entry(domain: str, minutes: int, score: int = 90) -> HistoryEntry:
    return HistoryEntry(
        url=f"https://{domain}",
        domain=domain,
        score=score,
        critical=0,
        warnings=2,
        passed=8,
        scanned_at=BASE_TIME + timedelta(minutes=minutes),
    )


def test_entries_are_newest_first(temp_dir: Path):
    history = ScanHistory(temp_dir / "history.db")
    history.record(_entry("a.example", 1))
    history.record(_entry("b.example", 2))

    entries = history.entries()

    assert [entry.domain for entry in entries] == ["b.example", "a.example"]
    assert entries[0].scanned_at == BASE_TIME + timedelta(minutes=2)
    assert entries[0].passed == 8


def test_same_domain_replaces_entry(temp_dir: Path):
    history = ScanHistory(temp_dir / "history.db")
    history.record(_entry("a.example", 1, score=50))
    history.record(_entry("b.example", 2))
    history.record(_entry("a.example", 3, score=95))

    entries = history.entries()

    assert [entry.domain for entry in entries] == ["a.example", "b.example"]
    assert entries[0].score == 95


def test_history_is_capped(temp_dir: Path):
    history = ScanHistory(temp_dir / "history.db", limit=10)
    for i in range(13):
        history.record(_entry(f"site{i}.example", i))

    entries = history.entries()

    assert len(entries) == 10
    assert entries[0].domain == "site12.example"
    assert entries[-1].domain == "site3.example"


def test_remove_and_clear(temp_dir: Path):
    history = ScanHistory(temp_dir / "history.db")
    history.record(_entry("a.example", 1))
    history.record(_entry("b.example", 2))

    assert history.remove("a.example") is True
    assert history.remove("a.example") is False
    assert [entry.domain for entry in history.entries()] == ["b.example"]

    assert history.clear() == 1
    assert history.entries() == []


def test_history_persists_across_instances(temp_dir: Path):
    db_path = temp_dir / "nested" / "history.db"
    ScanHistory(db_path).record(_entry("a.example", 1))

    assert [entry.domain for entry in ScanHistory(db_path).entries()] == ["a.example"]
