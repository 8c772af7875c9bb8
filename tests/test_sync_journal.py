"""Persistence of sync bookkeeping between runs."""

import pytest

from trackkeeper.errors import LocalStoreFailure
from trackkeeper.stores import (
    ISSUED_TOMBSTONES,
    PENDING_DELETES,
    FileSyncJournal,
    FileTrackStore,
    MemorySyncJournal,
    SyncJournal,
)


def test_file_journal_round_trip(tmp_path) -> None:
    path = tmp_path / ".sync" / "journal.json"
    journal = FileSyncJournal(path)
    journal.add(PENDING_DELETES, "a")
    journal.add(PENDING_DELETES, "b")
    journal.add(ISSUED_TOMBSTONES, "c")
    journal.discard(PENDING_DELETES, "a")

    reopened = FileSyncJournal(path)
    assert reopened.ids(PENDING_DELETES) == {"b"}
    assert reopened.ids(ISSUED_TOMBSTONES) == {"c"}
    assert not list(path.parent.glob("*.tmp"))


def test_file_journal_starts_empty(tmp_path) -> None:
    journal = FileSyncJournal(tmp_path / "journal.json")
    assert journal.ids(PENDING_DELETES) == set()
    journal.discard(ISSUED_TOMBSTONES, "missing")


def test_journal_beside_tracks_is_not_read_as_a_track(tmp_path, sample_track) -> None:
    store = FileTrackStore(tmp_path)
    store.put(sample_track)
    FileSyncJournal(tmp_path / ".sync" / "journal.json").add(PENDING_DELETES, "x")
    assert [t.id for t in store.get_all()] == [sample_track.id]


def test_corrupt_journal_raises(tmp_path) -> None:
    path = tmp_path / "journal.json"
    path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(LocalStoreFailure):
        FileSyncJournal(path).ids(PENDING_DELETES)


def test_unknown_kind_is_rejected() -> None:
    journal = MemorySyncJournal()
    with pytest.raises(ValueError):
        journal.add("everything", "a")


def test_memory_journal_returns_copies() -> None:
    journal = MemorySyncJournal()
    journal.add(ISSUED_TOMBSTONES, "t9")
    journal.ids(ISSUED_TOMBSTONES).clear()
    assert journal.ids(ISSUED_TOMBSTONES) == {"t9"}
    assert isinstance(journal, SyncJournal)
