"""Local and remote track persistence."""

from .journal import (
    ISSUED_TOMBSTONES,
    PENDING_DELETES,
    FileSyncJournal,
    MemorySyncJournal,
    SyncJournal,
)
from .local import FileTrackStore, MemoryTrackStore, TrackStore
from .remote import HttpRemoteTrackStore, MemoryRemoteTrackStore, RemoteTrackStore

__all__ = [
    "TrackStore",
    "FileTrackStore",
    "MemoryTrackStore",
    "RemoteTrackStore",
    "HttpRemoteTrackStore",
    "MemoryRemoteTrackStore",
    "SyncJournal",
    "MemorySyncJournal",
    "FileSyncJournal",
    "PENDING_DELETES",
    "ISSUED_TOMBSTONES",
]
