"""Local bookkeeping for sync work that must survive restarts.

The journal holds two sets of track ids:

- ``pending_deletes``: deleted locally while the remote was unreachable; the
  remote delete and tombstone write are replayed on the next reconcile.
- ``issued_tombstones``: tombstones this device wrote. The issuer leaves them
  on the remote for the other devices to consume.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
import threading
from typing import Dict, Protocol, Set, runtime_checkable

from ..errors import LocalStoreFailure

_LOGGER = logging.getLogger(__name__)

PENDING_DELETES = "pending_deletes"
ISSUED_TOMBSTONES = "issued_tombstones"
JOURNAL_KINDS = (PENDING_DELETES, ISSUED_TOMBSTONES)


@runtime_checkable
class SyncJournal(Protocol):
    def ids(self, kind: str) -> Set[str]: ...

    def add(self, kind: str, track_id: str) -> None: ...

    def discard(self, kind: str, track_id: str) -> None: ...


def _check_kind(kind: str) -> None:
    if kind not in JOURNAL_KINDS:
        raise ValueError(f"Unknown journal kind {kind!r}")


class MemorySyncJournal:
    """Journal that lives as long as the process."""

    def __init__(self) -> None:
        self._entries: Dict[str, Set[str]] = {kind: set() for kind in JOURNAL_KINDS}
        self._lock = threading.Lock()

    def ids(self, kind: str) -> Set[str]:
        _check_kind(kind)
        with self._lock:
            return set(self._entries[kind])

    def add(self, kind: str, track_id: str) -> None:
        _check_kind(kind)
        with self._lock:
            self._entries[kind].add(track_id)

    def discard(self, kind: str, track_id: str) -> None:
        _check_kind(kind)
        with self._lock:
            self._entries[kind].discard(track_id)


class FileSyncJournal:
    """Journal persisted as one JSON document, rewritten atomically on change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LocalStoreFailure(
                f"Cannot create journal directory {self._path.parent}: {exc}"
            ) from exc

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> Dict[str, Set[str]]:
        entries: Dict[str, Set[str]] = {kind: set() for kind in JOURNAL_KINDS}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return entries
        except (OSError, ValueError) as exc:
            raise LocalStoreFailure(f"Failed reading sync journal {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise LocalStoreFailure(f"Sync journal {self._path} is not an object")
        for kind in JOURNAL_KINDS:
            entries[kind] = {str(item) for item in data.get(kind) or []}
        return entries

    def _save(self, entries: Dict[str, Set[str]]) -> None:
        temp_path = self._path.with_suffix(".tmp")
        payload = {kind: sorted(ids) for kind, ids in entries.items()}
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=True)
            temp_path.replace(self._path)
        except OSError as exc:
            raise LocalStoreFailure(f"Failed writing sync journal {self._path}: {exc}") from exc

    def ids(self, kind: str) -> Set[str]:
        _check_kind(kind)
        with self._lock:
            return self._load()[kind]

    def add(self, kind: str, track_id: str) -> None:
        _check_kind(kind)
        with self._lock:
            entries = self._load()
            if track_id in entries[kind]:
                return
            entries[kind].add(track_id)
            self._save(entries)
        _LOGGER.debug("Journal %s += %s", kind, track_id)

    def discard(self, kind: str, track_id: str) -> None:
        _check_kind(kind)
        with self._lock:
            entries = self._load()
            if track_id not in entries[kind]:
                return
            entries[kind].discard(track_id)
            self._save(entries)
        _LOGGER.debug("Journal %s -= %s", kind, track_id)


__all__ = [
    "PENDING_DELETES",
    "ISSUED_TOMBSTONES",
    "SyncJournal",
    "MemorySyncJournal",
    "FileSyncJournal",
]
