"""Local track stores.

The local store is the durability baseline: any failure here is raised as
``LocalStoreFailure`` and never hidden by callers.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..errors import LocalStoreFailure
from ..models import Track

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class TrackStore(Protocol):
    """Key-value persistence of tracks keyed by ``Track.id``."""

    def put(self, track: Track) -> None: ...

    def get(self, track_id: str) -> Optional[Track]: ...

    def get_all(self) -> List[Track]: ...

    def delete(self, track_id: str) -> None: ...


class FileTrackStore:
    """One JSON document per track under ``base_dir``.

    Writes go to a temporary file that replaces the target, so a reader never
    sees a half-written track.
    """

    def __init__(self, base_dir: str | Path) -> None:
        base = Path(base_dir)
        self._base_dir = base if base.is_absolute() else Path.cwd() / base
        self._lock = threading.Lock()
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise LocalStoreFailure(
                f"Cannot create track directory {self._base_dir}: {exc}"
            ) from exc
        _LOGGER.debug("Local track store initialised dir=%s", self._base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _file_path(self, track_id: str) -> Path:
        if not track_id or "/" in track_id or "\\" in track_id or track_id in {".", ".."}:
            raise LocalStoreFailure(f"Invalid track id {track_id!r}")
        return self._base_dir / f"{track_id}.json"

    def _read_file(self, path: Path) -> Optional[Track]:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return Track.from_dict(json.load(handle))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise LocalStoreFailure(f"Failed reading track file {path}: {exc}") from exc

    def put(self, track: Track) -> None:
        path = self._file_path(track.id)
        temp_path = path.with_suffix(".tmp")
        with self._lock:
            try:
                with temp_path.open("w", encoding="utf-8") as handle:
                    json.dump(track.to_dict(), handle, ensure_ascii=True)
                temp_path.replace(path)
            except OSError as exc:
                raise LocalStoreFailure(f"Failed writing track {track.id}: {exc}") from exc

    def get(self, track_id: str) -> Optional[Track]:
        return self._read_file(self._file_path(track_id))

    def get_all(self) -> List[Track]:
        """All stored tracks, newest first."""

        try:
            paths = sorted(self._base_dir.glob("*.json"))
        except OSError as exc:
            raise LocalStoreFailure(f"Failed listing {self._base_dir}: {exc}") from exc
        tracks = [track for track in (self._read_file(p) for p in paths) if track]
        tracks.sort(key=lambda t: t.created_at, reverse=True)
        return tracks

    def delete(self, track_id: str) -> None:
        path = self._file_path(track_id)
        with self._lock:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise LocalStoreFailure(f"Failed deleting track {track_id}: {exc}") from exc


class MemoryTrackStore:
    """Dict-backed store for tests and ephemeral sessions."""

    def __init__(self) -> None:
        self._tracks: Dict[str, Track] = {}
        self._lock = threading.Lock()

    def put(self, track: Track) -> None:
        with self._lock:
            self._tracks[track.id] = track.copy()

    def get(self, track_id: str) -> Optional[Track]:
        with self._lock:
            track = self._tracks.get(track_id)
        return track.copy() if track else None

    def get_all(self) -> List[Track]:
        with self._lock:
            tracks = [t.copy() for t in self._tracks.values()]
        tracks.sort(key=lambda t: t.created_at, reverse=True)
        return tracks

    def delete(self, track_id: str) -> None:
        with self._lock:
            self._tracks.pop(track_id, None)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks


__all__ = ["TrackStore", "FileTrackStore", "MemoryTrackStore"]
