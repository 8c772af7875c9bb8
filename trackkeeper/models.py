"""Dataclasses describing tracks, tombstones and operation results."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Return True when ``lat``/``lng`` are finite and within WGS84 bounds."""

    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


@dataclass(slots=True)
class TrackPoint:
    """A single GPS fix. ``timestamp`` is epoch milliseconds."""

    lat: float
    lng: float
    altitude: Optional[float] = None
    accuracy: float = 0.0
    timestamp: int = 0

    def copy(self) -> "TrackPoint":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "altitude": self.altitude,
            "accuracy": self.accuracy,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackPoint":
        altitude = data.get("altitude")
        return cls(
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            altitude=None if altitude is None else float(altitude),
            accuracy=float(data.get("accuracy") or 0.0),
            timestamp=int(data.get("timestamp") or 0),
        )


@dataclass(slots=True)
class Track:
    """An ordered, timestamped path. ``id`` is the sync key and never changes."""

    id: str
    name: str
    points: List[TrackPoint] = field(default_factory=list)
    start_time: int = 0
    end_time: int = 0
    created_at: int = 0

    def __post_init__(self) -> None:
        self.refresh_bounds()

    def refresh_bounds(self) -> None:
        """Re-derive start/end time from the first and last point."""

        if self.points:
            self.start_time = self.points[0].timestamp
            self.end_time = self.points[-1].timestamp

    def with_points(self, points: Sequence[TrackPoint]) -> "Track":
        """Return a copy of this track carrying ``points`` and matching bounds."""

        return Track(
            id=self.id,
            name=self.name,
            points=[p.copy() for p in points],
            start_time=self.start_time,
            end_time=self.end_time,
            created_at=self.created_at,
        )

    def copy(self) -> "Track":
        return self.with_points(self.points)

    @property
    def duration_s(self) -> float:
        return max(self.end_time - self.start_time, 0) / 1000.0

    def to_document(self) -> Dict[str, Any]:
        """Fields stored in the remote ``tracks`` collection (id is the key)."""

        return {
            "name": self.name,
            "points": [p.to_dict() for p in self.points],
            "startTime": self.start_time,
            "endTime": self.end_time,
            "createdAt": self.created_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        payload = {"id": self.id}
        payload.update(self.to_document())
        return payload

    @classmethod
    def from_document(cls, track_id: str, data: Mapping[str, Any]) -> "Track":
        points = [TrackPoint.from_dict(p) for p in data.get("points") or []]
        return cls(
            id=str(track_id),
            name=str(data.get("name") or ""),
            points=points,
            start_time=int(data.get("startTime") or 0),
            end_time=int(data.get("endTime") or 0),
            created_at=int(data.get("createdAt") or 0),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Track":
        return cls.from_document(str(data["id"]), data)


@dataclass(frozen=True, slots=True)
class Tombstone:
    """Remote marker that ``track_id`` was deleted on some device."""

    track_id: str
    deleted_at: int

    def to_document(self) -> Dict[str, Any]:
        return {"at": self.deleted_at}

    @classmethod
    def from_document(cls, track_id: str, data: Mapping[str, Any]) -> "Tombstone":
        return cls(track_id=str(track_id), deleted_at=int(data.get("at") or 0))


class TrackLocation(str, Enum):
    """Where a track currently lives, derived at list time."""

    CLOUD_ONLY = "cloud_only"
    LOCAL_ONLY = "local_only"
    BOTH = "both"


@dataclass(frozen=True, slots=True)
class SaveResult:
    saved_local: bool
    saved_cloud: bool


@dataclass(slots=True)
class ListResult:
    tracks: List[Track]
    local_only_ids: Set[str]


@dataclass(slots=True)
class ReconcileResult:
    synced: int = 0
    failed: int = 0
    removed: int = 0


@dataclass(slots=True)
class ImportFileResult:
    """Outcome of importing a single file in a batch."""

    filename: str
    tracks: List[Track] = field(default_factory=list)
    error: Optional[str] = None
    saved_cloud: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None
