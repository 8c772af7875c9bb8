"""Live GPS recording.

The recorder collects fixes between ``start`` and ``stop`` and, on stop,
turns them into a ``Track`` that is saved through the sync engine. Position
sources (a GPS daemon, a phone bridge, a replay file) call ``add_fix``.
"""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Callable, List, Optional

from .config import MIN_RECORDED_POINTS
from .models import SaveResult, Track, TrackPoint, is_valid_coordinate
from .services.sync_engine import SyncEngine
from .utils import new_track_id, now_ms

LOGGER = logging.getLogger(__name__)


def default_track_name(created_ms: int) -> str:
    stamp = datetime.fromtimestamp(created_ms / 1000.0).strftime("%d/%m/%Y %H:%M")
    return f"Track {stamp}"


class TrackRecorder:
    """Accumulates fixes for one recording at a time."""

    def __init__(
        self,
        engine: SyncEngine,
        *,
        clock: Callable[[], int] = now_ms,
        min_points: int = MIN_RECORDED_POINTS,
    ) -> None:
        self._engine = engine
        self._clock = clock
        self._min_points = min_points
        self._points: List[TrackPoint] = []
        self._started_at: Optional[int] = None

    @property
    def is_recording(self) -> bool:
        return self._started_at is not None

    @property
    def points(self) -> List[TrackPoint]:
        return list(self._points)

    def elapsed_s(self) -> int:
        if self._started_at is None:
            return 0
        return max(self._clock() - self._started_at, 0) // 1000

    def start(self) -> None:
        if self.is_recording:
            raise RuntimeError("Recording already in progress")
        self._points = []
        self._started_at = self._clock()
        LOGGER.info("Recording started")

    def add_fix(
        self,
        lat: float,
        lng: float,
        *,
        accuracy: float,
        altitude: Optional[float] = None,
        timestamp: Optional[int] = None,
    ) -> bool:
        """Append a GPS fix; returns False when it is ignored."""

        if not self.is_recording:
            return False
        if not is_valid_coordinate(lat, lng):
            LOGGER.debug("Ignoring invalid fix lat=%s lng=%s", lat, lng)
            return False
        self._points.append(
            TrackPoint(
                lat=lat,
                lng=lng,
                altitude=altitude,
                accuracy=accuracy,
                timestamp=self._clock() if timestamp is None else timestamp,
            )
        )
        return True

    def cancel(self) -> None:
        """Abandon the current recording without saving it."""

        if self.is_recording:
            LOGGER.info("Recording cancelled: %d point(s) dropped", len(self._points))
        self._points = []
        self._started_at = None

    def stop(
        self, user_id: Optional[str] = None, name: Optional[str] = None
    ) -> Optional[tuple[Track, SaveResult]]:
        """Finish the recording and save it; None when too few fixes arrived."""

        if not self.is_recording:
            raise RuntimeError("No recording in progress")
        points = self._points
        self._points = []
        self._started_at = None
        if len(points) < self._min_points:
            LOGGER.info("Recording discarded: %d point(s)", len(points))
            return None
        created = self._clock()
        track = Track(
            id=new_track_id(),
            name=name or default_track_name(created),
            points=points,
            created_at=created,
        )
        result = self._engine.save(track, user_id)
        LOGGER.info(
            "Recording saved track=%s points=%d cloud=%s",
            track.id,
            len(points),
            result.saved_cloud,
        )
        return track, result


__all__ = ["TrackRecorder", "default_track_name"]
