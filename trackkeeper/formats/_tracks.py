"""Assembly of imported points into ``Track`` values."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config import LOG_SKIPPED_POINTS
from ..models import Track, TrackPoint, is_valid_coordinate
from ..utils import new_import_id

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Imported route {index}"


def make_point(
    lat: Optional[float],
    lng: Optional[float],
    altitude: Optional[float],
    timestamp: Optional[int],
    *,
    now_ms: int,
) -> Optional[TrackPoint]:
    """Build an imported point, or None when the position is unusable.

    Imported data carries no accuracy estimate, so accuracy is always 0.
    """

    if lat is None or lng is None or not is_valid_coordinate(lat, lng):
        if LOG_SKIPPED_POINTS:
            LOGGER.debug("Skipping point with invalid position lat=%s lng=%s", lat, lng)
        return None
    return TrackPoint(
        lat=lat,
        lng=lng,
        altitude=altitude,
        accuracy=0.0,
        timestamp=now_ms if timestamp is None else timestamp,
    )


def make_track(
    points: List[TrackPoint], name: Optional[str], *, position: int, now_ms: int
) -> Track:
    """Wrap points in a fresh track; ``position`` is the 1-based output index."""

    return Track(
        id=new_import_id(now_ms),
        name=name or PLACEHOLDER_NAME.format(index=position),
        points=points,
        created_at=now_ms,
    )
