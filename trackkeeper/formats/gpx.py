"""GPX reader producing canonical tracks.

Reads every ``trk`` (all ``trkseg``/``trkpt`` descendants, in document order).
When no track yields a point the reader falls back to ``rte``/``rtept``.
"""

from __future__ import annotations

import logging
from typing import List, Optional
import xml.etree.ElementTree as ET

from ..models import Track, TrackPoint
from ..utils import parse_iso8601_ms
from ._tracks import make_point, make_track
from ._xml import child_text, iter_named, parse_document, parse_float

LOGGER = logging.getLogger(__name__)


def parse_gpx(content: str | bytes, filename: str, *, now_ms: int) -> List[Track]:
    """Decode GPX text into zero or more tracks."""

    root = parse_document(content, filename)
    tracks = _extract(root, "trk", "trkpt", now_ms=now_ms)
    if not tracks:
        tracks = _extract(root, "rte", "rtept", now_ms=now_ms)
        if tracks:
            LOGGER.debug("%s has no usable trk, read %d route(s)", filename, len(tracks))
    return tracks


def _extract(
    root: ET.Element, container_tag: str, point_tag: str, *, now_ms: int
) -> List[Track]:
    tracks: List[Track] = []
    for container in iter_named(root, container_tag):
        points: List[TrackPoint] = []
        for node in iter_named(container, point_tag):
            point = _read_point(node, now_ms=now_ms)
            if point is not None:
                points.append(point)
        if not points:
            continue
        tracks.append(
            make_track(
                points,
                child_text(container, "name"),
                position=len(tracks) + 1,
                now_ms=now_ms,
            )
        )
    return tracks


def _read_point(node: ET.Element, *, now_ms: int) -> Optional[TrackPoint]:
    return make_point(
        parse_float(node.get("lat")),
        parse_float(node.get("lon")),
        parse_float(child_text(node, "ele")),
        parse_iso8601_ms(child_text(node, "time")),
        now_ms=now_ms,
    )
