"""TCX (Garmin Training Center) reader producing canonical tracks.

Two document shapes are supported:

- activity logs: ``Activity`` > ``Lap`` > ``Track`` > ``Trackpoint``
- courses (route exports): ``Course`` > ``Track`` > ``Trackpoint``

Each activity or course becomes at most one track; laps are concatenated.
"""

from __future__ import annotations

from typing import List, Optional
import xml.etree.ElementTree as ET

from ..models import Track, TrackPoint
from ..utils import parse_iso8601_ms
from ._tracks import make_point, make_track
from ._xml import (
    child_text,
    children_named,
    first_child,
    iter_named,
    parse_document,
    parse_float,
)


def parse_tcx(content: str | bytes, filename: str, *, now_ms: int) -> List[Track]:
    """Decode TCX text into zero or more tracks."""

    root = parse_document(content, filename)
    items = list(iter_named(root, "Activity"))
    if not items:
        items = list(iter_named(root, "Course"))

    tracks: List[Track] = []
    for item in items:
        points: List[TrackPoint] = []
        for track_elem in _track_elements(item):
            for node in iter_named(track_elem, "Trackpoint"):
                point = _read_trackpoint(node, now_ms=now_ms)
                if point is not None:
                    points.append(point)
        if not points:
            continue
        name = (item.get("Sport") or "").strip() or child_text(item, "Name")
        tracks.append(
            make_track(points, name, position=len(tracks) + 1, now_ms=now_ms)
        )
    return tracks


def _track_elements(item: ET.Element) -> List[ET.Element]:
    direct = children_named(item, "Track")
    if direct:
        return direct
    found: List[ET.Element] = []
    for lap in children_named(item, "Lap"):
        found.extend(children_named(lap, "Track"))
    return found


def _read_trackpoint(node: ET.Element, *, now_ms: int) -> Optional[TrackPoint]:
    position = first_child(node, "Position")
    if position is None:
        return None
    return make_point(
        parse_float(child_text(position, "LatitudeDegrees")),
        parse_float(child_text(position, "LongitudeDegrees")),
        parse_float(child_text(node, "AltitudeMeters")),
        parse_iso8601_ms(child_text(node, "Time")),
        now_ms=now_ms,
    )
