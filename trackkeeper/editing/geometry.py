"""Geometry editing primitives operating on point lists.

Every function is pure: inputs are never mutated and returned lists hold
fresh ``TrackPoint`` copies, so results can be stored in a track without
aliasing the undo history.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import List, Optional, Sequence

import numpy as np
from shapely.geometry import LineString

from ..config import SIMPLIFY_TOLERANCES
from ..geo import cumulative_distances, track_distance
from ..models import TrackPoint, is_valid_coordinate


@dataclass(frozen=True, slots=True)
class InsertionPoint:
    """A point projected onto the path and the index it must follow."""

    point: TrackPoint
    insert_after_index: int


def tolerance_for_level(level: str) -> float:
    """Degree tolerance for a named preset (``light``/``medium``/``strong``)."""

    try:
        return SIMPLIFY_TOLERANCES[level]
    except KeyError as exc:
        known = ", ".join(sorted(SIMPLIFY_TOLERANCES))
        raise ValueError(f"Unknown simplify level {level!r} (expected {known})") from exc


def simplify(points: Sequence[TrackPoint], tolerance: float) -> List[TrackPoint]:
    """Douglas-Peucker reduction with ``tolerance`` in coordinate degrees.

    Degrees are not metres: the same tolerance removes more east-west detail
    near the poles. Surviving vertices keep their original altitude and
    timestamp. Fewer than three points, or a non-positive tolerance, return
    the input unchanged.
    """

    if len(points) < 3 or tolerance <= 0:
        return list(points)
    line = LineString([(p.lng, p.lat) for p in points])
    simplified = line.simplify(tolerance, preserve_topology=False)
    kept = _match_vertices(points, list(simplified.coords))
    if len(kept) < 2:
        kept = [0, len(points) - 1]
    # Endpoints are kept unconditionally, even if GEOS drops a closed loop.
    if kept[0] != 0:
        kept.insert(0, 0)
    if kept[-1] != len(points) - 1:
        kept.append(len(points) - 1)
    return [points[i].copy() for i in kept]


def _match_vertices(points: Sequence[TrackPoint], coords: Sequence[Sequence[float]]) -> List[int]:
    """Map simplified coordinates back to indices of the original points, in order."""

    indices: List[int] = []
    cursor = 0
    for x, y in coords:
        while cursor < len(points):
            candidate = points[cursor]
            cursor += 1
            if candidate.lng == x and candidate.lat == y:
                indices.append(cursor - 1)
                break
    return indices


def _interpolate(a: TrackPoint, b: TrackPoint, t: float, lat: float, lng: float) -> TrackPoint:
    altitude: Optional[float] = None
    if a.altitude is not None and b.altitude is not None:
        altitude = a.altitude + (b.altitude - a.altitude) * t
    return TrackPoint(
        lat=lat,
        lng=lng,
        altitude=altitude,
        accuracy=0.0,
        timestamp=int(round(a.timestamp + (b.timestamp - a.timestamp) * t)),
    )


def project_and_insert(
    points: Sequence[TrackPoint], click_lat: float, click_lng: float
) -> Optional[InsertionPoint]:
    """Project a clicked coordinate onto the path and build the point to insert.

    Distances are compared in an equirectangular frame scaled by the cosine
    of the click latitude, which is accurate at editing scale. Returns None
    when the path has fewer than two points.
    """

    if len(points) < 2:
        return None
    scale = math.cos(math.radians(click_lat))
    coords = np.asarray([(p.lng * scale, p.lat) for p in points], dtype=float)
    target = np.asarray((click_lng * scale, click_lat), dtype=float)

    starts = coords[:-1]
    vectors = coords[1:] - starts
    lengths_sq = np.einsum("ij,ij->i", vectors, vectors)
    rel = target - starts
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(lengths_sq > 0, np.einsum("ij,ij->i", rel, vectors) / lengths_sq, 0.0)
    t = np.clip(t, 0.0, 1.0)
    nearest = starts + vectors * t[:, None]
    offsets = np.linalg.norm(nearest - target, axis=1)
    index = int(np.argmin(offsets))
    ratio = float(t[index])

    a = points[index]
    b = points[index + 1]
    lat = a.lat + (b.lat - a.lat) * ratio
    lng = a.lng + (b.lng - a.lng) * ratio
    return InsertionPoint(point=_interpolate(a, b, ratio, lat, lng), insert_after_index=index)


def insert_point(points: Sequence[TrackPoint], insertion: InsertionPoint) -> List[TrackPoint]:
    result = [p.copy() for p in points]
    result.insert(insertion.insert_after_index + 1, insertion.point.copy())
    return result


def move_point(
    points: Sequence[TrackPoint], index: int, lat: float, lng: float
) -> List[TrackPoint]:
    """Return a copy with point ``index`` relocated; time and altitude are kept."""

    if not 0 <= index < len(points):
        raise IndexError(f"Point index {index} out of range")
    if not is_valid_coordinate(lat, lng):
        raise ValueError(f"Coordinate out of range: lat={lat} lng={lng}")
    result = [p.copy() for p in points]
    result[index].lat = lat
    result[index].lng = lng
    return result


def remove_point(points: Sequence[TrackPoint], index: int) -> List[TrackPoint]:
    """Return a copy without point ``index``. A path keeps at least two points."""

    if not 0 <= index < len(points):
        raise IndexError(f"Point index {index} out of range")
    if len(points) <= 2:
        raise ValueError("A track needs at least two points")
    return [p.copy() for i, p in enumerate(points) if i != index]


def slice_between_indices(points: Sequence[TrackPoint], i: int, j: int) -> List[TrackPoint]:
    """Inclusive sub-path between two indices, in path order.

    Empty when ``i == j`` or the path has fewer than two points. Indices
    outside the path are clamped to its ends.
    """

    if len(points) < 2 or i == j:
        return []
    last = len(points) - 1
    lo = min(max(min(i, j), 0), last)
    hi = min(max(max(i, j), 0), last)
    if lo == hi:
        return []
    return [p.copy() for p in points[lo : hi + 1]]


def segment_length(points: Sequence[TrackPoint]) -> float:
    """Path length in metres; 0 for fewer than two points."""

    return track_distance(points)


def slice_along(points: Sequence[TrackPoint], start_m: float, stop_m: float) -> List[TrackPoint]:
    """Sub-path between two distances from the start, with interpolated ends."""

    if len(points) < 2 or start_m >= stop_m:
        return []
    cumulative = cumulative_distances(points)
    total = cumulative[-1]
    if total <= 0:
        return []
    start = min(max(start_m, 0.0), total)
    stop = min(max(stop_m, 0.0), total)
    if start >= stop:
        return []

    result = [_point_at(points, cumulative, start)]
    for dist, point in zip(cumulative, points):
        if start < dist < stop:
            result.append(point.copy())
    result.append(_point_at(points, cumulative, stop))
    return result


def _point_at(points: Sequence[TrackPoint], cumulative: Sequence[float], target: float) -> TrackPoint:
    index = int(np.searchsorted(cumulative, target, side="right")) - 1
    index = min(max(index, 0), len(points) - 2)
    span = cumulative[index + 1] - cumulative[index]
    ratio = 0.0 if span <= 0 else (target - cumulative[index]) / span
    a = points[index]
    b = points[index + 1]
    if ratio <= 0.0:
        return a.copy()
    if ratio >= 1.0:
        return b.copy()
    lat = a.lat + (b.lat - a.lat) * ratio
    lng = a.lng + (b.lng - a.lng) * ratio
    point = _interpolate(a, b, ratio, lat, lng)
    point.accuracy = a.accuracy
    return point


__all__ = [
    "InsertionPoint",
    "tolerance_for_level",
    "simplify",
    "project_and_insert",
    "insert_point",
    "move_point",
    "remove_point",
    "slice_between_indices",
    "segment_length",
    "slice_along",
]
