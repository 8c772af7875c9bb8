"""Spherical geodesy helpers used by the editor, the CLI and the importer.

All functions accept either objects exposing ``lat``/``lng`` attributes
(``TrackPoint``) or plain ``(lat, lng)`` pairs. Distances are metres on a
sphere of radius 6 371 000 m.
"""

from __future__ import annotations

import math
from typing import Any, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

EARTH_RADIUS_M = 6_371_000.0

LatLng = Tuple[float, float]


def as_latlng(point: Any) -> LatLng:
    """Return ``(lat, lng)`` for a TrackPoint-like object or a pair."""

    if hasattr(point, "lat") and hasattr(point, "lng"):
        return float(point.lat), float(point.lng)
    lat, lng = point[0], point[1]
    return float(lat), float(lng)


def distance(a: Any, b: Any) -> float:
    """Great-circle (haversine) distance in metres."""

    lat1, lng1 = as_latlng(a)
    lat2, lng2 = as_latlng(b)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _pairwise_distances(points: Sequence[Any]) -> NDArray[np.float64]:
    """Vectorised haversine between consecutive points."""

    coords = np.radians(np.asarray([as_latlng(p) for p in points], dtype=float))
    phi = coords[:, 0]
    lam = coords[:, 1]
    d_phi = np.diff(phi)
    d_lambda = np.diff(lam)
    h = np.sin(d_phi / 2) ** 2 + np.cos(phi[:-1]) * np.cos(phi[1:]) * np.sin(
        d_lambda / 2
    ) ** 2
    # Rounding can push h a hair past 1 for antipodal pairs.
    h = np.clip(h, 0.0, 1.0)
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def cumulative_distances(points: Sequence[Any]) -> List[float]:
    """Distance from the first point to each point along the path."""

    if len(points) == 0:
        return []
    if len(points) == 1:
        return [0.0]
    steps = _pairwise_distances(points)
    cumulative = np.concatenate(([0.0], np.cumsum(steps)))
    return [float(value) for value in cumulative]


def track_distance(points: Sequence[Any]) -> float:
    """Total path length in metres; 0 for fewer than two points."""

    if len(points) < 2:
        return 0.0
    return float(np.sum(_pairwise_distances(points)))


def bearing(a: Any, b: Any) -> float:
    """Initial bearing from ``a`` to ``b`` in degrees [0, 360), 0 = north.

    Identical points yield 0.0 (``atan2(0, 0)``).
    """

    lat1, lng1 = as_latlng(a)
    lat2, lng2 = as_latlng(b)
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lng2 - lng1)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(
        phi2
    ) * math.cos(d_lambda)
    result = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0
    # (-tiny + 360) % 360 can round to exactly 360.0
    return 0.0 if result >= 360.0 else result


def destination(origin: Any, bearing_deg: float, distance_m: float) -> LatLng:
    """Point reached from ``origin`` after ``distance_m`` along ``bearing_deg``."""

    lat, lng = as_latlng(origin)
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(lat)
    lambda1 = math.radians(lng)
    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta)
        + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    lng2 = (math.degrees(lambda2) + 540.0) % 360.0 - 180.0
    return math.degrees(phi2), lng2


def elevation_profile(points: Sequence[Any]) -> List[Tuple[float, float]]:
    """``(cumulative_m, altitude)`` pairs for the points that carry altitude."""

    cumulative = cumulative_distances(points)
    profile: List[Tuple[float, float]] = []
    for dist, point in zip(cumulative, points):
        altitude = getattr(point, "altitude", None)
        if altitude is not None:
            profile.append((dist, float(altitude)))
    return profile


def elevation_gain_loss(points: Sequence[Any]) -> Tuple[float, float]:
    """Sum of positive and negative altitude steps, skipping missing altitudes."""

    altitudes = [
        float(p.altitude) for p in points if getattr(p, "altitude", None) is not None
    ]
    if len(altitudes) < 2:
        return 0.0, 0.0
    steps = np.diff(np.asarray(altitudes, dtype=float))
    gain = float(np.sum(steps[steps > 0]))
    loss = float(-np.sum(steps[steps < 0]))
    return gain, loss


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.2f} km"


def format_duration(seconds: float) -> str:
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    if minutes > 0:
        return f"{minutes} min {secs} s"
    return f"{secs} s"


__all__ = [
    "EARTH_RADIUS_M",
    "LatLng",
    "as_latlng",
    "distance",
    "cumulative_distances",
    "track_distance",
    "bearing",
    "destination",
    "elevation_profile",
    "elevation_gain_loss",
    "format_distance",
    "format_duration",
]
