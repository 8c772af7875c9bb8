"""Tests for the spherical geodesy helpers."""

from __future__ import annotations

import pytest

from trackkeeper import geo
from trackkeeper.models import TrackPoint


def test_distance_zero_for_same_point(sample_points) -> None:
    for point in sample_points:
        assert geo.distance(point, point) == 0.0


def test_distance_is_symmetric(sample_points) -> None:
    a, b = sample_points[0], sample_points[-1]
    assert geo.distance(a, b) == pytest.approx(geo.distance(b, a))


def test_distance_one_degree_of_latitude() -> None:
    # pi * R / 180
    assert geo.distance((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111_194.93, rel=1e-6)


def test_distance_accepts_pairs_and_points() -> None:
    point = TrackPoint(lat=48.8566, lng=2.3522)
    assert geo.distance(point, (51.5074, -0.1278)) == pytest.approx(343_500, rel=5e-3)


def test_cumulative_distances_starts_at_zero_and_grows(sample_points) -> None:
    cumulative = geo.cumulative_distances(sample_points)
    assert len(cumulative) == len(sample_points)
    assert cumulative[0] == 0.0
    assert all(b >= a for a, b in zip(cumulative, cumulative[1:]))
    assert cumulative[-1] == pytest.approx(geo.track_distance(sample_points))


def test_cumulative_distances_edge_cases() -> None:
    assert geo.cumulative_distances([]) == []
    assert geo.cumulative_distances([(10.0, 10.0)]) == [0.0]


def test_cumulative_distance_with_repeated_point() -> None:
    points = [(1.0, 1.0), (1.0, 1.0), (1.0, 1.001)]
    cumulative = geo.cumulative_distances(points)
    assert cumulative[1] == 0.0
    assert cumulative[2] > 0.0


def test_bearing_cardinal_directions() -> None:
    origin = (0.0, 0.0)
    assert geo.bearing(origin, (1.0, 0.0)) == pytest.approx(0.0)
    assert geo.bearing(origin, (0.0, 1.0)) == pytest.approx(90.0)
    assert geo.bearing(origin, (-1.0, 0.0)) == pytest.approx(180.0)
    assert geo.bearing(origin, (0.0, -1.0)) == pytest.approx(270.0)


def test_bearing_identical_points_is_zero() -> None:
    assert geo.bearing((45.0, 7.0), (45.0, 7.0)) == 0.0


def test_bearing_range(sample_points) -> None:
    for a in sample_points:
        for b in sample_points:
            value = geo.bearing(a, b)
            assert 0.0 <= value < 360.0


def test_destination_round_trip() -> None:
    origin = (41.3851, 2.1734)
    target = geo.destination(origin, 37.0, 1500.0)
    assert geo.distance(origin, target) == pytest.approx(1500.0, abs=0.01)
    assert geo.bearing(origin, target) == pytest.approx(37.0, abs=1e-6)


def test_destination_wraps_longitude() -> None:
    lat, lng = geo.destination((0.0, 179.9), 90.0, 50_000.0)
    assert -180.0 <= lng < 180.0
    assert lng < 0


def test_elevation_profile_skips_missing_altitude() -> None:
    points = [
        TrackPoint(lat=0.0, lng=0.0, altitude=10.0),
        TrackPoint(lat=0.0, lng=0.001, altitude=None),
        TrackPoint(lat=0.0, lng=0.002, altitude=14.0),
    ]
    profile = geo.elevation_profile(points)
    assert [alt for _, alt in profile] == [10.0, 14.0]
    assert profile[1][0] == pytest.approx(geo.track_distance(points))


def test_elevation_gain_loss() -> None:
    points = [TrackPoint(lat=0.0, lng=i * 0.001, altitude=alt) for i, alt in enumerate([100, 110, 105, 120])]
    gain, loss = geo.elevation_gain_loss(points)
    assert gain == pytest.approx(25.0)
    assert loss == pytest.approx(5.0)


@pytest.mark.parametrize(
    "meters, expected",
    [(0, "0 m"), (850.4, "850 m"), (1000, "1.00 km"), (12_346, "12.35 km")],
)
def test_format_distance(meters, expected) -> None:
    assert geo.format_distance(meters) == expected


def test_format_duration() -> None:
    assert geo.format_duration(42) == "42 s"
    assert geo.format_duration(185) == "3 min 5 s"
