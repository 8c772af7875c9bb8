"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable track, store and engine
fixtures so individual test modules stay short.
"""
from __future__ import annotations

import os
import sys
from typing import List

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from trackkeeper.models import Track, TrackPoint
from trackkeeper.services import SyncEngine
from trackkeeper.stores import MemoryRemoteTrackStore, MemoryTrackStore


# --- Factory helpers -------------------------------------------------
def make_points(count: int = 5, *, start_ms: int = 1_700_000_000_000) -> List[TrackPoint]:
    """A gently curving path heading north-east, one fix every 10 s."""
    points = []
    for i in range(count):
        points.append(
            TrackPoint(
                lat=41.3851 + i * 0.0005,
                lng=2.1734 + i * 0.0004 + (0.0002 if i % 2 else 0.0),
                altitude=100.0 + i * 2.0,
                accuracy=5.0,
                timestamp=start_ms + i * 10_000,
            )
        )
    return points


def make_track(track_id: str = "t1", *, created_at: int = 1_700_000_100_000, count: int = 5) -> Track:
    return Track(
        id=track_id,
        name=f"Track {track_id}",
        points=make_points(count),
        created_at=created_at,
    )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def sample_points():
    return make_points()


@pytest.fixture
def sample_track():
    return make_track()


@pytest.fixture
def remote_store():
    return MemoryRemoteTrackStore()


@pytest.fixture
def local_store():
    return MemoryTrackStore()


@pytest.fixture
def engine(local_store, remote_store):
    return SyncEngine(local_store, remote_store)


@pytest.fixture
def make_device(remote_store):
    """Build engines that share one remote store, like two phones of one user."""

    def _make() -> SyncEngine:
        return SyncEngine(MemoryTrackStore(), remote_store)

    return _make
