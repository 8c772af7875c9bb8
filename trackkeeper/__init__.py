"""trackkeeper: GPS track geometry and offline-first sync package."""

from .errors import (
    LocalStoreFailure,
    ParseError,
    RemoteUnavailable,
    TrackKeeperError,
    UnrecognizedFormat,
)
from .models import Tombstone, Track, TrackPoint
from .recorder import TrackRecorder
from .services import SyncEngine

__all__ = [
    "Track",
    "TrackPoint",
    "Tombstone",
    "SyncEngine",
    "TrackRecorder",
    "TrackKeeperError",
    "UnrecognizedFormat",
    "ParseError",
    "RemoteUnavailable",
    "LocalStoreFailure",
]
