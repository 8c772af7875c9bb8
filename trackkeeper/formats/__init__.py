"""GPX/TCX readers.

``parse_track_file`` picks the reader from the file extension first and from
the content second, then returns the tracks found in the document.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from ..errors import UnrecognizedFormat
from ..models import Track
from ..utils import now_ms as _now_ms
from .gpx import parse_gpx
from .tcx import parse_tcx


class TrackFormat(str, Enum):
    GPX = "gpx"
    TCX = "tcx"


def detect_format(content: str | bytes, filename: str) -> TrackFormat:
    """Return the format for ``filename``/``content`` or raise UnrecognizedFormat."""

    lower = filename.lower()
    if lower.endswith(".gpx"):
        return TrackFormat.GPX
    if lower.endswith(".tcx"):
        return TrackFormat.TCX
    text = content.decode("utf-8", errors="ignore") if isinstance(content, bytes) else content
    if "<gpx" in text and "</gpx>" in text:
        return TrackFormat.GPX
    if "TrainingCenterDatabase" in text:
        return TrackFormat.TCX
    raise UnrecognizedFormat(filename)


def parse_track_file(
    content: str | bytes, filename: str, *, now_ms: Optional[int] = None
) -> List[Track]:
    """Parse a GPX or TCX document into tracks.

    Args:
        content: Raw document text (or bytes, honouring the XML declaration).
        filename: Name used for format detection and error reporting.
        now_ms: Ingestion time; used for ``created_at`` and for points
            without a timestamp. Defaults to the current time.

    Raises:
        UnrecognizedFormat: Neither extension nor content matched.
        ParseError: The document is not well-formed XML.
    """

    ingested = _now_ms() if now_ms is None else now_ms
    fmt = detect_format(content, filename)
    if fmt is TrackFormat.GPX:
        return parse_gpx(content, filename, now_ms=ingested)
    return parse_tcx(content, filename, now_ms=ingested)


__all__ = ["TrackFormat", "detect_format", "parse_track_file", "parse_gpx", "parse_tcx"]
