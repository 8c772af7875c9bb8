"""Batch import of GPX/TCX files.

Each file is read, parsed and saved on its own; a broken file is reported in
its ``ImportFileResult`` and the batch carries on. Local store failures are
not per-file problems and propagate.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .errors import TrackFormatError
from .formats import parse_track_file
from .models import ImportFileResult
from .services.sync_engine import SyncEngine
from .utils import now_ms

LOGGER = logging.getLogger(__name__)

ImportSource = Union[str, Path, Tuple[str, Union[str, bytes]]]

SUPPORTED_EXTENSIONS = (".gpx", ".tcx")


def _read_source(source: ImportSource) -> Tuple[str, Union[str, bytes]]:
    if isinstance(source, tuple):
        return source
    path = Path(source)
    # Bytes let ElementTree honour the encoding in the XML declaration.
    return path.name, path.read_bytes()


def import_files(
    sources: Iterable[ImportSource],
    engine: SyncEngine,
    user_id: Optional[str] = None,
) -> List[ImportFileResult]:
    """Parse and persist every source; one result per source, in order.

    ``sources`` items are file paths or ``(filename, content)`` pairs.
    """

    results: List[ImportFileResult] = []
    for source in sources:
        label = source[0] if isinstance(source, tuple) else Path(source).name
        if not label.lower().endswith(SUPPORTED_EXTENSIONS):
            LOGGER.info("%s has no .gpx/.tcx extension, detecting format from content", label)
        try:
            filename, content = _read_source(source)
            tracks = parse_track_file(content, filename, now_ms=now_ms())
        except TrackFormatError as exc:
            LOGGER.warning("Skipping %s: %s", label, exc)
            results.append(ImportFileResult(filename=label, error=str(exc)))
            continue
        except OSError as exc:
            LOGGER.warning("Cannot read %s: %s", label, exc)
            results.append(ImportFileResult(filename=label, error=f"{label}: {exc}"))
            continue

        result = ImportFileResult(filename=filename, tracks=tracks)
        if not tracks:
            LOGGER.warning("No track with valid points in %s", filename)
        for track in tracks:
            saved = engine.save(track, user_id)
            if saved.saved_cloud:
                result.saved_cloud += 1
        LOGGER.info(
            "Imported %d track(s) from %s (%d in cloud)",
            len(tracks),
            filename,
            result.saved_cloud,
        )
        results.append(result)
    return results


__all__ = ["ImportSource", "SUPPORTED_EXTENSIONS", "import_files"]
