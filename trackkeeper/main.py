"""Command-line entry point.

Usage examples:

    # Import files into the local store (and the cloud when configured)
    python -m trackkeeper import morning_run.gpx ride.tcx

    # List tracks, marking the ones not yet in the cloud
    python -m trackkeeper --user alice list

    # Simplify a track with the medium preset and save it
    python -m trackkeeper simplify <track-id> --level medium

    # Push local-only tracks and apply deletions from other devices
    python -m trackkeeper --user alice sync

    # Record a track from a CSV of fixes (lat,lng,accuracy,altitude,timestamp)
    python -m trackkeeper record fixes.csv --name "Evening walk"
"""

from __future__ import annotations

import argparse
import csv
import logging
from typing import Optional, Sequence

from .config import (
    DATA_DIR,
    DEFAULT_SIMPLIFY_LEVEL,
    DEFAULT_USER_ID,
    LOG_LEVEL,
    REMOTE_TOKEN,
    REMOTE_URL,
    SIMPLIFY_TOLERANCES,
)
from .editing import EditSession
from .errors import LocalStoreFailure
from .geo import (
    elevation_gain_loss,
    format_distance,
    format_duration,
    track_distance,
)
from .importer import import_files
from .models import Track
from .recorder import TrackRecorder
from .services import SyncEngine
from .stores import FileSyncJournal, FileTrackStore, HttpRemoteTrackStore
from .utils import format_timestamp

LOGGER = logging.getLogger(__name__)

# Sub-directory of the data dir holding sync bookkeeping; track files sit at the top level.
JOURNAL_DIRNAME = ".sync"


def _setup_logging(level: str = LOG_LEVEL) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def build_engine(
    data_dir: str = DATA_DIR,
    remote_url: str = REMOTE_URL,
    token: str = REMOTE_TOKEN,
) -> SyncEngine:
    """Create the process-wide stores once and wire them into an engine."""

    local = FileTrackStore(data_dir)
    journal = FileSyncJournal(local.base_dir / JOURNAL_DIRNAME / "journal.json")
    remote = HttpRemoteTrackStore(remote_url, token=token) if remote_url else None
    if remote is None:
        LOGGER.debug("No remote URL configured; running local-only")
    return SyncEngine(local, remote, journal=journal)


def _describe(track: Track) -> str:
    return (
        f"{track.name} | {format_timestamp(track.created_at)} | "
        f"{format_distance(track_distance(track.points))} | "
        f"{format_duration(track.duration_s)} | {len(track.points)} pts"
    )


def _cmd_import(engine: SyncEngine, args: argparse.Namespace) -> int:
    results = import_files(args.files, engine, args.user)
    failures = 0
    for result in results:
        if result.ok:
            print(f"{result.filename}: {len(result.tracks)} track(s) imported")
        else:
            failures += 1
            print(f"{result.filename}: FAILED ({result.error})")
    return 1 if failures else 0


def _cmd_list(engine: SyncEngine, args: argparse.Namespace) -> int:
    listing = engine.list(args.user)
    if not listing.tracks:
        print("No tracks")
        return 0
    for track in listing.tracks:
        marker = "local" if track.id in listing.local_only_ids else "cloud"
        print(f"{track.id}  [{marker}]  {_describe(track)}")
    return 0


def _cmd_show(engine: SyncEngine, args: argparse.Namespace) -> int:
    track = engine.get(args.track_id, args.user)
    if track is None:
        print(f"Track {args.track_id} not found")
        return 1
    gain, loss = elevation_gain_loss(track.points)
    print(_describe(track))
    print(f"Elevation: +{gain:.0f} m / -{loss:.0f} m")
    return 0


def _cmd_simplify(engine: SyncEngine, args: argparse.Namespace) -> int:
    track = engine.get(args.track_id, args.user)
    if track is None:
        print(f"Track {args.track_id} not found")
        return 1
    session = EditSession(track)
    session.begin_edit()
    if args.tolerance is not None:
        removed = session.simplify(args.tolerance)
    else:
        removed = session.simplify_level(args.level)
    if not session.has_unsaved_changes:
        print("Nothing to simplify")
        session.request_exit()
        return 0
    result = session.save(engine, args.user)
    print(
        f"Removed {removed} point(s), {len(session.track.points)} left"
        f" ({'cloud' if result.saved_cloud else 'local only'})"
    )
    return 0


def _cmd_sync(engine: SyncEngine, args: argparse.Namespace) -> int:
    if not args.user or engine.remote is None:
        print("Sync needs --user and TRACKKEEPER_REMOTE_URL")
        return 1
    result = engine.reconcile(args.user)
    print(f"synced={result.synced} failed={result.failed} removed={result.removed}")
    return 1 if result.failed else 0


def _cmd_upload(engine: SyncEngine, args: argparse.Namespace) -> int:
    track = engine.local.get(args.track_id)
    if track is None:
        print(f"No local track {args.track_id}")
        return 1
    if not engine.upload_pending(track, args.user):
        print("Upload failed; the track stays local")
        return 1
    print(f"Uploaded {track.id}")
    return 0


def _cmd_delete(engine: SyncEngine, args: argparse.Namespace) -> int:
    engine.delete(args.track_id, args.user)
    print(f"Deleted {args.track_id}")
    return 0


def _optional_float(value: str) -> Optional[float]:
    value = value.strip()
    return float(value) if value else None


def _cmd_record(engine: SyncEngine, args: argparse.Namespace) -> int:
    """Replay a CSV of fixes (``lat,lng[,accuracy[,altitude[,timestamp]]]``)."""

    recorder = TrackRecorder(engine)
    recorder.start()
    skipped = 0
    try:
        with open(args.fixes, "r", encoding="utf-8", newline="") as handle:
            for row in csv.reader(handle):
                if not row or row[0].strip().startswith("#") or row[0].strip() == "lat":
                    continue
                try:
                    lat, lng = float(row[0]), float(row[1])
                    accuracy = _optional_float(row[2]) if len(row) > 2 else None
                    altitude = _optional_float(row[3]) if len(row) > 3 else None
                    timestamp = int(row[4]) if len(row) > 4 and row[4].strip() else None
                except (IndexError, ValueError):
                    skipped += 1
                    continue
                if not recorder.add_fix(
                    lat,
                    lng,
                    accuracy=accuracy or 0.0,
                    altitude=altitude,
                    timestamp=timestamp,
                ):
                    skipped += 1
    except OSError as exc:
        recorder.cancel()
        print(f"Cannot read {args.fixes}: {exc}")
        return 1
    if skipped:
        LOGGER.warning("Skipped %d unusable fix row(s) in %s", skipped, args.fixes)
    outcome = recorder.stop(args.user, name=args.name)
    if outcome is None:
        print("Not enough fixes to save a track")
        return 1
    track, result = outcome
    print(
        f"Recorded {track.id}: {len(track.points)} pts"
        f" ({'cloud' if result.saved_cloud else 'local only'})"
    )
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="trackkeeper", description="Offline-first GPS track manager"
    )
    parser.add_argument("--data-dir", default=DATA_DIR, help="Local track directory")
    parser.add_argument(
        "--user",
        default=DEFAULT_USER_ID or None,
        help="Remote user id (defaults to TRACKKEEPER_USER_ID); omit for local-only",
    )
    parser.add_argument("--remote-url", default=REMOTE_URL, help="Remote store base URL")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Import GPX/TCX files")
    p_import.add_argument("files", nargs="+")
    p_import.set_defaults(handler=_cmd_import)

    p_list = sub.add_parser("list", help="List tracks, newest first")
    p_list.set_defaults(handler=_cmd_list)

    p_show = sub.add_parser("show", help="Show one track")
    p_show.add_argument("track_id")
    p_show.set_defaults(handler=_cmd_show)

    p_simplify = sub.add_parser("simplify", help="Reduce the points of a track")
    p_simplify.add_argument("track_id")
    p_simplify.add_argument(
        "--level",
        choices=sorted(SIMPLIFY_TOLERANCES),
        default=DEFAULT_SIMPLIFY_LEVEL,
    )
    p_simplify.add_argument(
        "--tolerance", type=float, help="Tolerance in degrees (overrides --level)"
    )
    p_simplify.set_defaults(handler=_cmd_simplify)

    p_sync = sub.add_parser("sync", help="Reconcile local and remote stores")
    p_sync.set_defaults(handler=_cmd_sync)

    p_upload = sub.add_parser("upload", help="Upload one local-only track")
    p_upload.add_argument("track_id")
    p_upload.set_defaults(handler=_cmd_upload)

    p_delete = sub.add_parser("delete", help="Delete a track on every device")
    p_delete.add_argument("track_id")
    p_delete.set_defaults(handler=_cmd_delete)

    p_record = sub.add_parser("record", help="Record a track from a CSV of GPS fixes")
    p_record.add_argument("fixes", help="CSV rows: lat,lng[,accuracy[,altitude[,timestamp]]]")
    p_record.add_argument("--name", help="Track name (defaults to the date)")
    p_record.set_defaults(handler=_cmd_record)

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _setup_logging(args.log_level)
    try:
        engine = build_engine(args.data_dir, args.remote_url)
        return args.handler(engine, args)
    except LocalStoreFailure as exc:
        LOGGER.error("Local store failure: %s", exc)
        return 2
