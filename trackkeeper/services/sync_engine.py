"""Offline-first synchronisation between the local and the remote track store.

The local store is always written first and its failures propagate. Remote
calls are best effort: any remote failure is logged and turned into a
degraded return value (``saved_cloud=False``, a local-only listing, a
``failed`` counter), never an exception.

Deletions travel between devices as tombstones in the remote ``deleted``
collection. Every device drops its local copy when it sees a tombstone, and
``reconcile`` consumes the tombstones written by other devices: it deletes any
remote copy, deletes the tombstone and counts it as ``removed``. The issuing
device records its own tombstones in the sync journal and leaves them for the
others; unclaimed ones expire after ``TOMBSTONE_TTL_DAYS``. A delete made
while the remote is unreachable is journalled and replayed by ``reconcile``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Dict, List, Optional, Set, Tuple, TypeVar

from ..config import TOMBSTONE_TTL_DAYS
from ..errors import RemoteUnavailable
from ..models import (
    ListResult,
    ReconcileResult,
    SaveResult,
    Tombstone,
    Track,
    TrackLocation,
)
from ..stores.journal import (
    ISSUED_TOMBSTONES,
    PENDING_DELETES,
    MemorySyncJournal,
    SyncJournal,
)
from ..stores.local import TrackStore
from ..stores.remote import RemoteTrackStore
from ..utils import now_ms

T = TypeVar("T")

_MS_PER_DAY = 24 * 3600 * 1000


@dataclass(slots=True)
class SyncEngineConfig:
    tombstone_ttl_days: int = TOMBSTONE_TTL_DAYS
    clock: Callable[[], int] = now_ms
    logger: logging.Logger | None = None


def _newest_first(tracks: List[Track]) -> List[Track]:
    return sorted(tracks, key=lambda t: t.created_at, reverse=True)


class SyncEngine:
    """Merged view over a local store and an optional remote store.

    Both stores and the journal are created once by the caller and injected
    here. A call without ``user_id`` (no session) or an engine without a
    remote store behaves as purely local.
    """

    def __init__(
        self,
        local: TrackStore,
        remote: Optional[RemoteTrackStore] = None,
        config: SyncEngineConfig | None = None,
        journal: Optional[SyncJournal] = None,
    ) -> None:
        self.local = local
        self.remote = remote
        self.config = config or SyncEngineConfig()
        self.journal = journal if journal is not None else MemorySyncJournal()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _session_remote(self, user_id: Optional[str]) -> Optional[RemoteTrackStore]:
        """The remote store when a user session exists, else None."""

        if not user_id:
            return None
        return self.remote

    def _remote_call(
        self, context: str, func: Callable[..., T], *args: object
    ) -> Tuple[bool, Optional[T]]:
        """Run a remote call; return ``(ok, value)`` instead of raising."""

        try:
            return True, func(*args)
        except RemoteUnavailable as exc:
            self._log.warning("Remote %s unavailable: %s", context, exc)
        except Exception as exc:  # pragma: no cover - unexpected remote error
            self._log.error(
                "Remote %s failed due to unexpected error: %s",
                context,
                exc,
                exc_info=True,
            )
        return False, None

    def _local_listing(self) -> ListResult:
        tracks = _newest_first(self.local.get_all())
        return ListResult(tracks=tracks, local_only_ids={t.id for t in tracks})

    def _fetch_tombstones(
        self, remote: RemoteTrackStore, user_id: str
    ) -> Optional[List[Tombstone]]:
        ok, tombstones = self._remote_call(
            "tombstone fetch", remote.list_tombstones, user_id
        )
        return tombstones if ok else None

    def _apply_tombstone(self, tombstone: Tombstone) -> bool:
        """Drop the local copy named by ``tombstone``; True when one existed."""

        if self.local.get(tombstone.track_id) is None:
            return False
        self.local.delete(tombstone.track_id)
        self._log.info(
            "Removed local track=%s deleted on another device", tombstone.track_id
        )
        return True

    def _is_expired(self, tombstone: Tombstone) -> bool:
        ttl_days = self.config.tombstone_ttl_days
        if ttl_days <= 0:
            return False
        return self.config.clock() - tombstone.deleted_at > ttl_days * _MS_PER_DAY

    def _propagate_delete(
        self, remote: RemoteTrackStore, user_id: str, track_id: str
    ) -> bool:
        """Delete the remote copy and write a tombstone; True when both succeed."""

        deleted, _ = self._remote_call(
            f"delete of track={track_id}", remote.delete_track, user_id, track_id
        )
        tombstone = Tombstone(track_id=track_id, deleted_at=self.config.clock())
        written, _ = self._remote_call(
            f"tombstone write for track={track_id}",
            remote.put_tombstone,
            user_id,
            tombstone,
        )
        if written:
            self.journal.add(ISSUED_TOMBSTONES, track_id)
        if deleted and written:
            self.journal.discard(PENDING_DELETES, track_id)
            return True
        self.journal.add(PENDING_DELETES, track_id)
        self._log.info("Delete of track=%s queued until next sync", track_id)
        return False

    def _consume_tombstone(
        self, remote: RemoteTrackStore, user_id: str, track_id: str
    ) -> bool:
        # A stale remote copy would otherwise resurface as cloud-only.
        self._remote_call(
            f"delete of track={track_id}", remote.delete_track, user_id, track_id
        )
        ok, _ = self._remote_call(
            f"tombstone consume for track={track_id}",
            remote.delete_tombstone,
            user_id,
            track_id,
        )
        if ok:
            self.journal.discard(ISSUED_TOMBSTONES, track_id)
        return ok

    # ------------------------------------------------------------------
    # public operations
    # ------------------------------------------------------------------
    def save(self, track: Track, user_id: Optional[str] = None) -> SaveResult:
        """Persist locally (must succeed), then try the remote store."""

        self.local.put(track)
        self.journal.discard(PENDING_DELETES, track.id)
        remote = self._session_remote(user_id)
        if remote is None or not user_id:
            return SaveResult(saved_local=True, saved_cloud=False)
        ok, _ = self._remote_call(
            f"save of track={track.id}", remote.put_track, user_id, track
        )
        if not ok:
            self._log.info("Track %s kept local-only until next sync", track.id)
        return SaveResult(saved_local=True, saved_cloud=ok)

    def list(self, user_id: Optional[str] = None) -> ListResult:
        """Remote tracks plus local-only tracks, newest first.

        Tracks with a pending delete or a live tombstone are never listed.
        """

        remote = self._session_remote(user_id)
        if remote is None or not user_id:
            return self._local_listing()

        tombstones = self._fetch_tombstones(remote, user_id)
        if tombstones is None:
            return self._local_listing()
        for tombstone in tombstones:
            self._apply_tombstone(tombstone)

        ok, cloud_tracks = self._remote_call("listing", remote.list_tracks, user_id)
        if not ok or cloud_tracks is None:
            self._log.warning("Falling back to local tracks only")
            return self._local_listing()

        hidden = {t.track_id for t in tombstones} | self.journal.ids(PENDING_DELETES)
        visible_cloud = [t for t in cloud_tracks if t.id not in hidden]
        cloud_ids = {t.id for t in visible_cloud}
        local_only = [t for t in self.local.get_all() if t.id not in cloud_ids]
        tracks = _newest_first(visible_cloud + local_only)
        return ListResult(tracks=tracks, local_only_ids={t.id for t in local_only})

    def get(self, track_id: str, user_id: Optional[str] = None) -> Optional[Track]:
        """Remote copy when a session exists and the remote has it, else local."""

        if track_id in self.journal.ids(PENDING_DELETES):
            return None
        remote = self._session_remote(user_id)
        if remote is not None and user_id:
            ok, track = self._remote_call(
                f"fetch of track={track_id}", remote.get_track, user_id, track_id
            )
            if ok and track is not None:
                return track
        return self.local.get(track_id)

    def upload_pending(self, track: Track, user_id: str) -> bool:
        """Promote a local-only track to the remote store and drop the local copy."""

        remote = self._session_remote(user_id)
        if remote is None:
            return False
        ok, _ = self._remote_call(
            f"upload of track={track.id}", remote.put_track, user_id, track
        )
        if not ok:
            return False
        self.local.delete(track.id)
        self._log.info("Uploaded track=%s, local copy released", track.id)
        return True

    def delete(self, track_id: str, user_id: Optional[str] = None) -> None:
        """Delete everywhere and leave a tombstone for other devices.

        When the remote cannot be reached the delete is journalled and
        ``reconcile`` replays it.
        """

        self.local.delete(track_id)
        remote = self._session_remote(user_id)
        if remote is None or not user_id:
            return
        self._propagate_delete(remote, user_id, track_id)

    def reconcile(self, user_id: str) -> ReconcileResult:
        """Replay queued deletes, consume tombstones, then push local-only tracks."""

        result = ReconcileResult()
        remote = self._session_remote(user_id)
        if remote is None:
            return result

        tombstones = self._fetch_tombstones(remote, user_id)
        if tombstones is None:
            return result

        live_ids = {t.track_id for t in tombstones}
        for track_id in self.journal.ids(ISSUED_TOMBSTONES) - live_ids:
            # Another device consumed it.
            self.journal.discard(ISSUED_TOMBSTONES, track_id)
        for track_id in sorted(self.journal.ids(PENDING_DELETES)):
            if self._propagate_delete(remote, user_id, track_id):
                self._log.info("Replayed queued delete of track=%s", track_id)

        issued = self.journal.ids(ISSUED_TOMBSTONES)
        for tombstone in tombstones:
            self._apply_tombstone(tombstone)
            if tombstone.track_id in issued and not self._is_expired(tombstone):
                continue
            if self._consume_tombstone(remote, user_id, tombstone.track_id):
                result.removed += 1

        ok, cloud_ids = self._remote_call("listing", remote.list_track_ids, user_id)
        if not ok or cloud_ids is None:
            return result

        pending_deletes = self.journal.ids(PENDING_DELETES)
        pending = [
            t
            for t in self.local.get_all()
            if t.id not in cloud_ids and t.id not in pending_deletes
        ]
        for track in pending:
            if self.upload_pending(track, user_id):
                result.synced += 1
            else:
                result.failed += 1

        if result.synced or result.failed or result.removed:
            self._log.info(
                "Reconciled user=%s synced=%d failed=%d removed=%d",
                user_id,
                result.synced,
                result.failed,
                result.removed,
            )
        return result

    def classify(self, user_id: Optional[str] = None) -> Dict[str, TrackLocation]:
        """Where each known track lives right now."""

        local_ids = {t.id for t in self.local.get_all()}
        remote = self._session_remote(user_id)
        if remote is None or not user_id:
            return {tid: TrackLocation.LOCAL_ONLY for tid in local_ids}
        ok, remote_ids = self._remote_call("listing", remote.list_track_ids, user_id)
        if not ok or remote_ids is None:
            return {tid: TrackLocation.LOCAL_ONLY for tid in local_ids}
        cloud_ids: Set[str] = set(remote_ids) - self.journal.ids(PENDING_DELETES)
        locations: Dict[str, TrackLocation] = {}
        for tid in local_ids | cloud_ids:
            if tid in local_ids and tid in cloud_ids:
                locations[tid] = TrackLocation.BOTH
            elif tid in local_ids:
                locations[tid] = TrackLocation.LOCAL_ONLY
            else:
                locations[tid] = TrackLocation.CLOUD_ONLY
        return locations


__all__ = ["SyncEngine", "SyncEngineConfig"]
