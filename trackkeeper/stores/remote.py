"""Remote document store for tracks and tombstones.

Each user owns two collections:

- ``tracks`` keyed by track id: ``{name, points, startTime, endTime, createdAt}``
- ``deleted`` keyed by track id: ``{at}`` (tombstones)

Every failure (network, timeout, auth, server, bad payload) is raised as
``RemoteUnavailable`` so the sync engine can treat them uniformly.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Protocol, Set, runtime_checkable
from urllib.parse import quote

import requests
from requests import Session

from ..config import REQUEST_TIMEOUT
from ..errors import RemoteUnavailable
from ..models import Tombstone, Track
from .response_handling import classify_response, response_json
from .session import create_session

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class RemoteTrackStore(Protocol):
    """Per-user document store. All methods may raise RemoteUnavailable."""

    def put_track(self, user_id: str, track: Track) -> None: ...

    def get_track(self, user_id: str, track_id: str) -> Optional[Track]: ...

    def list_tracks(self, user_id: str) -> List[Track]:
        """All tracks of the user ordered by ``createdAt`` descending."""
        ...

    def list_track_ids(self, user_id: str) -> Set[str]: ...

    def delete_track(self, user_id: str, track_id: str) -> None: ...

    def put_tombstone(self, user_id: str, tombstone: Tombstone) -> None: ...

    def list_tombstones(self, user_id: str) -> List[Tombstone]: ...

    def delete_tombstone(self, user_id: str, track_id: str) -> None: ...


class HttpRemoteTrackStore:
    """Remote store speaking JSON over HTTP.

    Routes (relative to ``base_url``)::

        GET    /users/{uid}/tracks?orderBy=createdAt&direction=desc
        GET    /users/{uid}/tracks/{id}
        PUT    /users/{uid}/tracks/{id}
        DELETE /users/{uid}/tracks/{id}
        GET    /users/{uid}/deleted
        PUT    /users/{uid}/deleted/{id}
        DELETE /users/{uid}/deleted/{id}

    Collection responses are either a JSON list of documents or an object
    with a ``documents`` list; each document carries its ``id``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        session: Optional[Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self._base_url = base_url.rstrip("/")
        self._session = session or create_session(token)
        self._timeout = timeout

    def _url(self, user_id: str, collection: str, doc_id: Optional[str] = None) -> str:
        url = f"{self._base_url}/users/{quote(user_id, safe='')}/{collection}"
        if doc_id is not None:
            url = f"{url}/{quote(doc_id, safe='')}"
        return url

    def _request(
        self,
        method: str,
        url: str,
        context: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        LOGGER.debug("%s %s params=%s", method, url, params)
        try:
            return self._session.request(
                method,
                url,
                params=params,
                json=body,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RemoteUnavailable(f"{context} failed: {exc}") from exc

    def _documents(self, payload: Any, context: str) -> List[Dict[str, Any]]:
        if isinstance(payload, dict):
            payload = payload.get("documents", [])
        if not isinstance(payload, list):
            raise RemoteUnavailable(f"{context} returned an unexpected payload")
        docs = [doc for doc in payload if isinstance(doc, dict) and doc.get("id")]
        if len(docs) != len(payload):
            LOGGER.warning("%s skipped %d documents without id", context, len(payload) - len(docs))
        return docs

    # ------------------------------------------------------------------
    # tracks
    # ------------------------------------------------------------------
    def put_track(self, user_id: str, track: Track) -> None:
        context = f"put track {track.id}"
        resp = self._request(
            "PUT", self._url(user_id, "tracks", track.id), context, body=track.to_document()
        )
        if classify_response(resp, context) == "missing":
            raise RemoteUnavailable(f"{context}: collection not found", status=404)

    def get_track(self, user_id: str, track_id: str) -> Optional[Track]:
        context = f"get track {track_id}"
        resp = self._request("GET", self._url(user_id, "tracks", track_id), context)
        if classify_response(resp, context) == "missing":
            return None
        data = response_json(resp, context)
        if not isinstance(data, dict):
            raise RemoteUnavailable(f"{context} returned an unexpected payload")
        return Track.from_document(track_id, data)

    def list_tracks(self, user_id: str) -> List[Track]:
        context = "list tracks"
        resp = self._request(
            "GET",
            self._url(user_id, "tracks"),
            context,
            params={"orderBy": "createdAt", "direction": "desc"},
        )
        if classify_response(resp, context) == "missing":
            return []
        docs = self._documents(response_json(resp, context), context)
        tracks = [Track.from_document(str(doc["id"]), doc) for doc in docs]
        # Order by createdAt descending regardless of server ordering.
        tracks.sort(key=lambda t: t.created_at, reverse=True)
        return tracks

    def list_track_ids(self, user_id: str) -> Set[str]:
        return {track.id for track in self.list_tracks(user_id)}

    def delete_track(self, user_id: str, track_id: str) -> None:
        context = f"delete track {track_id}"
        resp = self._request("DELETE", self._url(user_id, "tracks", track_id), context)
        classify_response(resp, context)

    # ------------------------------------------------------------------
    # tombstones
    # ------------------------------------------------------------------
    def put_tombstone(self, user_id: str, tombstone: Tombstone) -> None:
        context = f"put tombstone {tombstone.track_id}"
        resp = self._request(
            "PUT",
            self._url(user_id, "deleted", tombstone.track_id),
            context,
            body=tombstone.to_document(),
        )
        if classify_response(resp, context) == "missing":
            raise RemoteUnavailable(f"{context}: collection not found", status=404)

    def list_tombstones(self, user_id: str) -> List[Tombstone]:
        context = "list tombstones"
        resp = self._request("GET", self._url(user_id, "deleted"), context)
        if classify_response(resp, context) == "missing":
            return []
        docs = self._documents(response_json(resp, context), context)
        return [Tombstone.from_document(str(doc["id"]), doc) for doc in docs]

    def delete_tombstone(self, user_id: str, track_id: str) -> None:
        context = f"delete tombstone {track_id}"
        resp = self._request("DELETE", self._url(user_id, "deleted", track_id), context)
        classify_response(resp, context)


class MemoryRemoteTrackStore:
    """In-process remote store shared by several engines ("devices").

    ``online = False`` makes every call raise RemoteUnavailable, which is how
    connectivity loss is simulated.
    """

    def __init__(self) -> None:
        self.online = True
        self._tracks: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._tombstones: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def _check(self) -> None:
        if not self.online:
            raise RemoteUnavailable("remote store offline")

    def put_track(self, user_id: str, track: Track) -> None:
        self._check()
        with self._lock:
            self._tracks.setdefault(user_id, {})[track.id] = track.to_document()

    def get_track(self, user_id: str, track_id: str) -> Optional[Track]:
        self._check()
        with self._lock:
            doc = self._tracks.get(user_id, {}).get(track_id)
        return Track.from_document(track_id, doc) if doc is not None else None

    def list_tracks(self, user_id: str) -> List[Track]:
        self._check()
        with self._lock:
            docs = dict(self._tracks.get(user_id, {}))
        tracks = [Track.from_document(tid, doc) for tid, doc in docs.items()]
        tracks.sort(key=lambda t: t.created_at, reverse=True)
        return tracks

    def list_track_ids(self, user_id: str) -> Set[str]:
        self._check()
        with self._lock:
            return set(self._tracks.get(user_id, {}))

    def delete_track(self, user_id: str, track_id: str) -> None:
        self._check()
        with self._lock:
            self._tracks.get(user_id, {}).pop(track_id, None)

    def put_tombstone(self, user_id: str, tombstone: Tombstone) -> None:
        self._check()
        with self._lock:
            self._tombstones.setdefault(user_id, {})[tombstone.track_id] = (
                tombstone.to_document()
            )

    def list_tombstones(self, user_id: str) -> List[Tombstone]:
        self._check()
        with self._lock:
            docs = dict(self._tombstones.get(user_id, {}))
        return [Tombstone.from_document(tid, doc) for tid, doc in docs.items()]

    def delete_tombstone(self, user_id: str, track_id: str) -> None:
        self._check()
        with self._lock:
            self._tombstones.get(user_id, {}).pop(track_id, None)


__all__ = ["RemoteTrackStore", "HttpRemoteTrackStore", "MemoryRemoteTrackStore"]
