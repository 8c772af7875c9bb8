"""HTTP remote store behaviour against a scripted session."""

from typing import Any, Dict, List, Optional

import pytest
import requests

from trackkeeper.errors import RemoteUnavailable
from trackkeeper.models import Tombstone
from trackkeeper.stores import HttpRemoteTrackStore, RemoteTrackStore
from trackkeeper.stores.session import create_session
from conftest import make_track


class FakeResp:
    def __init__(self, status: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status
        self._payload = payload
        self.text = text
        self.url = "https://example.test"

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Records calls and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, *, params=None, json=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "params": params, "json": json, "timeout": timeout}
        )
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _store(*responses: Any, timeout: Optional[float] = 3.0):
    session = FakeSession(*responses)
    return HttpRemoteTrackStore("https://example.test/api/", session=session, timeout=timeout), session


def test_put_track_sends_document(sample_track) -> None:
    store, session = _store(FakeResp(200, {}))
    store.put_track("user 1", sample_track)
    call = session.calls[0]
    assert call["method"] == "PUT"
    assert call["url"] == "https://example.test/api/users/user%201/tracks/t1"
    assert call["json"]["createdAt"] == sample_track.created_at
    assert len(call["json"]["points"]) == len(sample_track.points)
    assert call["timeout"] == 3.0


def test_get_track_missing_returns_none() -> None:
    store, _ = _store(FakeResp(404, {"error": "not found"}))
    assert store.get_track("u", "absent") is None


def test_get_track_decodes_document(sample_track) -> None:
    store, _ = _store(FakeResp(200, sample_track.to_document()))
    assert store.get_track("u", sample_track.id) == sample_track


def test_list_tracks_accepts_envelope_and_sorts() -> None:
    older = make_track("a", created_at=1_000).to_dict()
    newer = make_track("b", created_at=2_000).to_dict()
    store, session = _store(FakeResp(200, {"documents": [older, newer, {"name": "no id"}]}))
    tracks = store.list_tracks("u")
    assert [t.id for t in tracks] == ["b", "a"]
    assert session.calls[0]["params"] == {"orderBy": "createdAt", "direction": "desc"}


def test_list_tombstones_from_plain_list() -> None:
    store, session = _store(FakeResp(200, [{"id": "gone", "at": 42}]))
    assert store.list_tombstones("u") == [Tombstone(track_id="gone", deleted_at=42)]
    assert session.calls[0]["url"].endswith("/users/u/deleted")


def test_put_and_delete_tombstone_routes() -> None:
    store, session = _store(FakeResp(200, {}), FakeResp(204))
    store.put_tombstone("u", Tombstone(track_id="gone", deleted_at=7))
    store.delete_tombstone("u", "gone")
    assert [(c["method"], c["url"].rsplit("/", 2)[-2:]) for c in session.calls] == [
        ("PUT", ["deleted", "gone"]),
        ("DELETE", ["deleted", "gone"]),
    ]
    assert session.calls[0]["json"] == {"at": 7}


def test_delete_missing_track_is_not_an_error() -> None:
    store, _ = _store(FakeResp(404))
    store.delete_track("u", "absent")


@pytest.mark.parametrize("status", [401, 403, 409, 500, 503])
def test_error_statuses_raise_remote_unavailable(status) -> None:
    store, _ = _store(FakeResp(status, {"error": {"message": "boom", "status": "FAILED"}}))
    with pytest.raises(RemoteUnavailable) as excinfo:
        store.list_tracks("u")
    assert excinfo.value.status == status
    assert "boom" in str(excinfo.value)


def test_network_errors_raise_remote_unavailable() -> None:
    store, _ = _store(requests.ConnectionError("unreachable"), requests.Timeout("slow"))
    with pytest.raises(RemoteUnavailable):
        store.list_track_ids("u")
    with pytest.raises(RemoteUnavailable):
        store.delete_track("u", "x")


def test_invalid_json_raises_remote_unavailable() -> None:
    store, _ = _store(FakeResp(200, None, text="<html>"))
    with pytest.raises(RemoteUnavailable):
        store.list_tracks("u")


def test_unexpected_payload_raises_remote_unavailable() -> None:
    store, _ = _store(FakeResp(200, "just a string"))
    with pytest.raises(RemoteUnavailable):
        store.list_tombstones("u")


def test_base_url_required() -> None:
    with pytest.raises(ValueError):
        HttpRemoteTrackStore("")


def test_http_store_satisfies_protocol() -> None:
    store, _ = _store()
    assert isinstance(store, RemoteTrackStore)


def test_create_session_sets_auth_and_retries() -> None:
    session = create_session("secret")
    assert session.headers["Authorization"] == "Bearer secret"
    adapter = session.get_adapter("https://example.test")
    assert 500 in adapter.max_retries.status_forcelist
    assert "Authorization" not in create_session(None).headers
