"""HTTP session factory for remote store calls."""

from __future__ import annotations

from typing import Optional

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    HTTP_POOL_CONNECTIONS,
    HTTP_POOL_MAXSIZE,
    REMOTE_BACKOFF_FACTOR,
    REMOTE_MAX_RETRIES,
)

__all__ = ["create_session"]


def _build_retry() -> Retry:
    return Retry(
        total=max(REMOTE_MAX_RETRIES, 0),
        backoff_factor=REMOTE_BACKOFF_FACTOR,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET", "PUT", "DELETE"],
        raise_on_status=False,
    )


def create_session(token: Optional[str] = None) -> Session:
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=HTTP_POOL_MAXSIZE,
        max_retries=_build_retry(),
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update(
        {
            "Accept-Encoding": "gzip, deflate",
            "Accept": "application/json",
        }
    )
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return session
