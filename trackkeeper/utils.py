"""General utility helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timezone
import secrets
import string
import time
from typing import Optional
import uuid

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""

    return int(time.time() * 1000)


def new_track_id() -> str:
    """Id for a recorded track."""

    return str(uuid.uuid4())


def new_import_id(created_ms: Optional[int] = None) -> str:
    """Id for an imported track: ``import-<ms>-<7 random chars>``."""

    stamp = now_ms() if created_ms is None else created_ms
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"import-{stamp}-{suffix}"


def parse_iso8601_ms(value: Optional[str]) -> Optional[int]:
    """Parse an ISO-8601 timestamp into epoch ms; None when absent or invalid.

    Naive timestamps are read as UTC, which is what GPX and TCX mandate.
    """

    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(round(parsed.timestamp() * 1000))


def format_timestamp(ms: int) -> str:
    """Render epoch ms as a short local date/time for listings."""

    return datetime.fromtimestamp(ms / 1000.0).strftime("%Y-%m-%d %H:%M")
