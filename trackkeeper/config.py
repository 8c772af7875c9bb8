"""Central configuration for trackkeeper.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Secrets are read from environment variables (optionally
via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except ImportError:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Local storage
# ---------------------------------------------------------------------------
# Directory (absolute or relative) holding one JSON file per track.
DATA_DIR = os.getenv("TRACKKEEPER_DATA_DIR", "trackkeeper_data")


# ---------------------------------------------------------------------------
# Remote document store
# ---------------------------------------------------------------------------
# Base URL of the remote document API. Empty disables cloud sync entirely.
REMOTE_URL = os.getenv("TRACKKEEPER_REMOTE_URL", "")

# Bearer token sent with every remote call. Do not hardcode secrets.
REMOTE_TOKEN = os.getenv("TRACKKEEPER_REMOTE_TOKEN", "")

# User namespace used by the CLI when no --user flag is given.
DEFAULT_USER_ID = os.getenv("TRACKKEEPER_USER_ID", "")

# Request timeout in seconds. The sync engine treats a timeout like any other
# remote error.
REQUEST_TIMEOUT = _env_float("TRACKKEEPER_REQUEST_TIMEOUT", 10.0)

# Tombstones nobody has consumed after this many days are purged during
# reconcile. Set to 0 to keep them until a device observes them.
TOMBSTONE_TTL_DAYS = _env_int("TRACKKEEPER_TOMBSTONE_TTL_DAYS", 30)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = _env_int("TRACKKEEPER_HTTP_POOL_CONNECTIONS", 4)
HTTP_POOL_MAXSIZE = _env_int("TRACKKEEPER_HTTP_POOL_MAXSIZE", 4)

# Retry/backoff behaviour for transient remote failures (5xx, resets).
REMOTE_MAX_RETRIES = _env_int("TRACKKEEPER_REMOTE_MAX_RETRIES", 2)
REMOTE_BACKOFF_FACTOR = _env_float("TRACKKEEPER_REMOTE_BACKOFF_FACTOR", 0.5)


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------
# Maximum number of snapshots kept by the undo history.
UNDO_CAPACITY = _env_int("TRACKKEEPER_UNDO_CAPACITY", 50)

# Simplification presets in coordinate degrees. The real-world loss depends
# on latitude; the metre figures are calibrated at mid latitudes.
SIMPLIFY_TOLERANCES = {
    "light": _env_float("TRACKKEEPER_SIMPLIFY_LIGHT", 0.00003),  # ~3 m
    "medium": _env_float("TRACKKEEPER_SIMPLIFY_MEDIUM", 0.0001),  # ~11 m
    "strong": _env_float("TRACKKEEPER_SIMPLIFY_STRONG", 0.00025),  # ~28 m
}
DEFAULT_SIMPLIFY_LEVEL = "medium"

# Recordings shorter than this are discarded on stop.
MIN_RECORDED_POINTS = 2


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("TRACKKEEPER_LOG_LEVEL", "INFO").upper()

# Emit a debug line per skipped import point when True (noisy on large files).
LOG_SKIPPED_POINTS = _env_bool("TRACKKEEPER_LOG_SKIPPED_POINTS", False)
