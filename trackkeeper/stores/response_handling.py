"""Shared HTTP response helpers for remote store interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type

import requests

from ..errors import RemoteUnavailable

RequestsJSONDecodeError: Type[Exception]
if hasattr(requests.exceptions, "JSONDecodeError"):
    RequestsJSONDecodeError = requests.exceptions.JSONDecodeError
else:  # pragma: no cover - fallback for old requests versions
    RequestsJSONDecodeError = ValueError

LOGGER = logging.getLogger(__name__)

__all__ = [
    "classify_response",
    "extract_error",
    "response_json",
]


def classify_response(response: requests.Response, context: str) -> str:
    """Return ``ok`` or ``missing`` (404); raise RemoteUnavailable otherwise."""

    status = response.status_code
    if status < 400:
        return "ok"
    if status == 404:
        return "missing"

    detail = extract_error(response)

    def with_detail(message: str) -> str:
        return f"{message} | {detail}" if detail else message

    if status in (401, 403):
        message = with_detail(f"{context} rejected credentials (status {status})")
    elif 500 <= status < 600:
        message = with_detail(f"{context} server error {status}")
    else:
        message = with_detail(f"{context} request failed (status {status})")
    LOGGER.debug(message)
    raise RemoteUnavailable(message, status=status)


def response_json(response: requests.Response, context: str) -> Any:
    """Decode a JSON body or raise RemoteUnavailable."""

    try:
        return response.json()
    except (ValueError, RequestsJSONDecodeError) as exc:
        raise RemoteUnavailable(f"{context} returned invalid JSON") from exc


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with the server error info if present."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except (
        ValueError,
        RequestsJSONDecodeError,
    ) as exc:  # pragma: no cover - logging path
        LOGGER.debug("Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc)
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from ``{"error": {"message", "status"}}`` or ``{"message"}``."""

    parts: List[str] = []
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        status = error.get("status")
        if message:
            parts.append(str(message))
        if status:
            parts.append(str(status))
    elif error:
        parts.append(str(error))
    message = data.get("message")
    if message:
        parts.append(str(message))
    return parts
