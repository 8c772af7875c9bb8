"""Central error types used across the application."""

from __future__ import annotations


class TrackKeeperError(RuntimeError):
    """Base error for all trackkeeper failures."""


class TrackFormatError(TrackKeeperError):
    """Base error for import failures tied to a single file."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(f"{filename}: {message}")
        self.filename = filename


class UnrecognizedFormat(TrackFormatError):
    """Raised when neither the extension nor the content identifies GPX/TCX."""

    def __init__(self, filename: str) -> None:
        super().__init__(filename, "unrecognized format, expected GPX or TCX")


class ParseError(TrackFormatError):
    """Raised when a GPX/TCX document is not well-formed XML."""


class RemoteUnavailable(TrackKeeperError):
    """Raised when the remote store cannot be reached or rejects a call."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class LocalStoreFailure(TrackKeeperError):
    """Raised when the local store cannot read or write. Never recovered."""


class InvalidTransition(TrackKeeperError):
    """Raised when an edit session operation is not allowed in its state."""


__all__ = [
    "TrackKeeperError",
    "TrackFormatError",
    "UnrecognizedFormat",
    "ParseError",
    "RemoteUnavailable",
    "LocalStoreFailure",
    "InvalidTransition",
]
