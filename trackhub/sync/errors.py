"""Exceptions for the content synchronization core."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Failure categories surfaced by the sync core."""

    BAD_REQUEST = "BAD_REQUEST"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    NOT_A_DOCUMENT = "NOT_A_DOCUMENT"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    REMOTE_UNAVAILABLE = "REMOTE_UNAVAILABLE"
    MIRROR_SYNC_FAILURE = "MIRROR_SYNC_FAILURE"


class SyncError(Exception):
    """Base exception for sync operations.

    Args:
        message: Human-readable description
        path: Logical path involved, if any
        cause: Underlying exception, kept for logs
    """

    kind: ErrorKind = ErrorKind.REMOTE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.path = path
        self.cause = cause


class BadRequest(SyncError):
    """Input is missing or malformed; rejected before any remote call."""

    kind = ErrorKind.BAD_REQUEST


class NotADirectory(SyncError):
    """A listing was requested for a path that is a single document."""

    kind = ErrorKind.NOT_A_DIRECTORY


class NotADocument(SyncError):
    """A document read or write targeted a path that is a directory."""

    kind = ErrorKind.NOT_A_DOCUMENT


class VersionConflict(SyncError):
    """The remote rejected a write because the version tag is stale."""

    kind = ErrorKind.VERSION_CONFLICT

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected_version_tag: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, path=path, cause=cause)
        self.expected_version_tag = expected_version_tag


class RemoteUnavailable(SyncError):
    """Transport, auth, rate-limit or unexpected failure from the remote store."""

    kind = ErrorKind.REMOTE_UNAVAILABLE

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, path=path, cause=cause)
        self.status_code = status_code


class MirrorSyncFailure(SyncError):
    """Writing the local mirror failed after a successful remote commit."""

    kind = ErrorKind.MIRROR_SYNC_FAILURE
