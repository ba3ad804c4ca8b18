"""Content synchronization between a versioned remote store and a local mirror."""

from .engine import SyncEngine
from .errors import (
    BadRequest,
    ErrorKind,
    MirrorSyncFailure,
    NotADirectory,
    NotADocument,
    RemoteUnavailable,
    SyncError,
    VersionConflict,
)
from .github import GitHubStore
from .memory_store import InMemoryStore
from .mirror import LocalMirror
from .models import CommitInfo, DirectoryEntry, DirectoryListing, Document, WriteResult
from .naming import record_path, sanitize
from .remote import RemoteStore

__all__ = [
    "SyncEngine",
    "RemoteStore",
    "GitHubStore",
    "InMemoryStore",
    "LocalMirror",
    "Document",
    "DirectoryEntry",
    "DirectoryListing",
    "CommitInfo",
    "WriteResult",
    "sanitize",
    "record_path",
    "ErrorKind",
    "SyncError",
    "BadRequest",
    "NotADirectory",
    "NotADocument",
    "VersionConflict",
    "RemoteUnavailable",
    "MirrorSyncFailure",
]
