"""Data containers shared by the remote stores and the sync engine."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Document:
    """A document as currently stored remotely."""

    path: str
    content: str
    version_tag: str


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a remote directory listing."""

    name: str
    path: str
    version_tag: str


DirectoryListing = tuple[DirectoryEntry, ...]


@dataclass(frozen=True)
class CommitInfo:
    """Commit metadata returned by a successful remote write.

    ``raw`` is the remote's own commit object, passed through untouched to
    HTTP callers.
    """

    sha: str
    message: str
    url: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a committed write.

    The remote commit has always succeeded when a WriteResult exists.
    ``mirror_error`` is set when the local mirror could not be updated
    afterwards.
    """

    path: str
    version_tag: str
    commit: CommitInfo
    mirror_error: Optional[str] = None

    @property
    def mirror_synced(self) -> bool:
        """Check if the local mirror holds the committed content."""
        return self.mirror_error is None
