"""
Remote store interface.

A remote store is the single source of truth for documents. It assigns a
new version tag on every successful write and refuses writes whose expected
tag no longer matches the current one.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import CommitInfo, DirectoryListing, Document


class RemoteStore(ABC):
    """
    Abstract base class for versioned remote document stores.

    Implementations must translate their native failures into the
    exceptions from ``trackhub.sync.errors``; nothing else may leak.
    """

    @abstractmethod
    def get(self, path: str, ref: Optional[str] = None) -> Optional[Document]:
        """
        Fetch a document and its current version tag.

        Args:
            path: Logical path of the document
            ref: Branch or revision; the store's default when omitted

        Returns:
            The document, or None if nothing exists at ``path``

        Raises:
            NotADocument: If ``path`` is a directory
            RemoteUnavailable: For transport or remote failures
        """

    @abstractmethod
    def list(self, path: str, ref: Optional[str] = None) -> Optional[DirectoryListing]:
        """
        List the entries of a directory, in the order the remote returns them.

        Returns:
            The listing, or None if nothing exists at ``path``

        Raises:
            NotADirectory: If ``path`` is a single document
            RemoteUnavailable: For transport or remote failures
        """

    @abstractmethod
    def put(
        self,
        path: str,
        content: str,
        message: str,
        expected_version_tag: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> tuple[str, CommitInfo]:
        """
        Create or update a document.

        With ``expected_version_tag`` the write only succeeds if it still
        matches the current tag. Without it the path must not exist yet.

        Returns:
            Tuple of (new_version_tag, commit_info)

        Raises:
            VersionConflict: If the expectation about the current tag fails
            NotADocument: If ``path`` is a directory
            RemoteUnavailable: For transport or remote failures
        """

    def describe(self) -> str:
        """Short human-readable identification, used in health output."""
        return type(self).__name__

    def close(self) -> None:
        """Release resources. Default is a no-op."""
