"""Sync engine: read-modify-write of remote documents plus mirror upkeep.

A write fetches the current version tag of the target path, issues a
conditional write with that tag and, once the remote has committed, copies
the content into the local mirror. Concurrency control is left entirely to
the remote store: of two writers racing on the same tag exactly one wins
and the other gets ``VersionConflict``. Conflicts are never retried here;
the caller re-fetches and resubmits.

The mirror write is not atomic with the remote commit. A failure there is
reported on the result (``WriteResult.mirror_error``) and never undoes the
commit.
"""

import logging
from typing import Optional

from .errors import MirrorSyncFailure
from .mirror import LocalMirror
from .models import DirectoryListing, Document, WriteResult
from .naming import DEFAULT_RECORDS_DIR, record_path
from .remote import RemoteStore

logger = logging.getLogger(__name__)


class SyncEngine:
    """Orchestrates reads and writes between a remote store and a local mirror."""

    def __init__(
        self,
        store: RemoteStore,
        mirror: LocalMirror,
        ref: Optional[str] = None,
        records_dir: str = DEFAULT_RECORDS_DIR,
    ):
        """Initialize sync engine.

        Args:
            store: Remote store holding the documents
            mirror: Local mirror updated after each commit
            ref: Branch all operations target; the store's default when None
            records_dir: Directory of name-addressed records
        """
        self.store = store
        self.mirror = mirror
        self.ref = ref
        self.records_dir = records_dir

    def read(self, path: str) -> Optional[Document]:
        """Read a document straight from the remote store.

        Returns:
            The document, or None if it does not exist
        """
        document = self.store.get(path, ref=self.ref)
        if document is None:
            logger.warning(f"Document not found: {path}")
        return document

    def list_directory(self, path: str) -> Optional[DirectoryListing]:
        """List a remote directory.

        Returns:
            The listing, or None if nothing exists at ``path``

        Raises:
            NotADirectory: If ``path`` is a single document
        """
        listing = self.store.list(path, ref=self.ref)
        if listing is None:
            logger.warning(f"Directory not found: {path}")
        return listing

    def write(
        self, path: str, content: str, message: Optional[str] = None
    ) -> WriteResult:
        """Commit ``content`` to ``path`` and refresh the mirror.

        Args:
            path: Logical path, used verbatim
            content: New document content
            message: Commit message; a default naming the path when omitted

        Returns:
            WriteResult with the new version tag and commit metadata

        Raises:
            VersionConflict: If another writer changed the document meanwhile
            NotADocument: If ``path`` is a directory
            RemoteUnavailable: If the remote store could not be reached
        """
        return self._commit(path, content, message or f"Update {path} via app")

    def read_record(self, name: str) -> tuple[str, Optional[Document]]:
        """Read the record stored under a display name.

        Returns:
            Tuple of (resolved_path, document or None)
        """
        path = record_path(name, self.records_dir)
        return path, self.read(path)

    def write_record(
        self, name: str, content: str, message: Optional[str] = None
    ) -> WriteResult:
        """Commit the record stored under a display name.

        Same guarantees as ``write``; only the path derivation and the
        default commit message differ.
        """
        path = record_path(name, self.records_dir)
        return self._commit(path, content, message or f"Add/update track {name}")

    def _commit(self, path: str, content: str, message: str) -> WriteResult:
        current = self.store.get(path, ref=self.ref)
        expected_tag = current.version_tag if current is not None else None

        new_tag, commit = self.store.put(
            path,
            content,
            message,
            expected_version_tag=expected_tag,
            ref=self.ref,
        )
        logger.info(
            f"{'Updated' if current is not None else 'Created'} {path} "
            f"(sha={new_tag}, commit={commit.sha})"
        )

        mirror_error = None
        try:
            self.mirror.write(path, content)
        except MirrorSyncFailure as e:
            logger.warning(f"Remote commit for {path} succeeded but mirror failed: {e}")
            mirror_error = str(e)

        return WriteResult(
            path=path,
            version_tag=new_tag,
            commit=commit,
            mirror_error=mirror_error,
        )
