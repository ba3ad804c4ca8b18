"""In-process remote store with the same versioning rules as the GitHub store."""

import hashlib
import logging
import threading
from typing import Optional

from .errors import NotADirectory, NotADocument, VersionConflict
from .models import CommitInfo, DirectoryEntry, DirectoryListing, Document
from .remote import RemoteStore

logger = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    return path.strip("/")


class InMemoryStore(RemoteStore):
    """Dictionary-backed remote store.

    Directories are implicit, as in git: a directory exists as long as some
    document lives below it. Every successful write gets a fresh version tag,
    even when the content is unchanged.

    Args:
        default_ref: Branch used when callers pass no ``ref``
    """

    def __init__(self, default_ref: str = "main"):
        self.default_ref = default_ref
        self._branches: dict[str, dict[str, tuple[str, str]]] = {}
        self._revision = 0
        self._lock = threading.Lock()

    def describe(self) -> str:
        return f"memory@{self.default_ref}"

    def _files(self, ref: Optional[str]) -> dict[str, tuple[str, str]]:
        return self._branches.setdefault(ref or self.default_ref, {})

    def _is_directory(self, files: dict[str, tuple[str, str]], path: str) -> bool:
        if not path:
            return True
        prefix = path + "/"
        return any(key.startswith(prefix) for key in files)

    def get(self, path: str, ref: Optional[str] = None) -> Optional[Document]:
        key = _normalize(path)
        with self._lock:
            files = self._files(ref)
            if key in files:
                content, tag = files[key]
                return Document(path=key, content=content, version_tag=tag)
            if self._is_directory(files, key):
                raise NotADocument(f"Path is a directory: {path}", path=path)
        return None

    def list(self, path: str, ref: Optional[str] = None) -> Optional[DirectoryListing]:
        key = _normalize(path)
        with self._lock:
            files = self._files(ref)
            if key in files:
                raise NotADirectory(f"Not a directory: {path}", path=path)
            if not self._is_directory(files, key):
                return None

            prefix = f"{key}/" if key else ""
            children: dict[str, list[str]] = {}
            for file_path, (_, tag) in files.items():
                if file_path.startswith(prefix):
                    name = file_path[len(prefix) :].split("/", 1)[0]
                    children.setdefault(name, []).append(tag)

            entries = []
            for name in sorted(children):
                child_path = f"{prefix}{name}"
                if child_path in files:
                    tag = files[child_path][1]
                else:
                    # directories get a tag derived from everything below them
                    joined = "".join(sorted(children[name]))
                    tag = hashlib.sha1(joined.encode("utf-8")).hexdigest()
                entries.append(
                    DirectoryEntry(name=name, path=child_path, version_tag=tag)
                )
        return tuple(entries)

    def put(
        self,
        path: str,
        content: str,
        message: str,
        expected_version_tag: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> tuple[str, CommitInfo]:
        key = _normalize(path)
        with self._lock:
            files = self._files(ref)
            if self._is_directory(files, key):
                raise NotADocument(f"Path is a directory: {path}", path=path)
            parts = key.split("/")
            for depth in range(1, len(parts)):
                parent = "/".join(parts[:depth])
                if parent in files:
                    raise NotADirectory(f"Parent is a document: {parent}", path=path)

            current = files.get(key)
            if expected_version_tag is None and current is not None:
                raise VersionConflict(
                    f"Document already exists: {path}",
                    path=path,
                    expected_version_tag=None,
                )
            if expected_version_tag is not None and (
                current is None or current[1] != expected_version_tag
            ):
                raise VersionConflict(
                    f"Version tag mismatch for {path}",
                    path=path,
                    expected_version_tag=expected_version_tag,
                )

            self._revision += 1
            digest = hashlib.sha1(
                f"{self._revision}:{key}:{content}".encode("utf-8")
            )
            new_tag = digest.hexdigest()
            files[key] = (content, new_tag)
            revision = self._revision

        commit_sha = hashlib.sha1(f"commit:{revision}:{new_tag}".encode()).hexdigest()
        logger.debug(f"Stored {key} at revision {revision}")
        commit = CommitInfo(
            sha=commit_sha,
            message=message,
            raw={"sha": commit_sha, "message": message},
        )
        return new_tag, commit
