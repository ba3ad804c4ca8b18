"""Local filesystem mirror of committed remote content."""

import logging
from pathlib import Path
from typing import Union

from .errors import MirrorSyncFailure

logger = logging.getLogger(__name__)


class LocalMirror:
    """Write-through copy of remote documents on the local disk.

    The mirror path of a document is its logical path below ``root``. The
    mirror is only ever written after a successful remote commit and is
    never consulted for reads by the sync engine.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def path_for(self, path: str) -> Path:
        """Local location of the logical ``path``.

        Raises:
            MirrorSyncFailure: If ``path`` resolves outside the mirror root
        """
        full_path = (self.root / path.lstrip("/")).resolve()
        try:
            full_path.relative_to(self.root)
        except ValueError:
            raise MirrorSyncFailure(
                f"Path escapes mirror root: {path}", path=path
            ) from None
        return full_path

    def write(self, path: str, content: str) -> Path:
        """Store ``content`` at the mirror location of ``path``.

        Missing parent directories are created.

        Returns:
            The local file that was written

        Raises:
            MirrorSyncFailure: If the file cannot be written
        """
        try:
            full_path = self.path_for(path)
            data = content.encode("utf-8")
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except (OSError, ValueError) as e:
            raise MirrorSyncFailure(
                f"Failed to write mirror file for {path!r}: {e}", path=path, cause=e
            ) from e

        logger.debug(f"Mirrored {path} to {full_path}")
        return full_path

    def read(self, path: str) -> bytes:
        """Raw bytes currently mirrored for ``path``.

        Raises:
            FileNotFoundError: If nothing has been mirrored at ``path``
        """
        return self.path_for(path).read_bytes()
