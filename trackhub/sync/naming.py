"""Mapping from display names to storage paths for name-addressed records."""

import re

MAX_TOKEN_LENGTH = 120
DEFAULT_TOKEN = "track"
DEFAULT_RECORDS_DIR = "records"

_UNSAFE_RUN = re.compile(r"[^a-z0-9\-_]+")


def sanitize(name: str) -> str:
    """Reduce an arbitrary name to a path-safe token.

    Lower-cases the name, collapses every run of characters outside
    ``[a-z0-9-_]`` into a single ``-``, strips leading and trailing ``-``,
    truncates to 120 characters and falls back to ``"track"`` when nothing
    is left.

    Example:
        >>> sanitize("My Track!! 2024")
        'my-track-2024'
        >>> sanitize("   ")
        'track'
    """
    token = _UNSAFE_RUN.sub("-", name.lower()).strip("-")
    # a cut landing on a separator would leave a trailing "-"
    return token[:MAX_TOKEN_LENGTH].rstrip("-") or DEFAULT_TOKEN


def record_path(name: str, records_dir: str = DEFAULT_RECORDS_DIR) -> str:
    """Storage path of the record named ``name``."""
    return f"{records_dir.strip('/')}/{sanitize(name)}.json"
