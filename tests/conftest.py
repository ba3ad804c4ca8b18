"""Shared fixtures for trackhub tests."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from fastapi.testclient import TestClient

from trackhub.api import create_app
from trackhub.config import Settings
from trackhub.sync import InMemoryStore, LocalMirror, SyncEngine


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    """In-memory remote store on branch main."""
    return InMemoryStore(default_ref="main")


@pytest.fixture
def mirror(temp_dir):
    """Local mirror rooted in a temporary directory."""
    return LocalMirror(temp_dir / "mirror")


@pytest.fixture
def engine(store, mirror):
    """Sync engine wired to the in-memory store."""
    return SyncEngine(store=store, mirror=mirror, ref="main")


@pytest.fixture
def settings(temp_dir):
    """Settings for an offline service instance."""
    return Settings(
        backend="memory",
        github_branch="main",
        mirror_root=str(temp_dir / "mirror"),
        records_dir="records",
        max_body_bytes=1024,
    )


@pytest.fixture
def client(settings, store, mirror):
    """Test client for an app backed by the in-memory store."""
    app = create_app(settings=settings, store=store, mirror=mirror)
    with TestClient(app) as test_client:
        yield test_client
