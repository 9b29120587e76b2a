"""Shared pytest fixtures for all tests."""

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image, features

from fragments.auth import hash_password
from fragments.database import init_database
from fragments.service_locator import set_storage_backend
from fragments.storage.blob_store import BlobStore
from fragments.storage.durable import DurableBackend
from fragments.storage.memory import MemoryBackend

TEST_USERS = {
    "user1@email.com": "password1",
    "user2@email.com": "password2",
}


@pytest.fixture(autouse=True)
def memory_backend():
    """
    Install a fresh in-memory backend for each test.

    Returns:
        MemoryBackend registered in the service locator
    """
    backend = MemoryBackend()
    set_storage_backend(backend)
    yield backend
    set_storage_backend(None)


@pytest.fixture
def test_db(tmp_path, monkeypatch) -> Path:
    """
    Create a temporary metadata database.
    """
    db_path = tmp_path / "fragments.db"
    monkeypatch.setattr("fragments.config.DATABASE_PATH", str(db_path))
    init_database()
    return db_path


@pytest.fixture
def blob_store(tmp_path) -> BlobStore:
    return BlobStore(tmp_path / "blobs")


@pytest.fixture
def durable_backend(test_db, blob_store):
    """
    Install a durable backend over temporary SQLite and blob directories.
    """
    backend = DurableBackend(blob_store)
    set_storage_backend(backend)
    yield backend
    set_storage_backend(None)


@pytest.fixture
def htpasswd_file(tmp_path, monkeypatch) -> Path:
    """
    Write an htpasswd file with bcrypt entries for TEST_USERS.
    """
    path = tmp_path / ".htpasswd"
    lines = [f"{user}:{hash_password(password, rounds=4)}" for user, password in TEST_USERS.items()]
    path.write_text("\n".join(lines) + "\n")
    monkeypatch.setattr("fragments.config.HTPASSWD_FILE", str(path))
    return path


@pytest.fixture
def client(htpasswd_file):
    """Create FastAPI test client."""
    from fragments.main import app
    return TestClient(app)


@pytest.fixture
def user1():
    return ("user1@email.com", TEST_USERS["user1@email.com"])


@pytest.fixture
def user2():
    return ("user2@email.com", TEST_USERS["user2@email.com"])


def make_image(fmt: str, size=(8, 8), color=(200, 30, 30)) -> bytes:
    """
    Render a solid-color image in the given Pillow format.
    """
    buffer = io.BytesIO()
    image = Image.new("RGB", size, color)
    if fmt == "GIF":
        image = image.convert("P")
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_factory():
    """Factory fixture returning encoded image bytes for a Pillow format name."""
    return make_image


@pytest.fixture
def sample_payloads():
    """
    One payload per supported media type.

    AVIF falls back to a bare ``ftyp`` header when Pillow lacks the codec;
    identity reads and round trips never decode it.
    """
    if features.check("avif"):
        avif = make_image("AVIF")
    else:
        avif = b"\x00\x00\x00\x1cftypavif\x00\x00\x00\x00avifmif1miaf"

    return {
        "text/plain": b"plain text",
        "text/markdown": b"# Heading\n\nSome *markdown*.\n",
        "text/html": b"<p>hello</p>",
        "text/csv": b"a,b\n1,2\n",
        "application/json": b'{"a": [1, 2]}',
        "application/yaml": b"a:\n  - 1\n  - 2\n",
        "image/png": make_image("PNG"),
        "image/jpeg": make_image("JPEG"),
        "image/webp": make_image("WEBP"),
        "image/avif": avif,
        "image/gif": make_image("GIF"),
    }
