"""Storage backends for fragment metadata and payloads."""

from typing import Optional

from common.logging_config import get_logger
from fragments import config
from fragments.storage.base import StorageBackend
from fragments.storage.blob_store import BlobStore
from fragments.storage.durable import DurableBackend
from fragments.storage.memory import MemoryBackend

logger = get_logger(__name__)


def create_storage_backend(kind: Optional[str] = None) -> StorageBackend:
    """
    Build the backend named by ``kind`` (defaults to FRAGMENTS_STORAGE_BACKEND).

    Raises:
        ValueError: If the backend name is unknown
    """
    kind = (kind or config.STORAGE_BACKEND).lower()

    if kind == "memory":
        backend = MemoryBackend()
    elif kind == "durable":
        backend = DurableBackend(BlobStore(config.BLOB_STORAGE_PATH))
    else:
        raise ValueError(f"Unknown storage backend: {kind!r} (expected 'memory' or 'durable')")

    logger.info(f"Using {backend.name} storage backend")
    return backend


__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "DurableBackend",
    "BlobStore",
    "create_storage_backend",
]
