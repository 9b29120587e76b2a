"""Process-wide locator for the storage backend selected at startup."""

from typing import Optional

from fragments.storage import StorageBackend, create_storage_backend

_storage_backend: Optional[StorageBackend] = None


def set_storage_backend(backend: Optional[StorageBackend]) -> None:
    """Set global storage backend instance"""
    global _storage_backend
    _storage_backend = backend


def get_storage_backend() -> StorageBackend:
    """Get global storage backend instance, creating the configured one on first use"""
    global _storage_backend
    if _storage_backend is None:
        _storage_backend = create_storage_backend()
    return _storage_backend
