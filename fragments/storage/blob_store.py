"""Manages fragment payload objects on disk under ``{owner_id}/{id}`` keys."""

from pathlib import Path
from typing import Iterator, Optional, Union

from common.constants import MAX_FRAGMENT_SIZE_BYTES, READ_PIECE_SIZE_BYTES
from fragments.exceptions import PayloadTooLargeError


def object_key(owner_id: str, fragment_id: str) -> str:
    return f"{owner_id}/{fragment_id}"


class BlobStore:
    """
    Filesystem object store keyed by ``{owner_id}/{id}``.
    """

    def __init__(self, root: Union[str, Path], max_object_size: int = MAX_FRAGMENT_SIZE_BYTES):
        self.root = Path(root)
        self.max_object_size = max_object_size

    def get_object_path(self, key: str) -> Path:
        """
        Get file path for an object key.

        Raises:
            ValueError: If the key escapes the store root
        """
        parts = key.split("/")
        if len(parts) != 2 or any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"Invalid object key: {key!r}")
        return self.root.joinpath(*parts)

    def put(self, key: str, data: bytes) -> str:
        """
        Write object data to disk.

        Returns:
            String path to written file

        Raises:
            OSError: If write operation fails
        """
        filepath = self.get_object_path(key)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = filepath.with_name(f".{filepath.name}.tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(filepath)
        return str(filepath)

    def read_streaming(self, key: str, piece_size: int = READ_PIECE_SIZE_BYTES) -> Iterator[bytes]:
        """
        Stream object data in pieces.

        Raises:
            FileNotFoundError: If the object does not exist
        """
        filepath = self.get_object_path(key)
        with open(filepath, 'rb') as f:
            while True:
                piece = f.read(piece_size)
                if not piece:
                    break
                yield piece

    def get(self, key: str) -> Optional[bytes]:
        """
        Buffer an entire object into memory.

        Returns:
            Object bytes, or None if the object doesn't exist

        Raises:
            PayloadTooLargeError: If the object is above the size ceiling
        """
        size = self.get_size(key)
        if size is None:
            return None
        if size > self.max_object_size:
            raise PayloadTooLargeError(f"Object {key} is {size} bytes, limit is {self.max_object_size}")

        buffer = bytearray()
        try:
            for piece in self.read_streaming(key):
                buffer.extend(piece)
                if len(buffer) > self.max_object_size:
                    raise PayloadTooLargeError(f"Object {key} exceeds {self.max_object_size} bytes")
        except FileNotFoundError:
            return None
        return bytes(buffer)

    def delete(self, key: str) -> bool:
        """
        Delete object file from disk.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        filepath = self.get_object_path(key)
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False

        try:
            filepath.parent.rmdir()
        except OSError:
            # owner directory still holds other objects
            pass
        return True

    def exists(self, key: str) -> bool:
        return self.get_object_path(key).exists()

    def get_size(self, key: str) -> Optional[int]:
        filepath = self.get_object_path(key)
        if filepath.exists():
            return filepath.stat().st_size
        return None
