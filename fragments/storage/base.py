"""Storage backend contract shared by the in-memory and durable backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

FragmentRecord = Dict[str, Any]


class StorageBackend(ABC):
    """
    Raw persistence for fragment metadata records and byte payloads.

    Records are plain dicts holding exactly the fragment attributes
    (id, owner_id, type, size, created, updated).
    """

    name: str = "abstract"

    @abstractmethod
    async def write_fragment(self, fragment: FragmentRecord) -> None:
        """Upsert the metadata record keyed by (owner_id, id)."""

    @abstractmethod
    async def read_fragment(self, owner_id: str, fragment_id: str) -> Optional[FragmentRecord]:
        """Return the metadata record, or None if absent."""

    @abstractmethod
    async def write_fragment_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        """Store the payload bytes."""

    @abstractmethod
    async def read_fragment_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        """Return the payload bytes, or None if absent."""

    @abstractmethod
    async def list_fragments(
        self, owner_id: str, expand: bool = False
    ) -> List[Union[str, FragmentRecord]]:
        """Return the owner's fragment ids, or full records when ``expand`` is set."""

    @abstractmethod
    async def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        """Remove both metadata and payload. Raises FragmentNotFoundError if absent."""

    async def close(self) -> None:
        """Release backend resources."""
