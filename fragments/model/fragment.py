"""Fragment entity: one typed payload owned by one user."""

import logging
import math
import numbers
from typing import Any, Dict, List, Optional, Union

from fragments.exceptions import FragmentNotFoundError, FragmentValidationError
from fragments.model import conversion, negotiation
from fragments.service_locator import get_storage_backend
from fragments.storage.base import StorageBackend
from fragments.utils import generate_uuid, get_current_timestamp

logger = logging.getLogger(__name__)


class Fragment:
    """
    Metadata for a stored fragment plus lifecycle operations that delegate to
    the storage backend registered in the service locator.

    Attributes:
        id: Unique identifier, generated when not supplied
        owner_id: Hashed identity of the owner
        type: Media type, optionally with parameters (e.g. charset)
        size: Byte length of the stored payload
        created: ISO-8601 creation timestamp
        updated: ISO-8601 timestamp of the last metadata or payload write
    """

    def __init__(
        self,
        owner_id: Optional[str] = None,
        type: Optional[str] = None,
        id: Optional[str] = None,
        size: Any = 0,
        created: Optional[str] = None,
        updated: Optional[str] = None,
    ):
        if not owner_id or not type:
            raise FragmentValidationError("owner_id and type must be defined")

        if (
            isinstance(size, bool)
            or not isinstance(size, numbers.Real)
            or not math.isfinite(size)
            or size < 0
            or size != int(size)
        ):
            raise FragmentValidationError(f"size must be a non-negative whole number, got {size!r}")

        if not Fragment.is_supported_type(type):
            raise FragmentValidationError(
                f"type must be a supported type, got {negotiation.parse_media_type(type)}"
            )

        now = get_current_timestamp()
        self.id = id or generate_uuid()
        self.owner_id = owner_id
        self.type = type
        self.size = int(size)
        self.created = created or now
        self.updated = updated or now

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Fragment":
        return cls(
            id=record.get("id"),
            owner_id=record.get("owner_id"),
            type=record.get("type"),
            size=record.get("size", 0),
            created=record.get("created"),
            updated=record.get("updated"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "type": self.type,
            "size": self.size,
            "created": self.created,
            "updated": self.updated,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fragment):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Fragment(id={self.id!r}, owner_id={self.owner_id!r}, type={self.type!r}, size={self.size})"

    @staticmethod
    def _backend() -> StorageBackend:
        return get_storage_backend()

    @staticmethod
    async def by_user(owner_id: str, expand: bool = False) -> List[Union[str, Dict[str, Any]]]:
        """
        Get all fragment ids (or full metadata records) for the given owner.

        An owner without fragments gets an empty list.
        """
        return await Fragment._backend().list_fragments(owner_id, expand)

    @staticmethod
    async def by_id(owner_id: str, fragment_id: str) -> "Fragment":
        """
        Get the owner's fragment with the given id.

        Raises:
            FragmentNotFoundError: If either argument is missing or no record exists
        """
        if not owner_id or not fragment_id:
            raise FragmentNotFoundError("owner_id and fragment id must be defined")

        record = await Fragment._backend().read_fragment(owner_id, fragment_id)
        if record is None:
            raise FragmentNotFoundError(f"Fragment {fragment_id} not found")
        return Fragment.from_record(record)

    @staticmethod
    async def delete(owner_id: str, fragment_id: str) -> None:
        """
        Delete the owner's fragment metadata and payload.

        Raises:
            FragmentNotFoundError: If no record exists
        """
        await Fragment._backend().delete_fragment(owner_id, fragment_id)

    async def save(self) -> None:
        """Refresh ``updated`` and upsert the metadata record."""
        self.updated = get_current_timestamp()
        await self._backend().write_fragment(self.to_dict())

    async def get_data(self) -> bytes:
        data = await self._backend().read_fragment_data(self.owner_id, self.id)
        if data is None:
            raise FragmentNotFoundError(f"No data stored for fragment {self.id}")
        return bytes(data)

    async def set_data(self, data: Optional[bytes]) -> None:
        """
        Replace the payload. Metadata (size, updated) is written before the
        payload, so the two writes are not atomic.

        Raises:
            FragmentValidationError: If ``data`` is missing or not bytes
        """
        if data is None:
            raise FragmentValidationError("data must be specified")
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise FragmentValidationError(f"data must be bytes, got {type(data).__name__}")

        data = bytes(data)
        self.size = len(data)
        self.updated = get_current_timestamp()

        backend = self._backend()
        await backend.write_fragment(self.to_dict())
        await backend.write_fragment_data(self.owner_id, self.id, data)

    @property
    def mime_type(self) -> str:
        """
        "text/html; charset=utf-8" -> "text/html"
        """
        return negotiation.parse_media_type(self.type)

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    @property
    def formats(self) -> List[str]:
        """Media types this fragment can be converted into, identity first."""
        return negotiation.reachable_types(self.mime_type)

    @staticmethod
    def is_supported_type(value: Optional[str]) -> bool:
        logger.debug(f"is_supported_type with value: {value}")
        return negotiation.is_supported_type(value)

    def content_type_for(self, extension: str) -> str:
        """
        Media type produced by ``get_converted_into(extension)``.

        Raises:
            UnsupportedConversionError: If the extension is unmapped or unreachable
        """
        return negotiation.resolve_target_type(self.mime_type, extension)

    async def get_converted_into(self, extension: str) -> bytes:
        """
        Return this fragment's payload converted into the type named by a
        file extension such as ".html".

        The target is checked against the conversion table before the payload
        is read, so rejected requests do no codec work.

        Raises:
            UnsupportedConversionError: If the extension is unmapped or unreachable
            ConversionError: If the stored payload cannot be parsed as its type
        """
        target_type = self.content_type_for(extension)
        data = await self.get_data()

        if target_type == self.mime_type:
            return data
        return await conversion.convert_async(data, self.mime_type, target_type)
