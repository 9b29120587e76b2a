"""In-memory storage backend, process lifetime only."""

import copy
import logging
from typing import Any, Dict, List, Optional, Union

from fragments.exceptions import FragmentNotFoundError
from fragments.storage.base import FragmentRecord, StorageBackend

logger = logging.getLogger(__name__)


def _validate_key(key: Any) -> bool:
    return isinstance(key, str)


class MemoryDB:
    """
    Two-level key/value store: primary key (owner) -> secondary key (id) -> value.
    """

    def __init__(self):
        self.db: Dict[str, Dict[str, Any]] = {}

    def get(self, primary_key: str, secondary_key: str) -> Any:
        if not (_validate_key(primary_key) and _validate_key(secondary_key)):
            raise TypeError(
                f"primary_key and secondary_key strings are required, got "
                f"primary_key={primary_key!r}, secondary_key={secondary_key!r}"
            )
        return copy.deepcopy(self.db.get(primary_key, {}).get(secondary_key))

    def put(self, primary_key: str, secondary_key: str, value: Any) -> None:
        if not (_validate_key(primary_key) and _validate_key(secondary_key)):
            raise TypeError(
                f"primary_key and secondary_key strings are required, got "
                f"primary_key={primary_key!r}, secondary_key={secondary_key!r}"
            )
        self.db.setdefault(primary_key, {})[secondary_key] = copy.deepcopy(value)

    def query(self, primary_key: str) -> List[Any]:
        if not _validate_key(primary_key):
            raise TypeError(f"primary_key string is required, got {primary_key!r}")
        return [copy.deepcopy(value) for value in self.db.get(primary_key, {}).values()]

    def delete(self, primary_key: str, secondary_key: str) -> bool:
        """
        Delete a value. Returns False if nothing was stored under the keys.
        """
        if not (_validate_key(primary_key) and _validate_key(secondary_key)):
            raise TypeError(
                f"primary_key and secondary_key strings are required, got "
                f"primary_key={primary_key!r}, secondary_key={secondary_key!r}"
            )
        owner_values = self.db.get(primary_key, {})
        if secondary_key not in owner_values:
            return False
        del owner_values[secondary_key]
        if not owner_values:
            del self.db[primary_key]
        return True


class MemoryBackend(StorageBackend):
    name = "memory"

    def __init__(self):
        self.metadata = MemoryDB()
        self.data = MemoryDB()

    async def write_fragment(self, fragment: FragmentRecord) -> None:
        self.metadata.put(fragment.get("owner_id"), fragment.get("id"), dict(fragment))

    async def read_fragment(self, owner_id: str, fragment_id: str) -> Optional[FragmentRecord]:
        return self.metadata.get(owner_id, fragment_id)

    async def write_fragment_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"fragment data must be bytes, got {type(data).__name__}")
        self.data.put(owner_id, fragment_id, bytes(data))

    async def read_fragment_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        return self.data.get(owner_id, fragment_id)

    async def list_fragments(
        self, owner_id: str, expand: bool = False
    ) -> List[Union[str, FragmentRecord]]:
        records = self.metadata.query(owner_id)
        if expand:
            return records
        return [record["id"] for record in records]

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        if not self.metadata.delete(owner_id, fragment_id):
            raise FragmentNotFoundError(f"Fragment {fragment_id} not found")
        self.data.delete(owner_id, fragment_id)
        logger.debug(f"Fragment deleted [owner_id={owner_id}] [fragment_id={fragment_id}]")
