"""Two-tier durable backend: SQLite metadata table plus filesystem blob store."""

import asyncio
import sqlite3
from typing import List, Optional, Union

from common.logging_config import get_logger
from fragments.database import init_database
from fragments.exceptions import FragmentNotFoundError, StorageError
from fragments.repositories.fragment_repository import FragmentRepository
from fragments.storage.base import FragmentRecord, StorageBackend
from fragments.storage.blob_store import BlobStore, object_key

logger = get_logger(__name__)

BACKEND_ERRORS = (sqlite3.Error, OSError, ValueError)


class DurableBackend(StorageBackend):
    """
    Metadata lives in the ``fragments`` table keyed by (owner_id, id); payloads
    live in the blob store under ``{owner_id}/{id}``.

    Deletion writes a tombstone first, then removes the blob, then purges the
    row. Both physical deletes are idempotent, so a failure part-way leaves a
    tombstone for ``purge_tombstones`` to finish.
    """

    name = "durable"

    def __init__(self, blob_store: BlobStore, repository: Optional[FragmentRepository] = None):
        self.blob_store = blob_store
        self.repository = repository or FragmentRepository()
        init_database()

    async def write_fragment(self, fragment: FragmentRecord) -> None:
        try:
            await asyncio.to_thread(self.repository.upsert, fragment)
        except BACKEND_ERRORS as e:
            logger.error(
                f"Error writing fragment metadata [owner_id={fragment.get('owner_id')}] "
                f"[fragment_id={fragment.get('id')}]: {e}",
                exc_info=True
            )
            raise StorageError("unable to write fragment metadata") from e

    async def read_fragment(self, owner_id: str, fragment_id: str) -> Optional[FragmentRecord]:
        try:
            return await asyncio.to_thread(self.repository.get, owner_id, fragment_id)
        except BACKEND_ERRORS as e:
            logger.error(
                f"Error reading fragment metadata [owner_id={owner_id}] [fragment_id={fragment_id}]: {e}",
                exc_info=True
            )
            raise StorageError("unable to read fragment metadata") from e

    async def write_fragment_data(self, owner_id: str, fragment_id: str, data: bytes) -> None:
        key = object_key(owner_id, fragment_id)
        try:
            await asyncio.to_thread(self.blob_store.put, key, bytes(data))
        except BACKEND_ERRORS as e:
            logger.error(f"Error uploading fragment data [key={key}]: {e}", exc_info=True)
            raise StorageError("unable to upload fragment data") from e

    async def read_fragment_data(self, owner_id: str, fragment_id: str) -> Optional[bytes]:
        key = object_key(owner_id, fragment_id)
        try:
            return await asyncio.to_thread(self.blob_store.get, key)
        except BACKEND_ERRORS as e:
            logger.error(f"Error reading fragment data [key={key}]: {e}", exc_info=True)
            raise StorageError("unable to read fragment data") from e

    async def list_fragments(
        self, owner_id: str, expand: bool = False
    ) -> List[Union[str, FragmentRecord]]:
        try:
            if expand:
                return await asyncio.to_thread(self.repository.list_by_owner, owner_id)
            return await asyncio.to_thread(self.repository.list_ids_by_owner, owner_id)
        except BACKEND_ERRORS as e:
            logger.error(f"Error listing fragments [owner_id={owner_id}]: {e}", exc_info=True)
            raise StorageError("unable to list fragments") from e

    async def delete_fragment(self, owner_id: str, fragment_id: str) -> None:
        try:
            marked = await asyncio.to_thread(self.repository.mark_deleted, owner_id, fragment_id)
        except BACKEND_ERRORS as e:
            logger.error(
                f"Error tombstoning fragment [owner_id={owner_id}] [fragment_id={fragment_id}]: {e}",
                exc_info=True
            )
            raise StorageError("unable to delete fragment") from e

        if not marked:
            raise FragmentNotFoundError(f"Fragment {fragment_id} not found")

        try:
            await self._purge(owner_id, fragment_id)
        except BACKEND_ERRORS as e:
            logger.error(
                f"Fragment left tombstoned after failed purge "
                f"[owner_id={owner_id}] [fragment_id={fragment_id}]: {e}",
                exc_info=True
            )
            raise StorageError("unable to delete fragment data") from e

        logger.debug(f"Fragment deleted [owner_id={owner_id}] [fragment_id={fragment_id}]")

    async def _purge(self, owner_id: str, fragment_id: str) -> None:
        await asyncio.to_thread(self.blob_store.delete, object_key(owner_id, fragment_id))
        await asyncio.to_thread(self.repository.purge, owner_id, fragment_id)

    async def purge_tombstones(self) -> int:
        """
        Finish physical deletion for every tombstoned fragment.

        Returns:
            Number of fragments purged
        """
        tombstones = await asyncio.to_thread(self.repository.list_tombstones)
        purged = 0

        for owner_id, fragment_id in tombstones:
            try:
                await self._purge(owner_id, fragment_id)
                purged += 1
            except BACKEND_ERRORS as e:
                logger.warning(
                    f"Failed to purge tombstoned fragment [owner_id={owner_id}] "
                    f"[fragment_id={fragment_id}]: {e}"
                )

        if tombstones:
            logger.info(f"Purged {purged}/{len(tombstones)} tombstoned fragments")
        return purged
