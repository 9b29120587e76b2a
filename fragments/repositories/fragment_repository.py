"""Fragment metadata repository backed by the SQLite table."""

from typing import Any, Dict, List, Optional, Tuple

from common.logging_config import get_logger
from fragments.database import get_db_connection, row_to_dict

logger = get_logger(__name__)

FRAGMENT_COLUMNS = "id, owner_id, type, size, created, updated"


class FragmentRepository:
    @staticmethod
    def upsert(fragment: Dict[str, Any]) -> None:
        """
        Insert or overwrite the record keyed by (owner_id, id).

        Overwriting clears a pending tombstone.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO fragments (owner_id, id, type, size, created, updated, deleted)
                VALUES (?, ?, ?, ?, ?, ?, 0)
                ON CONFLICT(owner_id, id) DO UPDATE SET
                    type = excluded.type,
                    size = excluded.size,
                    created = excluded.created,
                    updated = excluded.updated,
                    deleted = 0
                """,
                (
                    fragment["owner_id"],
                    fragment["id"],
                    fragment["type"],
                    fragment["size"],
                    fragment["created"],
                    fragment["updated"],
                )
            )
            conn.commit()

    @staticmethod
    def get(owner_id: str, fragment_id: str) -> Optional[Dict[str, Any]]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {FRAGMENT_COLUMNS} FROM fragments WHERE owner_id = ? AND id = ? AND deleted = 0",
                (owner_id, fragment_id)
            )
            return row_to_dict(cursor.fetchone())

    @staticmethod
    def list_by_owner(owner_id: str) -> List[Dict[str, Any]]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {FRAGMENT_COLUMNS} FROM fragments WHERE owner_id = ? AND deleted = 0 ORDER BY created, id",
                (owner_id,)
            )
            return [row_to_dict(row) for row in cursor.fetchall()]

    @staticmethod
    def list_ids_by_owner(owner_id: str) -> List[str]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id FROM fragments WHERE owner_id = ? AND deleted = 0 ORDER BY created, id",
                (owner_id,)
            )
            return [row["id"] for row in cursor.fetchall()]

    @staticmethod
    def mark_deleted(owner_id: str, fragment_id: str) -> bool:
        """
        Soft delete a fragment by setting deleted=1.

        Returns:
            False if no live record exists
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE fragments SET deleted = 1 WHERE owner_id = ? AND id = ? AND deleted = 0",
                (owner_id, fragment_id)
            )
            conn.commit()
            marked = cursor.rowcount > 0

        if marked:
            logger.debug(f"Fragment tombstoned [owner_id={owner_id}] [fragment_id={fragment_id}]")
        return marked

    @staticmethod
    def purge(owner_id: str, fragment_id: str) -> None:
        """
        Physically remove a tombstoned record. Live records are left alone.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM fragments WHERE owner_id = ? AND id = ? AND deleted = 1",
                (owner_id, fragment_id)
            )
            conn.commit()

    @staticmethod
    def list_tombstones(limit: int = 500) -> List[Tuple[str, str]]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT owner_id, id FROM fragments WHERE deleted = 1 LIMIT ?",
                (limit,)
            )
            return [(row["owner_id"], row["id"]) for row in cursor.fetchall()]
