"""Utility helper functions for the fragments service."""

import uuid
from datetime import datetime, timezone


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO-8601 format.

    Returns:
        Current timestamp as ISO format string with offset
    """
    return datetime.now(timezone.utc).isoformat()


def parse_bool(value) -> bool:
    """
    Interpret query-string flags such as ``expand=1`` or ``expand=true``.
    """
    if value is None:
        return False
    return str(value).strip().lower() in ("1", "true", "yes", "on")
