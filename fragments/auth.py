"""Authentication and owner-id hashing utilities."""

import asyncio
import hashlib
from pathlib import Path
from typing import Dict, Optional, Tuple

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from common.logging_config import get_logger
from fragments import config
from fragments.exceptions import InvalidCredentialsError

logger = get_logger(__name__)

security = HTTPBasic(auto_error=False)

_htpasswd_cache: Dict[str, Tuple[float, Dict[str, str]]] = {}


def hash_owner_id(email: str) -> str:
    """
    Hash an identity (e.g. an email address) into an owner id.

    Args:
        email: Authenticated identifier

    Returns:
        Hex-encoded SHA-256 digest
    """
    return hashlib.sha256(email.encode('utf-8')).hexdigest()


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt, suitable for an htpasswd entry.
    """
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Returns:
        True if password matches hash, False otherwise
    """
    password_bytes = password.encode('utf-8')
    hash_bytes = password_hash.encode('utf-8')
    try:
        return bcrypt.checkpw(password_bytes, hash_bytes)
    except ValueError:
        logger.warning("Malformed password hash in htpasswd file")
        return False


def load_htpasswd(path: str) -> Dict[str, str]:
    """
    Parse an htpasswd file of ``user:bcrypt-hash`` lines.

    The parsed file is cached until its modification time changes.

    Raises:
        InvalidCredentialsError: If the file cannot be read
    """
    file_path = Path(path)
    try:
        mtime = file_path.stat().st_mtime
    except OSError as e:
        logger.error(f"Unable to read htpasswd file {path}: {e}")
        raise InvalidCredentialsError("No authorization configuration found") from e

    cached = _htpasswd_cache.get(path)
    if cached and cached[0] == mtime:
        return cached[1]

    entries = {}
    for line in file_path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or ':' not in line:
            continue
        username, password_hash = line.split(':', 1)
        entries[username] = password_hash

    _htpasswd_cache[path] = (mtime, entries)
    return entries


def authenticate(username: str, password: str, htpasswd_path: Optional[str] = None) -> str:
    """
    Check Basic credentials against the password file.

    Returns:
        Owner id (hashed username)

    Raises:
        InvalidCredentialsError: If the user is unknown or the password is wrong
    """
    htpasswd_path = htpasswd_path or config.HTPASSWD_FILE
    if not htpasswd_path:
        logger.error("HTPASSWD_FILE is not configured")
        raise InvalidCredentialsError("No authorization configuration found")

    password_hash = load_htpasswd(htpasswd_path).get(username)
    if password_hash is None or not verify_password(password, password_hash):
        logger.warning(f"Authentication failed for user: {username}")
        raise InvalidCredentialsError("Unauthorized")

    return hash_owner_id(username)


async def get_current_owner(
    request: Request,
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
) -> str:
    """
    FastAPI dependency validating Basic credentials.

    Returns:
        Owner id of the authenticated user

    Raises:
        InvalidCredentialsError: 401 if credentials are missing or invalid
    """
    if credentials is None:
        raise InvalidCredentialsError("Unauthorized")

    owner_id = await asyncio.to_thread(authenticate, credentials.username, credentials.password)
    request.state.owner_id = owner_id
    return owner_id
