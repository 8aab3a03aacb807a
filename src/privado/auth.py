"""User key management and identity hashing."""

from __future__ import annotations

import hashlib
import logging
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from privado.ci import CISession

logger = logging.getLogger(__name__)

DEFAULT_CI_USER_IDENTIFIER = "PrivadoDefaultCIUserIdentifier"


def calculate_sha256_hash(key: str) -> str:
    """Hex SHA-256 digest of *key*. Empty keys are rejected."""
    return _sha256(key).hexdigest()


def generate_user_key_from_string(msg: str) -> str:
    """Derive a stable UUID from the first 16 bytes of the SHA-256 of *msg*."""
    return str(uuid.UUID(bytes=_sha256(msg).digest()[:16]))


def generate_user_key(ci_session: CISession) -> str:
    """Return a new user key; deterministic per CI user when running in CI."""
    if not ci_session.is_ci:
        return str(uuid.uuid4())

    if not ci_session.user_identifier:
        logger.info("Unknown CI identifier. Setting default CI user")
        ci_session.user_identifier = DEFAULT_CI_USER_IDENTIFIER
    logger.info("Identified CI user: %s", ci_session.user_identifier)
    return generate_user_key_from_string(ci_session.user_identifier)


def bootstrap_user_key(key_path: Path, ci_session: CISession) -> None:
    """Ensure a valid user key exists at *key_path*; regenerate invalid keys.

    An existing valid key always wins over the CI-derived one.
    """
    if get_user_key(key_path):
        return
    key_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_text(generate_user_key(ci_session))
    key_path.chmod(0o600)


def get_user_key(key_path: Path) -> str:
    """Return the UUID stored at *key_path*, or ``""`` when missing/invalid."""
    try:
        return str(uuid.UUID(key_path.read_text().strip()))
    except (OSError, ValueError):
        return ""


def get_user_hash(key_path: Path) -> str:
    return calculate_sha256_hash(get_user_key(key_path))


def _sha256(key: str) -> hashlib._Hash:
    if not key:
        msg = "refusing to hash an empty key"
        raise ValueError(msg)
    return hashlib.sha256(key.encode())
