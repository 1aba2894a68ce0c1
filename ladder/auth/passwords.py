# =============================================================================
# Password Hashing
# =============================================================================
#
# Account passwords are bcrypt hashes ("$2a$..." rows written by the existing
# Node backend, "$2b$..." rows written here). The cost factor for new hashes
# comes from LADDER_PASSWORD_HASH_ROUNDS.
#
# =============================================================================

from __future__ import annotations

import bcrypt

from ladder.config import get_settings

# bcrypt ignores everything past 72 bytes; newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds or get_settings().password_hash_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored bcrypt hash; malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        return False
