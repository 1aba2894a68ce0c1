"""
Shared utility functions for the ladder core.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Any, Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def generate_token(nbytes: int = 32) -> str:
    """
    Generate a random hex token.
    
    32 bytes gives 256 bits of entropy and a 64 character string.
    """
    return secrets.token_hex(nbytes)


def normalize_id(value: Any) -> int | None:
    """
    Coerce a user or resource id to int.
    
    Returns None for anything that is not a whole number (path params
    arrive as strings, JSON bodies as ints).
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None
