"""
Storage abstraction layer.

The access-control core never talks to a database driver directly. Each
collaborator below is an async interface; implementations raise on
failure rather than returning status codes, so callers handle storage
errors the same way as any other exception.

Production implementations back these with PostgreSQL tables
(users, password_reset_tokens, user_connections, user_settings).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from ladder.core.models import (
    Connection,
    ConnectionStatus,
    Identity,
    PrivacyField,
    PrivacySettings,
    ResetToken,
    Visibility,
)


# =============================================================================
# Storage Interfaces
# =============================================================================


class IdentityStore(ABC):
    """User accounts and credentials."""

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Identity | None:
        pass

    @abstractmethod
    async def find_by_email_or_username(self, value: str) -> Identity | None:
        """Login lookup: match either column."""
        pass

    @abstractmethod
    async def find_by_email_and_username(self, email: str, username: str) -> Identity | None:
        """Reset lookup: both columns must match the same account."""
        pass

    @abstractmethod
    async def update_password(self, user_id: int, password_hash: str) -> bool:
        """Replace the stored hash. Returns False if the user does not exist."""
        pass


class ResetTokenStore(ABC):
    """Outstanding password reset tokens."""

    @abstractmethod
    async def save(self, reset_token: ResetToken) -> None:
        pass

    @abstractmethod
    async def find_valid(self, token: str, now: datetime) -> ResetToken | None:
        """Return the row for `token` only if it expires after `now`."""
        pass

    @abstractmethod
    async def delete(self, token: str) -> bool:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int) -> list[ResetToken]:
        pass


class ConnectionStore(ABC):
    """Connection rows keyed by (requester_id, addressee_id)."""

    @abstractmethod
    async def create(self, requester_id: int, addressee_id: int, status: ConnectionStatus) -> Connection:
        pass

    @abstractmethod
    async def get(self, connection_id: int) -> Connection | None:
        pass

    @abstractmethod
    async def find_between(self, user_a: int, user_b: int) -> Connection | None:
        """Find the row for the unordered pair {user_a, user_b}."""
        pass

    @abstractmethod
    async def update_status(self, connection_id: int, status: ConnectionStatus) -> Connection | None:
        pass

    @abstractmethod
    async def delete(self, connection_id: int) -> bool:
        pass

    @abstractmethod
    async def list_for_user(
        self,
        user_id: int,
        status: ConnectionStatus | None = None,
    ) -> list[Connection]:
        """Rows where the user is either party, optionally filtered by status."""
        pass


class SettingsStore(ABC):
    """Per-owner privacy settings. Read-only to the core apart from tests/admin."""

    @abstractmethod
    async def get_visibility(self, owner_id: int, field: PrivacyField | str) -> Visibility | str | None:
        """Raw stored value, or None when the owner never set it."""
        pass

    @abstractmethod
    async def get_settings(self, owner_id: int) -> PrivacySettings:
        pass

    @abstractmethod
    async def set_visibility(self, owner_id: int, field: PrivacyField | str, value: Visibility | str) -> None:
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for all storage backends.

    Initialize once at app startup with appropriate implementations.
    Services receive this and use the interfaces without knowing
    the underlying implementation.
    """

    model_config = {"arbitrary_types_allowed": True}

    identities: IdentityStore
    reset_tokens: ResetTokenStore
    connections: ConnectionStore
    settings: SettingsStore


def field_name(field: PrivacyField | str) -> str:
    return field.value if isinstance(field, PrivacyField) else str(field)


def settings_from_row(row: dict[str, Any] | None) -> PrivacySettings:
    """Build PrivacySettings from a stored row, defaulting missing columns."""
    if not row:
        return PrivacySettings()
    return PrivacySettings(**{
        f.value: Visibility.parse(row.get(f.value))
        for f in PrivacyField
    })
