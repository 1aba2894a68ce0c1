"""
In-memory storage implementations.

Used for development and tests. Single process only; nothing persists
across restarts.
"""

from __future__ import annotations

import itertools
from datetime import datetime
from typing import Any

from ladder.core.models import (
    Connection,
    ConnectionStatus,
    Identity,
    PrivacyField,
    PrivacySettings,
    ResetToken,
    Visibility,
)
from ladder.core.utils import utc_now
from ladder.storage.base import (
    ConnectionStore,
    IdentityStore,
    ResetTokenStore,
    SettingsStore,
    StorageProvider,
    field_name,
    settings_from_row,
)


# =============================================================================
# In-Memory Identity Storage
# =============================================================================


class InMemoryIdentityStore(IdentityStore):
    """In-memory user table for development."""

    def __init__(self, identities: list[Identity] | None = None):
        self._users: dict[int, Identity] = {}
        for identity in identities or []:
            self.add(identity)

    def add(self, identity: Identity) -> Identity:
        self._users[identity.id] = identity
        return identity

    async def find_by_id(self, user_id: int) -> Identity | None:
        return self._users.get(user_id)

    async def find_by_email_or_username(self, value: str) -> Identity | None:
        needle = value.strip().lower()
        for user in self._users.values():
            if user.email.lower() == needle or user.username.lower() == needle:
                return user
        return None

    async def find_by_email_and_username(self, email: str, username: str) -> Identity | None:
        matches = [
            user for user in self._users.values()
            if user.email.lower() == email.strip().lower()
            and user.username == username.strip()
        ]
        # Exactly one account must match both columns
        return matches[0] if len(matches) == 1 else None

    async def update_password(self, user_id: int, password_hash: str) -> bool:
        user = self._users.get(user_id)
        if not user:
            return False
        self._users[user_id] = user.model_copy(update={"password_hash": password_hash})
        return True


# =============================================================================
# In-Memory Reset Token Storage
# =============================================================================


class InMemoryResetTokenStore(ResetTokenStore):
    """In-memory password_reset_tokens table."""

    def __init__(self):
        self._tokens: dict[str, ResetToken] = {}

    async def save(self, reset_token: ResetToken) -> None:
        self._tokens[reset_token.token] = reset_token

    async def find_valid(self, token: str, now: datetime) -> ResetToken | None:
        row = self._tokens.get(token)
        if row and row.is_valid_at(now):
            return row
        return None

    async def delete(self, token: str) -> bool:
        return self._tokens.pop(token, None) is not None

    async def list_for_user(self, user_id: int) -> list[ResetToken]:
        return [t for t in self._tokens.values() if t.user_id == user_id]


# =============================================================================
# In-Memory Connection Storage
# =============================================================================


class InMemoryConnectionStore(ConnectionStore):
    """In-memory user_connections table."""

    def __init__(self):
        self._rows: dict[int, Connection] = {}
        self._ids = itertools.count(1)

    async def create(self, requester_id: int, addressee_id: int, status: ConnectionStatus) -> Connection:
        now = utc_now()
        connection = Connection(
            id=next(self._ids),
            requester_id=requester_id,
            addressee_id=addressee_id,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self._rows[connection.id] = connection
        return connection

    async def get(self, connection_id: int) -> Connection | None:
        return self._rows.get(connection_id)

    async def find_between(self, user_a: int, user_b: int) -> Connection | None:
        pair = {user_a, user_b}
        for row in self._rows.values():
            if {row.requester_id, row.addressee_id} == pair:
                return row
        return None

    async def update_status(self, connection_id: int, status: ConnectionStatus) -> Connection | None:
        row = self._rows.get(connection_id)
        if not row:
            return None
        updated = row.model_copy(update={"status": status, "updated_at": utc_now()})
        self._rows[connection_id] = updated
        return updated

    async def delete(self, connection_id: int) -> bool:
        return self._rows.pop(connection_id, None) is not None

    async def list_for_user(
        self,
        user_id: int,
        status: ConnectionStatus | None = None,
    ) -> list[Connection]:
        return [
            row for row in self._rows.values()
            if row.involves(user_id) and (status is None or row.status == status)
        ]


# =============================================================================
# In-Memory Settings Storage
# =============================================================================


class InMemorySettingsStore(SettingsStore):
    """In-memory user_settings table."""

    def __init__(self):
        self._rows: dict[int, dict[str, Any]] = {}

    async def get_visibility(self, owner_id: int, field: PrivacyField | str) -> Visibility | str | None:
        return self._rows.get(owner_id, {}).get(field_name(field))

    async def get_settings(self, owner_id: int) -> PrivacySettings:
        return settings_from_row(self._rows.get(owner_id))

    async def set_visibility(self, owner_id: int, field: PrivacyField | str, value: Visibility | str) -> None:
        stored = value.value if isinstance(value, Visibility) else value
        self._rows.setdefault(owner_id, {})[field_name(field)] = stored


# =============================================================================
# Factory
# =============================================================================


def create_local_storage(identities: list[Identity] | None = None) -> StorageProvider:
    """
    Create a storage provider with in-memory implementations.

    Args:
        identities: Accounts to seed the identity store with

    Returns:
        Configured StorageProvider
    """
    return StorageProvider(
        identities=InMemoryIdentityStore(identities),
        reset_tokens=InMemoryResetTokenStore(),
        connections=InMemoryConnectionStore(),
        settings=InMemorySettingsStore(),
    )
