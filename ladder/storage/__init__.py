"""
Storage abstractions.

- IdentityStore   → users table
- ResetTokenStore → password_reset_tokens table
- ConnectionStore → user_connections table
- SettingsStore   → user_settings table
"""

from ladder.storage.base import (
    IdentityStore,
    ResetTokenStore,
    ConnectionStore,
    SettingsStore,
    StorageProvider,
)
from ladder.storage.local import (
    InMemoryIdentityStore,
    InMemoryResetTokenStore,
    InMemoryConnectionStore,
    InMemorySettingsStore,
    create_local_storage,
)

__all__ = [
    "IdentityStore",
    "ResetTokenStore",
    "ConnectionStore",
    "SettingsStore",
    "StorageProvider",
    "InMemoryIdentityStore",
    "InMemoryResetTokenStore",
    "InMemoryConnectionStore",
    "InMemorySettingsStore",
    "create_local_storage",
]
