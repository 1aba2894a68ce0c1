"""
Core data models for the access-control core.

Identities and settings are owned by other subsystems; this package only
reads them. Connections and reset tokens are created and mutated here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ladder.core.utils import utc_now


# =============================================================================
# Enums
# =============================================================================


class Role(str, Enum):
    """Platform-wide role of a user."""

    USER = "user"
    ADMIN = "admin"


class ConnectionStatus(str, Enum):
    """Lifecycle state of a connection row."""

    PENDING = "pending"    # Requested, waiting on the addressee
    ACCEPTED = "accepted"  # Mutual connection
    DECLINED = "declined"  # Addressee said no; a new request may follow
    BLOCKED = "blocked"    # No further requests in either direction


class Visibility(str, Enum):
    """
    Audience allowed to see a category of a user's content.

    Unset or unrecognised values resolve to EVERYONE. Older rows written
    before the connections model used public/private/friends; those map
    to their current equivalents.
    """

    EVERYONE = "everyone"
    CONNECTIONS = "connections"
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> Visibility:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _LEGACY_VISIBILITY:
                return _LEGACY_VISIBILITY[normalized]
            try:
                return cls(normalized)
            except ValueError:
                pass
        return cls.EVERYONE


_LEGACY_VISIBILITY = {
    "public": Visibility.EVERYONE,
    "private": Visibility.NONE,
    "friends": Visibility.CONNECTIONS,
}


class PrivacyField(str, Enum):
    """Content categories that carry their own visibility setting."""

    COMMUNITY_POSTS = "community_posts_visibility"
    POSTS_ON_PROFILE = "posts_on_profile_visibility"
    OPPORTUNITIES_ON_PROFILE = "opportunities_on_profile_visibility"
    APPLICATIONS_ON_PROFILE = "applications_on_profile_visibility"


# =============================================================================
# Identity
# =============================================================================


class Identity(BaseModel):
    """
    A user account as seen by the auth core.

    `role` is the source of truth for admin rights. `is_admin` is the
    legacy column from before roles existed; records that only carry it
    are still treated as admins.
    """

    id: int
    email: str
    username: str
    full_name: str | None = None
    role: Role = Role.USER
    is_admin: bool = False
    is_active: bool = True
    password_hash: str = Field(default="", repr=False)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def has_admin_rights(self) -> bool:
        return self.role == Role.ADMIN or self.is_admin


class IdentityResponse(BaseModel):
    """Identity data returned to clients (no credential fields)."""

    id: int
    email: str
    username: str
    full_name: str | None = None
    role: Role
    is_admin: bool

    @classmethod
    def from_identity(cls, identity: Identity) -> IdentityResponse:
        return cls(
            id=identity.id,
            email=identity.email,
            username=identity.username,
            full_name=identity.full_name,
            role=identity.role,
            is_admin=identity.has_admin_rights,
        )


# =============================================================================
# Password Reset
# =============================================================================


class ResetToken(BaseModel):
    """A single-use password reset token."""

    user_id: int
    token: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)

    def is_valid_at(self, now: datetime) -> bool:
        return self.expires_at > now


# =============================================================================
# Connections
# =============================================================================


class Connection(BaseModel):
    """
    A relationship row between two users.

    Rows are directional (requester -> addressee) but "connected" queries
    treat the pair as unordered.
    """

    id: int
    requester_id: int
    addressee_id: int
    status: ConnectionStatus = ConnectionStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def involves(self, user_id: int) -> bool:
        return user_id in (self.requester_id, self.addressee_id)

    def other_party(self, user_id: int) -> int:
        return self.addressee_id if self.requester_id == user_id else self.requester_id

    def direction_for(self, user_id: int) -> str:
        return "outgoing" if self.requester_id == user_id else "incoming"


# =============================================================================
# Privacy Settings
# =============================================================================


class PrivacySettings(BaseModel):
    """An owner's visibility settings with defaults filled in."""

    community_posts_visibility: Visibility = Visibility.EVERYONE
    posts_on_profile_visibility: Visibility = Visibility.EVERYONE
    opportunities_on_profile_visibility: Visibility = Visibility.EVERYONE
    applications_on_profile_visibility: Visibility = Visibility.EVERYONE

    def get(self, field: PrivacyField | str) -> Visibility:
        name = field.value if isinstance(field, PrivacyField) else field
        return Visibility.parse(getattr(self, name, None))
