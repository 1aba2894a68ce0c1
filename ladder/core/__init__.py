"""Core models, errors and shared utilities."""

from ladder.core.errors import (
    LadderError,
    TokenError,
    TokenMissing,
    TokenInvalid,
    TokenExpired,
    TokenNotYetActive,
    AccountInactive,
    InvalidCredentials,
    Forbidden,
    ConnectionRequestError,
    SelfConnection,
    AlreadyConnected,
    AlreadyPending,
    Blocked,
    ConnectionNotFound,
    InvalidOrExpiredToken,
    DeliveryFailed,
)
from ladder.core.models import (
    Role,
    Identity,
    ResetToken,
    Connection,
    ConnectionStatus,
    Visibility,
    PrivacyField,
    PrivacySettings,
)

__all__ = [
    # Errors
    "LadderError",
    "TokenError",
    "TokenMissing",
    "TokenInvalid",
    "TokenExpired",
    "TokenNotYetActive",
    "AccountInactive",
    "InvalidCredentials",
    "Forbidden",
    "ConnectionRequestError",
    "SelfConnection",
    "AlreadyConnected",
    "AlreadyPending",
    "Blocked",
    "ConnectionNotFound",
    "InvalidOrExpiredToken",
    "DeliveryFailed",
    # Models
    "Role",
    "Identity",
    "ResetToken",
    "Connection",
    "ConnectionStatus",
    "Visibility",
    "PrivacyField",
    "PrivacySettings",
]
