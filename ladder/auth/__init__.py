"""
Authentication and authorization.

- TokenCodec signs and verifies bearer tokens
- AuthGate turns a bearer header into an AuthContext, or rejects
- policies expose the gate as FastAPI dependencies
- PasswordResetFlow issues and consumes single-use reset tokens
"""

from ladder.auth.context import AuthContext
from ladder.auth.gate import AuthGate, extract_bearer_token
from ladder.auth.jwt import (
    TokenCodec,
    TokenPayload,
    TokenResponse,
    get_token_codec,
    issue_token,
    verify_token,
)
from ladder.auth.password_reset import (
    GENERIC_RESET_MESSAGE,
    NotificationSender,
    PasswordResetFlow,
)
from ladder.auth.passwords import hash_password, verify_password
from ladder.auth.policies import (
    require_auth,
    optional_auth,
    require_role,
    require_any_role,
    require_admin,
    require_ownership,
)

__all__ = [
    # Main interface
    "require_auth",
    "optional_auth",
    "require_role",
    "require_any_role",
    "require_admin",
    "require_ownership",
    "AuthContext",
    "AuthGate",
    "extract_bearer_token",
    # Tokens
    "TokenCodec",
    "TokenPayload",
    "TokenResponse",
    "get_token_codec",
    "issue_token",
    "verify_token",
    # Password reset
    "GENERIC_RESET_MESSAGE",
    "NotificationSender",
    "PasswordResetFlow",
    "hash_password",
    "verify_password",
]
