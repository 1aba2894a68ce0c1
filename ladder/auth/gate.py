"""
AuthGate - the filter every protected request passes through.

    no token ──► TokenMissing
    token ──► TokenCodec.verify ──► TokenExpired / TokenNotYetActive / TokenInvalid
          └──► identity lookup ──► not found: TokenInvalid
                               ├─► inactive:  AccountInactive
                               └─► AuthContext

Role and ownership gates run on the resulting AuthContext and raise
Forbidden. They never touch storage.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Iterable

from ladder.auth.context import AuthContext
from ladder.auth.jwt import TokenCodec, TokenPayload
from ladder.core.errors import (
    AccountInactive,
    Forbidden,
    LadderError,
    TokenInvalid,
    TokenMissing,
)
from ladder.core.models import Role
from ladder.core.utils import normalize_id
from ladder.storage.base import IdentityStore

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Pull the token out of an `Authorization: Bearer <token>` header.

    The scheme name is matched case-insensitively.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    return token.strip() or None


class AuthGate:
    """Authenticate requests and gate them on role or ownership."""

    def __init__(self, codec: TokenCodec, identities: IdentityStore):
        self.codec = codec
        self.identities = identities

    # =========================================================================
    # Tokens
    # =========================================================================

    def issue_token(self, user_id: int, ttl: timedelta | None = None) -> str:
        return self.codec.issue(user_id, ttl)

    def verify_token(self, token: str) -> TokenPayload:
        return self.codec.verify(token)

    # =========================================================================
    # Authentication
    # =========================================================================

    async def authenticate(self, authorization: str | None, path: str = "") -> AuthContext:
        """
        Resolve the request's identity or raise.

        Exactly one identity lookup happens, after the token verifies.
        """
        token = extract_bearer_token(authorization)
        if not token:
            logger.warning(f"Authentication failed: no token provided (path={path})")
            raise TokenMissing()

        try:
            payload = self.codec.verify(token)
        except LadderError as e:
            logger.warning(f"Authentication failed: {e.message} (path={path})")
            raise

        identity = await self.identities.find_by_id(payload.user_id)
        if identity is None:
            logger.warning(
                f"Authentication failed: user {payload.user_id} not found (path={path})"
            )
            raise TokenInvalid("Invalid token: User not found")

        if not identity.is_active:
            logger.warning(
                f"Authentication failed: account {identity.id} is inactive (path={path})"
            )
            raise AccountInactive()

        logger.info(f"User {identity.id} authenticated (role={identity.role.value}, path={path})")
        return AuthContext.from_identity(identity)

    async def optional_authenticate(self, authorization: str | None, path: str = "") -> AuthContext:
        """Like authenticate, but any failure yields an anonymous context."""
        if not extract_bearer_token(authorization):
            return AuthContext.anonymous()
        try:
            return await self.authenticate(authorization, path)
        except LadderError as e:
            logger.debug(f"Optional auth fell back to anonymous: {e.message}")
            return AuthContext.anonymous()

    # =========================================================================
    # Authorization
    # =========================================================================

    @staticmethod
    def require_authenticated(ctx: AuthContext) -> AuthContext:
        if ctx.is_anonymous:
            raise TokenMissing("Authentication required")
        return ctx

    @staticmethod
    def require_role(ctx: AuthContext, role: Role | str) -> AuthContext:
        AuthGate.require_authenticated(ctx)
        if not ctx.has_role(role):
            wanted = role.value if isinstance(role, Role) else role
            logger.warning(
                f"Authorization failed: user {ctx.user_id} has role "
                f"{ctx.role.value if ctx.role else None}, needs {wanted}"
            )
            raise Forbidden(f"{wanted} privileges required")
        return ctx

    @staticmethod
    def require_any_role(ctx: AuthContext, roles: Iterable[Role | str]) -> AuthContext:
        AuthGate.require_authenticated(ctx)
        wanted = [r.value if isinstance(r, Role) else r for r in roles]
        if not any(ctx.has_role(r) for r in wanted):
            logger.warning(
                f"Authorization failed: user {ctx.user_id} lacks any of {wanted}"
            )
            raise Forbidden(f"One of the following roles required: {', '.join(wanted)}")
        return ctx

    @staticmethod
    def require_admin(ctx: AuthContext) -> AuthContext:
        """Admin by role, or by the legacy is_admin flag."""
        AuthGate.require_authenticated(ctx)
        if not ctx.has_admin_rights:
            logger.warning(f"Authorization failed: user {ctx.user_id} is not an admin")
            raise Forbidden("Admin privileges required")
        logger.info(f"Admin access granted to user {ctx.user_id}")
        return ctx

    @staticmethod
    def require_ownership(ctx: AuthContext, resource_id: Any) -> AuthContext:
        """
        Allow admins, or the user whose id equals `resource_id`.

        Ids are compared as integers; a non-numeric resource id never matches.
        """
        AuthGate.require_authenticated(ctx)
        if ctx.has_admin_rights:
            return ctx

        owner_id = normalize_id(resource_id)
        if owner_id is None or owner_id != ctx.user_id:
            logger.warning(
                f"Authorization failed: user {ctx.user_id} does not own resource {resource_id!r}"
            )
            raise Forbidden("You can only access your own resources")
        return ctx
