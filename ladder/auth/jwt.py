# =============================================================================
# Bearer Token Codec
# =============================================================================
#
# Signs and verifies the JWTs the mobile client sends as
#   Authorization: Bearer <token>
#
# Claims: userId, iat, exp, iss, aud (nbf is honoured if present but never
# issued). Tokens are never stored; validity is decided entirely by the
# signature and claims at verification time.
#
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

import jwt
from pydantic import BaseModel

from ladder.config import Settings, get_settings
from ladder.core.errors import TokenExpired, TokenInvalid, TokenNotYetActive
from ladder.core.utils import Clock, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================

class TokenPayload(BaseModel):
    """Verified token claims."""
    user_id: int
    issued_at: datetime
    expires_at: datetime


class TokenResponse(BaseModel):
    """Token returned to the client after login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


# =============================================================================
# Codec
# =============================================================================

class TokenCodec:
    """
    Issue and verify signed bearer tokens.
    
    Pure apart from the clock: the same secret, issuer and audience always
    produce tokens the codec accepts until they expire.
    """
    
    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ):
        self.secret = secret
        self.issuer = issuer
        self.audience = audience
        self.algorithm = algorithm
        self.default_ttl = default_ttl
        self.clock = clock
    
    @classmethod
    def from_settings(cls, settings: Settings) -> TokenCodec:
        return cls(
            secret=settings.jwt_secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            algorithm=settings.jwt_algorithm,
            default_ttl=timedelta(minutes=settings.jwt_access_token_expire_minutes),
        )
    
    def issue(self, user_id: int, ttl: timedelta | None = None) -> str:
        """Create a signed token for `user_id` expiring after `ttl`."""
        now = self.clock()
        payload = {
            "userId": user_id,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.default_ttl),
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)
    
    def verify(self, token: str) -> TokenPayload:
        """
        Verify signature and claims.

        Time claims are checked against this codec's clock, not the system
        clock, so issue and verify always agree on "now".

        Raises:
            TokenExpired: at or past the exp claim
            TokenNotYetActive: before the nbf claim
            TokenInvalid: bad signature, malformed, wrong issuer/audience
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={
                    "require": ["exp", "iat", "iss", "aud"],
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise TokenInvalid()

        try:
            issued_at = _from_timestamp(claims["iat"])
            expires_at = _from_timestamp(claims["exp"])
            not_before = _from_timestamp(claims["nbf"]) if "nbf" in claims else None
        except (TypeError, ValueError, OverflowError, OSError):
            raise TokenInvalid()

        now = self.clock()
        if now >= expires_at:
            raise TokenExpired()
        if not_before is not None and now < not_before:
            raise TokenNotYetActive()

        user_id = claims.get("userId")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            raise TokenInvalid()

        return TokenPayload(
            user_id=user_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
    
    def token_response(self, user_id: int) -> TokenResponse:
        return TokenResponse(
            access_token=self.issue(user_id),
            expires_in=int(self.default_ttl.total_seconds()),
        )


def _from_timestamp(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


# =============================================================================
# Shared codec
# =============================================================================
#
# Password login and any federated login path both go through these, so
# every authenticated session carries a token from the same codec.
#

@lru_cache
def get_token_codec() -> TokenCodec:
    """Get the codec built from application settings."""
    return TokenCodec.from_settings(get_settings())


def issue_token(user_id: int, ttl: timedelta | None = None) -> str:
    return get_token_codec().issue(user_id, ttl)


def verify_token(token: str) -> TokenPayload:
    return get_token_codec().verify(token)
