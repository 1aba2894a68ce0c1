"""
Error taxonomy for the access-control core.

Every failure the core can surface is a LadderError carrying the HTTP
status it maps to and a generic, client-safe message. The API layer
renders these through a single exception handler.
"""

from __future__ import annotations


class LadderError(Exception):
    """Base exception for all ladder errors."""
    
    status_code: int = 500
    default_message: str = "Internal server error"
    
    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# Authentication (401)
# =============================================================================


class TokenError(LadderError):
    """Base exception for bearer token failures."""
    status_code = 401
    default_message = "Authentication failed"


class TokenMissing(TokenError):
    """No bearer token on the request."""
    default_message = "Access token is required"


class TokenInvalid(TokenError):
    """Bad signature, malformed token, wrong issuer/audience, or unknown user."""
    default_message = "Invalid token"


class TokenExpired(TokenError):
    """Token is past its exp claim."""
    default_message = "Token has expired"


class TokenNotYetActive(TokenError):
    """Token is before its nbf claim."""
    default_message = "Token not yet active"


class AccountInactive(LadderError):
    status_code = 401
    default_message = "Account is inactive"


class InvalidCredentials(LadderError):
    status_code = 401
    default_message = "Invalid email or password"


# =============================================================================
# Authorization (403)
# =============================================================================


class Forbidden(LadderError):
    """Role or ownership gate rejected the identity."""
    status_code = 403
    default_message = "Access denied"


# =============================================================================
# Connections
# =============================================================================


class ConnectionRequestError(LadderError):
    """Base exception for rejected connection requests."""
    status_code = 400
    default_message = "Connection request rejected"


class SelfConnection(ConnectionRequestError):
    default_message = "Cannot send connection request to yourself"


class AlreadyConnected(ConnectionRequestError):
    default_message = "Already connected"


class AlreadyPending(ConnectionRequestError):
    default_message = "Connection request already pending"


class Blocked(ConnectionRequestError):
    default_message = "Connection blocked"


class ConnectionNotFound(LadderError):
    status_code = 404
    default_message = "Connection request not found or already processed"


# =============================================================================
# Password Reset
# =============================================================================


class InvalidOrExpiredToken(LadderError):
    status_code = 400
    default_message = "Invalid or expired reset token"


class DeliveryFailed(LadderError):
    """
    Reset notification could not be delivered.
    
    Only ever logged; the reset request has already been answered.
    """
    status_code = 502
    default_message = "Notification delivery failed"
