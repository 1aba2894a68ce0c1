# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/login            - Get a bearer token
#   GET  /auth/me               - Get current user
#   POST /auth/forgot-password  - Request password reset
#   POST /auth/reset-password   - Reset password with token
#   POST /auth/change-password  - Change password (authenticated)
#
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr, Field

from ladder.auth.context import AuthContext
from ladder.auth.gate import AuthGate
from ladder.auth.jwt import TokenResponse
from ladder.auth.password_reset import PasswordResetFlow
from ladder.auth.passwords import verify_password
from ladder.auth.policies import get_auth_gate, require_auth
from ladder.core.errors import AccountInactive, InvalidCredentials, TokenInvalid
from ladder.core.models import IdentityResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_reset_flow(request: Request) -> PasswordResetFlow:
    return request.app.state.reset_flow


# =============================================================================
# Request/Response Models
# =============================================================================

class LoginRequest(BaseModel):
    # Email or username
    identifier: str = Field(min_length=1)
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr
    username: str = Field(min_length=1)


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# =============================================================================
# Public Endpoints
# =============================================================================

@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, gate: AuthGate = Depends(get_auth_gate)):
    """
    Authenticate and get a token.
    """
    user = await gate.identities.find_by_email_or_username(data.identifier)
    if user is None:
        logger.warning("Login attempt with unknown email/username")
        raise InvalidCredentials()

    if not user.is_active:
        logger.warning(f"Login attempt with inactive account {user.id}")
        raise AccountInactive()

    if not verify_password(data.password, user.password_hash):
        logger.warning(f"Login attempt with invalid password for user {user.id}")
        raise InvalidCredentials()

    logger.info(f"User {user.id} logged in")
    return gate.codec.token_response(user.id)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    flow: PasswordResetFlow = Depends(get_reset_flow),
):
    """
    Request a password reset email.

    Always returns success to prevent account enumeration. The email is
    sent after this response goes out.
    """
    message = await flow.request_reset(data.email, data.username)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    flow: PasswordResetFlow = Depends(get_reset_flow),
):
    """
    Reset password using token from email.
    """
    await flow.consume_reset(data.token, data.new_password)
    return MessageResponse(message="Password reset successfully")


# =============================================================================
# Protected Endpoints
# =============================================================================

@router.get("/me", response_model=IdentityResponse)
async def get_current_user(
    ctx: AuthContext = Depends(require_auth()),
    gate: AuthGate = Depends(get_auth_gate),
):
    """
    Get the current authenticated user.
    """
    user = await gate.identities.find_by_id(ctx.user_id)
    if user is None:
        raise TokenInvalid("Invalid token: User not found")
    return IdentityResponse.from_identity(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    data: ChangePasswordRequest,
    ctx: AuthContext = Depends(require_auth()),
    flow: PasswordResetFlow = Depends(get_reset_flow),
):
    await flow.change_password(ctx.user_id, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")
