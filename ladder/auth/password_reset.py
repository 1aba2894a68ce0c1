"""
Password reset lifecycle.

    request_reset ──► token issued ──► (background) delivered | delivery failed
                                   └─► consume_reset ──► consumed (row deleted)
                                                     └─► rejected once expired

The caller gets its answer as soon as the token row is written. Delivery
runs afterwards in a detached asyncio task that races the sender against
a timeout and only ever logs the outcome.

Issuing a new token does not revoke older ones for the same user; every
unexpired, unused token stays valid.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Coroutine, Protocol

from ladder.auth.passwords import hash_password, verify_password
from ladder.config import Settings
from ladder.core.errors import InvalidCredentials, InvalidOrExpiredToken
from ladder.core.models import ResetToken
from ladder.core.utils import Clock, generate_token, utc_now
from ladder.integrations.email import build_reset_link
from ladder.storage.base import IdentityStore, ResetTokenStore

logger = logging.getLogger(__name__)

GENERIC_RESET_MESSAGE = (
    "If an account matches that email and username, a password reset link has been sent"
)


class NotificationSender(Protocol):
    """Anything that can deliver a reset token to a user."""

    async def send_password_reset(self, email: str, reset_token: str) -> None:
        ...


class PasswordResetFlow:
    """Issue, deliver and consume single-use reset tokens."""

    def __init__(
        self,
        identities: IdentityStore,
        reset_tokens: ResetTokenStore,
        sender: NotificationSender,
        reset_ttl: timedelta = timedelta(hours=1),
        delivery_timeout: float = 15.0,
        frontend_url: str = "ladder://",
        log_reset_links: bool = False,
        clock: Clock = utc_now,
    ):
        self.identities = identities
        self.reset_tokens = reset_tokens
        self.sender = sender
        self.reset_ttl = reset_ttl
        self.delivery_timeout = delivery_timeout
        self.frontend_url = frontend_url
        self.log_reset_links = log_reset_links
        self.clock = clock
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        identities: IdentityStore,
        reset_tokens: ResetTokenStore,
        sender: NotificationSender,
    ) -> PasswordResetFlow:
        return cls(
            identities=identities,
            reset_tokens=reset_tokens,
            sender=sender,
            reset_ttl=timedelta(minutes=settings.password_reset_expire_minutes),
            delivery_timeout=settings.reset_delivery_timeout_seconds,
            frontend_url=settings.frontend_url,
            log_reset_links=not settings.is_production,
        )

    # =========================================================================
    # Request
    # =========================================================================

    async def request_reset(self, email: str, username: str) -> str:
        """
        Start a reset for the account matching both email and username.

        Always returns the same generic message so the response never
        reveals whether the account exists. Delivery is scheduled, not
        awaited.
        """
        identity = await self.identities.find_by_email_and_username(email, username)
        if identity is None:
            logger.info("Password reset requested for unknown email/username pair")
            return GENERIC_RESET_MESSAGE

        reset_token = ResetToken(
            user_id=identity.id,
            token=generate_token(),
            expires_at=self.clock() + self.reset_ttl,
        )
        await self.reset_tokens.save(reset_token)
        logger.info(f"Password reset token issued for user {identity.id}")

        self._spawn(self._deliver(identity.id, identity.email, reset_token.token))
        return GENERIC_RESET_MESSAGE

    # =========================================================================
    # Background delivery
    # =========================================================================

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        """Run `coro` detached from the caller, holding a reference until done."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, user_id: int, email: str, token: str) -> None:
        if self.log_reset_links:
            logger.info(
                f"[dev] Reset token for user {user_id}: {token} "
                f"({build_reset_link(self.frontend_url, token)})"
            )

        try:
            await asyncio.wait_for(
                self.sender.send_password_reset(email, token),
                timeout=self.delivery_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Password reset email for user {user_id} timed out after "
                f"{self.delivery_timeout}s"
            )
        except Exception as e:
            # The request was answered already; the user can ask again
            logger.error(f"Password reset email for user {user_id} failed: {e}")
        else:
            logger.info(f"Password reset email delivered for user {user_id}")

    @property
    def pending_deliveries(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # =========================================================================
    # Consume
    # =========================================================================

    async def consume_reset(self, token: str, new_password: str) -> int:
        """
        Set a new password using a reset token.

        Returns the user id. Only the consumed token is deleted; other
        outstanding tokens for the same user remain usable.

        Raises:
            InvalidOrExpiredToken: unknown, already used, or expired token
        """
        row = await self.reset_tokens.find_valid(token, self.clock())
        if row is None:
            logger.warning("Password reset attempted with invalid or expired token")
            raise InvalidOrExpiredToken()

        updated = await self.identities.update_password(row.user_id, hash_password(new_password))
        if not updated:
            await self.reset_tokens.delete(token)
            raise InvalidOrExpiredToken()

        await self.reset_tokens.delete(token)
        logger.info(f"Password reset completed for user {row.user_id}")
        return row.user_id

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        """Authenticated password change; requires the current password."""
        identity = await self.identities.find_by_id(user_id)
        if identity is None or not verify_password(current_password, identity.password_hash):
            logger.warning(f"Password change for user {user_id} rejected: bad current password")
            raise InvalidCredentials("Current password is incorrect")

        await self.identities.update_password(user_id, hash_password(new_password))
        logger.info(f"User {user_id} changed password")
