# =============================================================================
# Email Delivery Integration (AWS SES)
# =============================================================================
#
# Setup:
#   1. Verify your sending email in AWS SES console
#   2. Set env vars:
#      - LADDER_AWS_SES_FROM_EMAIL=noreply@yourdomain.com
#      - LADDER_AWS_ACCESS_KEY_ID=...
#      - LADDER_AWS_SECRET_ACCESS_KEY=...
#      - LADDER_AWS_REGION=us-east-1
#
# The reset flow calls send_password_reset() from a background task and
# only logs the outcome, so every failure here is raised as DeliveryFailed
# rather than returned.
#
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ladder.config import Settings, get_settings
from ladder.core.errors import DeliveryFailed

logger = logging.getLogger(__name__)


# =============================================================================
# Email Templates
# =============================================================================

TEMPLATES = {
    "password_reset": {
        "subject": "Password Reset - Ladder App",
        "html": """
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h2 style="color: #4f46e5;">Password Reset Request</h2>
            <p>You requested a password reset for your Ladder account.</p>
            <p>Tap the button below to reset your password:</p>
            <div style="text-align: center; margin: 30px 0;">
                <a href="{reset_url}" style="background-color: #4f46e5; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; display: inline-block;">Reset Password</a>
            </div>
            <p>Or copy and paste this link:</p>
            <p style="word-break: break-all; color: #666;">{reset_url}</p>
            <p><strong>This link will expire in 1 hour.</strong></p>
            <p>If you didn't request this password reset, please ignore this email.</p>
        </div>
        """,
        "text": """
Password Reset Request

You requested a password reset for your Ladder account. Open this link to choose a new password:
{reset_url}

This link will expire in 1 hour.

If you didn't request this password reset, please ignore this email.
        """,
    },
}


def build_reset_link(frontend_url: str, token: str) -> str:
    """Deep link the mobile app opens on the reset screen."""
    return f"{frontend_url}reset-password?token={token}"


# =============================================================================
# Email Service
# =============================================================================

class EmailService:
    """Send emails via AWS SES."""

    def __init__(self, settings: Settings | None = None, client: Any = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        """Lazy-load SES client."""
        if self._client is None and self.settings.use_aws:
            self._client = boto3.client(
                'ses',
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return self.client is not None and bool(self.settings.aws_ses_from_email)

    async def send(
        self,
        to: str,
        template: str,
        data: dict[str, Any] | None = None,
    ) -> str:
        """
        Send an email using a template.

        Args:
            to: Recipient email address
            template: Template name (e.g., "password_reset")
            data: Template variables to substitute

        Returns:
            The SES message id

        Raises:
            DeliveryFailed: not configured, unknown template, or SES error
        """
        if not self.is_configured:
            logger.warning(f"Email not configured - cannot send '{template}' to {to}")
            raise DeliveryFailed("Email service not configured")

        if template not in TEMPLATES:
            raise DeliveryFailed(f"Unknown email template: {template}")

        tpl = TEMPLATES[template]
        data = data or {}

        try:
            html_body = tpl["html"].format(**data)
            text_body = tpl["text"].format(**data)
        except KeyError as e:
            raise DeliveryFailed(f"Missing template variable for '{template}': {e}")

        try:
            # boto3 is blocking; keep it off the event loop so callers can time out
            response = await asyncio.to_thread(
                self.client.send_email,
                Source=self.settings.aws_ses_from_email,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": tpl["subject"], "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": html_body, "Charset": "UTF-8"},
                        "Text": {"Data": text_body, "Charset": "UTF-8"},
                    },
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise DeliveryFailed(f"SES rejected '{template}' email: {e}") from e

        message_id = response["MessageId"]
        logger.info(f"Email sent to {to}: {template} (MessageId: {message_id})")
        return message_id

    async def send_password_reset(self, email: str, reset_token: str) -> None:
        """Send password reset email."""
        await self.send(
            to=email,
            template="password_reset",
            data={"reset_url": build_reset_link(self.settings.frontend_url, reset_token)},
        )

