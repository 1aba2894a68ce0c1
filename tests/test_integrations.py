"""
Tests for settings validation and the email/Sentry integrations.
"""

import pytest
from botocore.exceptions import ClientError
from fastapi import HTTPException
from pydantic import ValidationError

from ladder.config import DEFAULT_JWT_SECRET, Settings
from ladder.core.errors import DeliveryFailed, Forbidden, LadderError
from ladder.integrations.email import EmailService, build_reset_link
from ladder.integrations.sentry import filter_event, init_sentry

from conftest import TEST_SECRET


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, jwt_secret_key="too-short")

    def test_default_secret_refused_in_production(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, environment="production", jwt_secret_key=DEFAULT_JWT_SECRET)

    def test_default_secret_allowed_in_development(self):
        settings = Settings(_env_file=None, environment="development", jwt_secret_key=DEFAULT_JWT_SECRET)
        assert not settings.is_production

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, cors_origins="http://a, http://b,")
        assert settings.cors_origins_list == ["http://a", "http://b"]


# =============================================================================
# Email
# =============================================================================


class FakeSES:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def send_email(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {"MessageId": "msg-123"}


def ses_settings():
    return Settings(
        _env_file=None,
        jwt_secret_key=TEST_SECRET,
        aws_ses_from_email="noreply@ladder.app",
        frontend_url="ladder://",
    )


def test_build_reset_link():
    assert build_reset_link("ladder://", "abc") == "ladder://reset-password?token=abc"


class TestEmailService:
    @pytest.mark.asyncio
    async def test_unconfigured(self):
        service = EmailService(Settings(_env_file=None, jwt_secret_key=TEST_SECRET))
        assert not service.is_configured
        with pytest.raises(DeliveryFailed):
            await service.send_password_reset("alice@example.com", "abc")

    @pytest.mark.asyncio
    async def test_send_password_reset(self):
        ses = FakeSES()
        service = EmailService(ses_settings(), client=ses)

        await service.send_password_reset("alice@example.com", "abc")

        [call] = ses.calls
        assert call["Source"] == "noreply@ladder.app"
        assert call["Destination"] == {"ToAddresses": ["alice@example.com"]}
        assert "ladder://reset-password?token=abc" in call["Message"]["Body"]["Text"]["Data"]

    @pytest.mark.asyncio
    async def test_unknown_template(self):
        service = EmailService(ses_settings(), client=FakeSES())
        with pytest.raises(DeliveryFailed):
            await service.send("alice@example.com", "welcome")

    @pytest.mark.asyncio
    async def test_ses_error(self):
        error = ClientError({"Error": {"Code": "Throttling", "Message": "slow down"}}, "SendEmail")
        service = EmailService(ses_settings(), client=FakeSES(error=error))
        with pytest.raises(DeliveryFailed):
            await service.send_password_reset("alice@example.com", "abc")


# =============================================================================
# Sentry
# =============================================================================


def hint_for(exc):
    return {"exc_info": (type(exc), exc, None)}


class TestSentry:
    def test_skipped_without_dsn(self):
        assert init_sentry(Settings(_env_file=None, sentry_dsn="")) is False

    @pytest.mark.parametrize("exc", [Forbidden(), HTTPException(status_code=404)])
    def test_client_errors_dropped(self, exc):
        assert filter_event({}, hint_for(exc)) is None

    def test_server_errors_kept(self):
        event = {"message": "boom"}
        assert filter_event(event, hint_for(LadderError())) is event

    def test_headers_scrubbed(self):
        event = {"request": {"headers": {"Authorization": "Bearer abc", "Accept": "*/*"}}}
        filtered = filter_event(event, {})
        assert filtered["request"]["headers"] == {"Authorization": "[Filtered]", "Accept": "*/*"}
