"""
Tests for the bearer token codec.
"""

from datetime import timedelta

import jwt
import pytest

from ladder.auth.jwt import TokenCodec, issue_token, verify_token
from ladder.core.errors import TokenExpired, TokenInvalid, TokenNotYetActive
from ladder.core.utils import utc_now

from conftest import TEST_SECRET, FakeClock


def corrupt_signature(token: str) -> str:
    head, signature = token.rsplit(".", 1)
    i = len(signature) // 2
    flipped = "A" if signature[i] != "A" else "B"
    return f"{head}.{signature[:i]}{flipped}{signature[i + 1:]}"


class TestIssueVerify:
    @pytest.mark.parametrize("user_id", [1, 7, 42, 10_000_000])
    def test_round_trip(self, codec, user_id):
        payload = codec.verify(codec.issue(user_id))
        assert payload.user_id == user_id

    def test_claims(self, codec):
        token = codec.issue(7)
        claims = jwt.decode(token, options={"verify_signature": False})
        assert claims["userId"] == 7
        assert claims["iss"] == "ladder-backend"
        assert claims["aud"] == "ladder-app"
        assert "nbf" not in claims

    def test_expiry_uses_ttl(self, codec):
        payload = codec.verify(codec.issue(7, ttl=timedelta(minutes=5)))
        assert payload.expires_at - payload.issued_at == timedelta(minutes=5)

    def test_default_ttl_from_settings(self, codec, settings):
        payload = codec.verify(codec.issue(7))
        assert payload.expires_at - payload.issued_at == timedelta(
            minutes=settings.jwt_access_token_expire_minutes
        )


class TestRejection:
    def test_expired(self, codec):
        token = codec.issue(7, ttl=timedelta(seconds=-5))
        with pytest.raises(TokenExpired):
            codec.verify(token)

    def test_expiry_follows_codec_clock(self):
        clock = FakeClock()
        codec = TokenCodec(TEST_SECRET, "ladder-backend", "ladder-app", clock=clock)
        token = codec.issue(7, ttl=timedelta(minutes=5))

        clock.advance(minutes=4)
        assert codec.verify(token).user_id == 7

        clock.advance(hours=1)
        with pytest.raises(TokenExpired):
            codec.verify(token)

    def test_clock_ahead_of_system_time(self):
        clock = FakeClock(utc_now() + timedelta(hours=2))
        codec = TokenCodec(TEST_SECRET, "ladder-backend", "ladder-app", clock=clock)
        assert codec.verify(codec.issue(7)).user_id == 7

    def test_not_yet_active_follows_codec_clock(self):
        clock = FakeClock()
        codec = TokenCodec(TEST_SECRET, "ladder-backend", "ladder-app", clock=clock)
        now = clock()
        token = jwt.encode(
            {
                "userId": 7,
                "iat": now,
                "nbf": now + timedelta(minutes=10),
                "exp": now + timedelta(hours=1),
                "iss": codec.issuer,
                "aud": codec.audience,
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(TokenNotYetActive):
            codec.verify(token)

        clock.advance(minutes=11)
        assert codec.verify(token).user_id == 7

    def test_corrupted_signature(self, codec):
        with pytest.raises(TokenInvalid):
            codec.verify(corrupt_signature(codec.issue(7)))

    def test_wrong_secret(self, codec):
        other = TokenCodec("x" * 40, codec.issuer, codec.audience)
        with pytest.raises(TokenInvalid):
            codec.verify(other.issue(7))

    def test_wrong_issuer(self, codec):
        other = TokenCodec(TEST_SECRET, "someone-else", codec.audience)
        with pytest.raises(TokenInvalid):
            codec.verify(other.issue(7))

    def test_wrong_audience(self, codec):
        other = TokenCodec(TEST_SECRET, codec.issuer, "web-app")
        with pytest.raises(TokenInvalid):
            codec.verify(other.issue(7))

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_malformed(self, codec, token):
        with pytest.raises(TokenInvalid):
            codec.verify(token)

    def test_not_yet_active(self, codec):
        now = utc_now()
        token = jwt.encode(
            {
                "userId": 7,
                "iat": now,
                "nbf": now + timedelta(minutes=10),
                "exp": now + timedelta(hours=1),
                "iss": codec.issuer,
                "aud": codec.audience,
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(TokenNotYetActive):
            codec.verify(token)

    @pytest.mark.parametrize("user_id", [None, "7", True])
    def test_bad_user_id_claim(self, codec, user_id):
        now = utc_now()
        claims = {
            "iat": now,
            "exp": now + timedelta(hours=1),
            "iss": codec.issuer,
            "aud": codec.audience,
        }
        if user_id is not None:
            claims["userId"] = user_id
        token = jwt.encode(claims, TEST_SECRET, algorithm="HS256")
        with pytest.raises(TokenInvalid):
            codec.verify(token)


def test_shared_codec_round_trip():
    assert verify_token(issue_token(99)).user_id == 99
